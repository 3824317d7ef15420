"""
FastAPI routes for lessons: card generation, cards and completion.
"""

from fastapi import APIRouter, Body
from typing import List
import logging

from services.lesson_generation import LessonGenerationService
from models.lesson_models import Card, CompleteLessonRequest, CompleteLessonResponse, GenerateLessonResponse
from utils.background import run_detached

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/lessons", tags=["lessons"])

# Initialize services
lesson_service = LessonGenerationService()


@router.post("/{lesson_id}/generate", response_model=GenerateLessonResponse, response_model_exclude_none=True)
async def generate_lesson_cards(lesson_id: str):
    """
    Plan and generate the cards of a lesson.

    - ready: returns {success, cached}, no new cards
    - generating: returns {success, inProgress}
    - pending: generates and returns {success, cardsGenerated, errors?}

    On error the lesson is reset to `pending` and a 500 {error} is returned.
    """
    logger.info(f"Generate requested for lesson {lesson_id}")
    return await run_detached(lesson_service.generate(lesson_id), name=f"generate-{lesson_id}")


@router.get("/{lesson_id}/cards", response_model=List[Card], response_model_exclude_none=True)
async def list_lesson_cards(lesson_id: str):
    """Cards of a lesson in order; infographic cards include a signed image_url"""
    return await lesson_service.list_cards(lesson_id)


@router.post("/{lesson_id}/complete", response_model=CompleteLessonResponse)
async def complete_lesson(lesson_id: str, body: CompleteLessonRequest = Body(...)):
    """
    Record a learner's score (0-100). A score of at least 70 marks the lesson
    completed; best_score keeps the highest score seen.
    """
    return await lesson_service.complete(lesson_id, body.score)
