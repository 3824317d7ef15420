"""
Oral exam card.

Carries the configuration for a live voice examiner: topic, context,
question count, the examiner system prompt and the end_exam tool declaration.
Audio itself is handled by the player.
"""

from typing import Any, Dict, List

from pydantic import AliasChoices, BaseModel, Field, field_validator

from cards.base import CardType, GeneratorContext, parse_card_content
from models.lesson_models import GeneratedCard
from prompts.card_prompts import build_examiner_system_prompt, build_oral_exam_prompt
from utils.model_config import ModelRole
from utils.pipeline_config import ORAL_EXAM_CONTEXT_LIMIT

NAME = "oral_exam"

MIN_QUESTIONS = 3
MAX_QUESTIONS = 5
FALLBACK_CONTEXT_CHARS = 1000

END_EXAM_TOOL: Dict[str, Any] = {
    "function_declarations": [
        {
            "name": "end_exam",
            "description": (
                "Call when the oral exam should end: after all planned questions, "
                "or once it is clear the student has passed or failed."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "passed": {
                        "type": "boolean",
                        "description": "True if the student showed reasonable understanding of the core concepts.",
                    },
                    "feedback": {
                        "type": "string",
                        "description": "2-3 sentences of constructive feedback for the student.",
                    },
                },
                "required": ["passed", "feedback"],
            },
        }
    ]
}


class OralExamPlan(BaseModel):
    topic: str = Field(..., min_length=1)
    context: str = Field(..., min_length=1)
    question_count: int = Field(..., validation_alias=AliasChoices("question_count", "questionCount"))

    @field_validator("question_count", mode="after")
    @classmethod
    def _clamp(cls, value: int) -> int:
        return min(MAX_QUESTIONS, max(MIN_QUESTIONS, value))

    @field_validator("context", mode="after")
    @classmethod
    def _truncate(cls, value: str) -> str:
        return value[:ORAL_EXAM_CONTEXT_LIMIT]


class OralExamContent(BaseModel):
    topic: str
    context: str
    question_count: int
    system_prompt: str
    tools: List[Dict[str, Any]]


def build_content(plan: OralExamPlan) -> OralExamContent:
    return OralExamContent(
        topic=plan.topic,
        context=plan.context,
        question_count=plan.question_count,
        system_prompt=build_examiner_system_prompt(plan.topic, plan.context, plan.question_count),
        tools=[END_EXAM_TOOL],
    )


def fallback_plan(context: GeneratorContext) -> OralExamPlan:
    return OralExamPlan(
        topic=context.focus or context.lesson_title,
        context=context.lesson_content[:FALLBACK_CONTEXT_CHARS] or context.lesson_title,
        question_count=MIN_QUESTIONS,
    )


async def generate(context: GeneratorContext) -> GeneratedCard:
    prompt = build_oral_exam_prompt(
        context.lesson_title, context.lesson_description, context.lesson_content, context.focus
    )
    raw = await context.client.generate_text(prompt, role=ModelRole.CARD_TEXT)
    plan = parse_card_content(raw, OralExamPlan, NAME) or fallback_plan(context)
    return GeneratedCard(type=NAME, content=build_content(plan).model_dump())


CARD_TYPE = CardType(
    name=NAME,
    display_name="Oral Exam",
    description="A spoken examination run by a live voice examiner that ends with a pass/fail result.",
    best_used_for="Capstone assessment at the end of a lesson and practice explaining concepts out loud.",
    default_focus="assess understanding of the whole lesson out loud",
    generate=generate,
    example_output={
        "topic": "The Power Rule for Derivatives",
        "context": "The power rule states that d/dx(x^n) = nx^(n-1)...",
        "question_count": 3,
        "system_prompt": "You are a friendly oral examiner...",
        "tools": [END_EXAM_TOOL],
    },
)
