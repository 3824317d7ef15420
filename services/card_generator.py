"""
Card generator: fans out one task per planned card, joins them all, and
returns the cards in plan order alongside per-index errors.
"""

import asyncio
import logging
from typing import Optional

from cards.base import GeneratorContext
from cards.registry import CardTypeRegistry, get_registry
from models.lesson_models import CardError, GeneratedCard, GenerationResult, LessonPlan, PlannedCard
from utils.exceptions import GenerationError

logger = logging.getLogger(__name__)


class CardGenerator:
    def __init__(self, client, registry: Optional[CardTypeRegistry] = None, object_store=None):
        self.client = client
        self.registry = registry or get_registry()
        self.object_store = object_store

    async def generate(
        self,
        plan: LessonPlan,
        lesson_id: str,
        lesson_title: str,
        lesson_description: str,
        lesson_content: str,
    ) -> GenerationResult:
        tasks = [
            self._generate_one(planned, lesson_id, lesson_title, lesson_description, lesson_content)
            for planned in plan.cards
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        result = GenerationResult()
        # gather returns outcomes in plan order, whatever order the tasks finished in
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(f"[generator] Card {index} ({plan.cards[index].kind}) failed: {outcome}")
                result.errors.append(CardError(index=index, error=str(outcome) or type(outcome).__name__))
            else:
                result.cards.append(outcome)

        logger.info(
            f"[generator] Lesson {lesson_id}: {len(result.cards)}/{len(plan.cards)} cards generated, "
            f"{len(result.errors)} error(s)"
        )
        return result

    async def _generate_one(
        self,
        planned: PlannedCard,
        lesson_id: str,
        lesson_title: str,
        lesson_description: str,
        lesson_content: str,
    ) -> GeneratedCard:
        kind = self.registry.get(planned.kind)
        if kind is None:
            raise GenerationError(f"Unknown card type: {planned.kind}", error_code="UNKNOWN_CARD_TYPE")

        context = GeneratorContext(
            lesson_id=lesson_id,
            lesson_content=lesson_content,
            lesson_title=lesson_title,
            lesson_description=lesson_description,
            focus=planned.focus,
            client=self.client,
            object_store=self.object_store,
        )
        return await kind.generate(context)
