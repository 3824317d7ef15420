"""
Lesson planner: decides which card kinds a lesson gets, and with what focus,
before any card content is generated.

Planning never raises. Model failures, unparseable output and plans that
fail validation all resolve to the registry's default plan.
"""

import logging
from typing import Any, List, Optional

from cards.registry import CardTypeRegistry, get_registry
from models.lesson_models import LessonPlan, PlannedCard
from prompts.lesson_prompts import build_lesson_plan_prompt
from utils.model_config import ModelRole
from utils.pipeline_config import MAX_PLAN_SIZE, MIN_PLAN_SIZE, PLAN_FULL_COVERAGE
from utils.response_parsing import extract_json_list

logger = logging.getLogger(__name__)


class LessonPlanner:
    def __init__(
        self,
        client,
        registry: Optional[CardTypeRegistry] = None,
        max_size: int = MAX_PLAN_SIZE,
        min_size: int = MIN_PLAN_SIZE,
        full_coverage: bool = PLAN_FULL_COVERAGE,
    ):
        self.client = client
        self.registry = registry or get_registry()
        self.max_size = max_size
        self.min_size = min_size
        self.full_coverage = full_coverage

    @property
    def required_size(self) -> int:
        if self.full_coverage:
            return max(self.min_size, len(self.registry))
        return self.min_size

    def default_plan(self) -> LessonPlan:
        """One card per registered kind, in registration order."""
        cards = [
            PlannedCard(kind=name, focus=self.registry.get(name).default_focus)
            for name in self.registry.list_names()
        ]
        return LessonPlan(cards=cards[:self.max_size], used_default=True)

    async def plan(self, lesson_title: str, lesson_description: str, lesson_content: str) -> LessonPlan:
        prompt = build_lesson_plan_prompt(
            lesson_title=lesson_title,
            lesson_description=lesson_description,
            lesson_content=lesson_content,
            catalog=self.registry.describe_all(),
            allowed_kinds=self.registry.list_names(),
            max_cards=self.max_size,
            require_all_kinds=self.full_coverage,
        )
        try:
            raw = await self.client.generate_text(prompt, role=ModelRole.PLANNER)
            entries = extract_json_list(raw, key="cards")
        except Exception as e:
            logger.warning(f"[planner] Planning failed for '{lesson_title}', using default plan: {e}")
            return self.default_plan()

        plan = self.validate(entries)
        logger.info(f"[planner] '{lesson_title}': {plan.kinds()}{' (default)' if plan.used_default else ''}")
        return plan

    def validate(self, entries: List[Any]) -> LessonPlan:
        """Drop unknown or malformed entries, cap the size, and enforce minimum and coverage."""
        cards = []
        for entry in entries:
            planned = self._to_planned_card(entry)
            if planned is None:
                continue
            cards.append(planned)
            if len(cards) == self.max_size:
                break

        if len(cards) < self.required_size:
            logger.warning(f"[planner] Plan too small ({len(cards)} < {self.required_size}), using default plan")
            return self.default_plan()

        if self.full_coverage:
            missing = set(self.registry.list_names()) - {card.kind for card in cards}
            if missing:
                logger.warning(f"[planner] Plan missing kinds {sorted(missing)}, using default plan")
                return self.default_plan()

        return LessonPlan(cards=cards)

    def _to_planned_card(self, entry: Any) -> Optional[PlannedCard]:
        if not isinstance(entry, dict):
            return None
        kind = entry.get("type") or entry.get("kind")
        if not isinstance(kind, str) or kind not in self.registry:
            logger.info(f"[planner] Dropping unknown card type: {kind!r}")
            return None
        focus = entry.get("focus")
        if not isinstance(focus, str) or not focus.strip():
            focus = self.registry.get(kind).default_focus
        return PlannedCard(kind=kind, focus=focus.strip())
