"""
Core card-kind abstractions.

A card kind is a strategy object: stable name, descriptive metadata used to
prompt the planner, and an async generate(context) function. Kinds never
reference each other.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict

import pydantic

from models.lesson_models import GeneratedCard
from utils.exceptions import GenerationError
from utils.response_parsing import extract_json_object

logger = logging.getLogger(__name__)


@dataclass
class GeneratorContext:
    """Everything a kind needs to produce one card."""
    lesson_id: str
    lesson_content: str
    lesson_title: str
    lesson_description: str
    focus: str
    client: Any
    object_store: Any = None


GenerateFn = Callable[[GeneratorContext], Awaitable[GeneratedCard]]


@dataclass(frozen=True)
class CardType:
    name: str
    display_name: str
    description: str
    best_used_for: str
    generate: GenerateFn
    example_output: Dict[str, Any] = field(default_factory=dict)
    # Used by the default lesson plan
    default_focus: str = "cover the key ideas of this lesson"

    def describe(self) -> str:
        return (
            f"Type: {self.name} ({self.display_name})\n"
            f"Description: {self.description}\n"
            f"Best used for: {self.best_used_for}\n"
            f"Example output: {json.dumps(self.example_output)}"
        )


def parse_card_content(raw: str, model_cls, kind_name: str):
    """
    Parse a model response into the kind's pydantic content model.
    Returns None when the response is not usable, so the caller can fall back.
    """
    try:
        return model_cls.model_validate(extract_json_object(raw))
    except (GenerationError, pydantic.ValidationError) as e:
        logger.warning(f"[{kind_name}] Unusable model output, using fallback: {e}")
        return None
