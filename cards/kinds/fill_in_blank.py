"""Fill-in-the-blank card: text with {{blankN}} markers and options per blank."""

import re
from typing import Dict, List

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from cards.base import CardType, GeneratorContext, parse_card_content
from models.lesson_models import GeneratedCard
from prompts.card_prompts import build_fill_in_blank_prompt
from utils.model_config import ModelRole

NAME = "fill_in_blank"

BLANK_MARKER = re.compile(r"\{\{\s*([A-Za-z0-9_]+)\s*\}\}")


class BlankOption(BaseModel):
    text: str
    is_correct: bool = Field(False, validation_alias=AliasChoices("is_correct", "isCorrect"))


class FillInBlankContent(BaseModel):
    text: str = Field(..., min_length=1)
    blanks: Dict[str, List[BlankOption]]
    explanation: str = ""

    @field_validator("text", "explanation", mode="before")
    @classmethod
    def _join_lists(cls, value):
        if isinstance(value, list):
            return " ".join(str(part) for part in value)
        return value

    @model_validator(mode="after")
    def _check_blanks(self):
        markers = BLANK_MARKER.findall(self.text)
        if not markers:
            raise ValueError("text has no {{blank}} markers")
        for blank_id in markers:
            options = self.blanks.get(blank_id)
            if not options or len(options) < 2:
                raise ValueError(f"blank {blank_id} needs at least two options")
            if sum(1 for option in options if option.is_correct) != 1:
                raise ValueError(f"blank {blank_id} needs exactly one correct option")
        return self


def fallback_content(context: GeneratorContext) -> FillInBlankContent:
    return FillInBlankContent(
        text="The key concept here is {{blank1}}.",
        blanks={
            "blank1": [
                BlankOption(text="understanding", is_correct=True),
                BlankOption(text="confusion", is_correct=False),
                BlankOption(text="complexity", is_correct=False),
            ]
        },
        explanation=f"This exercise reviews {context.focus}.",
    )


async def generate(context: GeneratorContext) -> GeneratedCard:
    prompt = build_fill_in_blank_prompt(
        context.lesson_title, context.lesson_description, context.lesson_content, context.focus
    )
    raw = await context.client.generate_text(prompt, role=ModelRole.CARD_TEXT)
    content = parse_card_content(raw, FillInBlankContent, NAME) or fallback_content(context)
    return GeneratedCard(type=NAME, content=content.model_dump())


CARD_TYPE = CardType(
    name=NAME,
    display_name="Fill in the Blank",
    description="A sentence or short paragraph with 1-3 missing words; each blank offers 3-4 options.",
    best_used_for="Recall of key terms, formulas and definitions.",
    default_focus="practice applying the concept",
    generate=generate,
    example_output={
        "text": "The derivative of $x^n$ is {{blank1}}, known as the {{blank2}}.",
        "blanks": {
            "blank1": [
                {"text": "$nx^{n-1}$", "is_correct": True},
                {"text": "$x^{n+1}$", "is_correct": False},
                {"text": "$nx^n$", "is_correct": False},
            ],
            "blank2": [
                {"text": "power rule", "is_correct": True},
                {"text": "chain rule", "is_correct": False},
                {"text": "product rule", "is_correct": False},
            ],
        },
        "explanation": "The power rule gives $d/dx(x^n) = nx^{n-1}$.",
    },
)
