"""Multiple choice question card with four options."""

from typing import List

from pydantic import AliasChoices, BaseModel, Field, field_validator

from cards.base import CardType, GeneratorContext, parse_card_content
from models.lesson_models import GeneratedCard
from prompts.card_prompts import build_mc_question_prompt
from utils.model_config import ModelRole

NAME = "mc_question"

FALLBACK_OPTIONS = [
    "All of the above",
    "None of the above",
    "It depends on the context",
    "The first option is correct",
]


class McQuestionContent(BaseModel):
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=4, max_length=4)
    correct_index: int = Field(..., ge=0, le=3, validation_alias=AliasChoices("correct_index", "correctIndex"))
    explanation: str = ""

    # Models sometimes split prose fields into a list of sentences
    @field_validator("question", "explanation", mode="before")
    @classmethod
    def _join_lists(cls, value):
        if isinstance(value, list):
            return " ".join(str(part) for part in value)
        return value


def fallback_content(context: GeneratorContext) -> McQuestionContent:
    return McQuestionContent(
        question=f"Which statement about {context.focus} is correct?",
        options=list(FALLBACK_OPTIONS),
        correct_index=0,
        explanation="Review the lesson content for more details.",
    )


async def generate(context: GeneratorContext) -> GeneratedCard:
    prompt = build_mc_question_prompt(
        context.lesson_title, context.lesson_description, context.lesson_content, context.focus
    )
    raw = await context.client.generate_text(prompt, role=ModelRole.CARD_TEXT)
    content = parse_card_content(raw, McQuestionContent, NAME) or fallback_content(context)
    return GeneratedCard(type=NAME, content=content.model_dump())


CARD_TYPE = CardType(
    name=NAME,
    display_name="Multiple Choice Question",
    description="A question with four options, exactly one correct, plus an explanation shown after answering.",
    best_used_for="Checking understanding right after a concept is taught, and spotting common misconceptions.",
    default_focus="test basic understanding",
    generate=generate,
    example_output={
        "question": "What is the derivative of $x^3$?",
        "options": ["$x^2$", "$3x^2$", "$3x^3$", "$x^4/4$"],
        "correct_index": 1,
        "explanation": "By the power rule, $d/dx(x^n) = nx^{n-1}$, so $d/dx(x^3) = 3x^2$.",
    },
)
