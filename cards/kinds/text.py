"""Explanatory text card: a title and a short markdown body."""

from pydantic import BaseModel, Field

from cards.base import CardType, GeneratorContext, parse_card_content
from models.lesson_models import GeneratedCard
from prompts.card_prompts import build_text_card_prompt
from utils.model_config import ModelRole

NAME = "text"


class TextCardContent(BaseModel):
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


def fallback_content(context: GeneratorContext) -> TextCardContent:
    return TextCardContent(
        title=context.lesson_title,
        body=f"Let's learn about {context.focus}.",
    )


async def generate(context: GeneratorContext) -> GeneratedCard:
    prompt = build_text_card_prompt(
        context.lesson_title, context.lesson_description, context.lesson_content, context.focus
    )
    raw = await context.client.generate_text(prompt, role=ModelRole.CARD_TEXT)
    content = parse_card_content(raw, TextCardContent, NAME) or fallback_content(context)
    return GeneratedCard(type=NAME, content=content.model_dump())


CARD_TYPE = CardType(
    name=NAME,
    display_name="Text Card",
    description="An informational card with a title and a markdown body.",
    best_used_for="Introducing concepts, explaining details, giving examples or summarizing. Teach before testing.",
    default_focus="introduce the main concept of this lesson",
    generate=generate,
    example_output={
        "title": "Understanding Derivatives",
        "body": "A **derivative** measures the rate of change of a function. For $f(x) = x^2$, $f'(x) = 2x$.",
    },
)
