"""
Infographic card.

Two model calls: one for the infographic's metadata and image prompt, one
multimodal call that renders the image. The image is uploaded to the object
store and only its path is kept in the payload. When no image can be produced
or stored the card is downgraded to a plain text card built from the metadata.
"""

import logging
import uuid
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from cards.base import CardType, GeneratorContext, parse_card_content
from models.lesson_models import GeneratedCard
from prompts.card_prompts import build_infographic_image_prompt, build_infographic_metadata_prompt
from utils.model_config import ModelRole

logger = logging.getLogger(__name__)

NAME = "infographic"
DOWNGRADE_TYPE = "text"


class InfographicMetadata(BaseModel):
    title: str = Field(..., min_length=1)
    image_prompt: str = Field(..., min_length=1, validation_alias=AliasChoices("image_prompt", "imagePrompt"))
    description: str = ""
    caption: str = ""


class InfographicCardContent(BaseModel):
    title: str
    image_path: str
    description: str = ""
    caption: str = ""


def fallback_metadata(context: GeneratorContext) -> InfographicMetadata:
    return InfographicMetadata(
        title=context.lesson_title,
        image_prompt=(
            f"Create an educational infographic about {context.focus}. "
            "Use a clean, modern style with clear visuals and labels."
        ),
        description=f"An infographic about {context.focus}",
        caption=context.lesson_title,
    )


def build_asset_path(lesson_id: str) -> str:
    """New path on every run; stored assets are never overwritten."""
    return f"cards/{lesson_id}/infographic-{uuid.uuid4()}.png"


def downgrade_to_text(metadata: InfographicMetadata) -> GeneratedCard:
    body = f"**Visual Concept: {metadata.title}**\n\n{metadata.description}"
    if metadata.caption:
        body += f"\n\n_{metadata.caption}_"
    return GeneratedCard(type=DOWNGRADE_TYPE, content={"title": metadata.title, "body": body})


async def _render_and_store(context: GeneratorContext, metadata: InfographicMetadata) -> Optional[str]:
    if context.object_store is None:
        logger.warning("[infographic] No object store configured")
        return None

    try:
        response = await context.client.generate_multimodal(
            build_infographic_image_prompt(metadata.image_prompt),
            role=ModelRole.IMAGE,
            want_image=True,
        )
    except Exception as e:
        logger.error(f"[infographic] Image generation failed: {e}")
        return None

    if not response.asset:
        logger.warning("[infographic] Model returned no image")
        return None

    path = build_asset_path(context.lesson_id)
    try:
        uploaded = await context.object_store.upload(path, response.asset, response.asset_mime_type or "image/png")
    except Exception as e:
        logger.error(f"[infographic] Upload failed for {path}: {e}")
        return None
    if not uploaded:
        logger.error(f"[infographic] Upload failed for {path}")
        return None
    return path


async def generate(context: GeneratorContext) -> GeneratedCard:
    prompt = build_infographic_metadata_prompt(
        context.lesson_title, context.lesson_description, context.lesson_content, context.focus
    )
    raw = await context.client.generate_text(prompt, role=ModelRole.CARD_TEXT)
    metadata = parse_card_content(raw, InfographicMetadata, NAME) or fallback_metadata(context)

    image_path = await _render_and_store(context, metadata)
    if image_path is None:
        logger.info(f"[infographic] Downgrading '{metadata.title}' to a text card")
        return downgrade_to_text(metadata)

    content = InfographicCardContent(
        title=metadata.title,
        image_path=image_path,
        description=metadata.description,
        caption=metadata.caption,
    )
    return GeneratedCard(type=NAME, content=content.model_dump())


CARD_TYPE = CardType(
    name=NAME,
    display_name="Infographic",
    description="A generated educational image with a title, description and caption.",
    best_used_for="Relationships, processes, comparisons and structures that are easier to see than read.",
    default_focus="visualize key concepts and relationships",
    generate=generate,
    example_output={
        "title": "The Power Rule",
        "image_path": "cards/<lesson_id>/infographic-<uuid>.png",
        "description": "An infographic showing the power rule with worked examples",
        "caption": "d/dx(x^n) = nx^(n-1)",
    },
)
