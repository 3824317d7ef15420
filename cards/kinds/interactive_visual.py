"""Interactive visual card: a self-contained HTML/CSS/JS visualization."""

import json
import logging
import re
from typing import Optional

from pydantic import BaseModel, Field

from cards.base import CardType, GeneratorContext, parse_card_content
from models.lesson_models import GeneratedCard
from prompts.card_prompts import build_interactive_visual_prompt
from utils.model_config import ModelRole
from utils.response_parsing import clean_json_response

logger = logging.getLogger(__name__)

NAME = "interactive_visual"

DOCTYPE = "<!DOCTYPE html>"

PAGE_TEMPLATE = (
    '<!DOCTYPE html><html><head><meta charset="UTF-8">'
    '<meta name="viewport" content="width=device-width, initial-scale=1.0">'
    "<style>body{{margin:0;padding:20px;font-family:system-ui,sans-serif;"
    "background:#1a1a2e;color:#fff;min-height:100vh;box-sizing:border-box;}}</style>"
    "</head><body>{body}</body></html>"
)

PLACEHOLDER_BODY = (
    "<style>main{{display:flex;flex-direction:column;align-items:center;justify-content:center;"
    "min-height:80vh;text-align:center;}}h1{{font-size:1.5rem;}}p{{opacity:.8;max-width:32rem;}}</style>"
    "<main><h1>{title}</h1><p>{description}</p></main>"
)

# "html": "...", up to the next key or the closing brace
_HTML_VALUE = re.compile(r'("html"\s*:\s*")(.*?)("\s*,\s*"description"|"\s*\})', re.DOTALL)


class InteractiveVisualContent(BaseModel):
    title: str = Field(..., min_length=1)
    html: str = Field(..., min_length=1)
    description: str = ""


def escape_html_value(raw: str) -> str:
    """Escape raw control characters inside the html string value."""
    def _escape(match: re.Match) -> str:
        value = match.group(2)
        value = value.replace("\r\n", "\\n").replace("\r", "\\n").replace("\n", "\\n").replace("\t", "\\t")
        return match.group(1) + value + match.group(3)

    return _HTML_VALUE.sub(_escape, raw, count=1)


def ensure_document(html: str) -> str:
    if DOCTYPE.lower() in html.lower():
        return html
    return PAGE_TEMPLATE.format(body=html)


def _html_escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def fallback_content(context: GeneratorContext) -> InteractiveVisualContent:
    title = _html_escape(context.lesson_title)
    description = _html_escape(f"An interactive look at {context.focus}.")
    return InteractiveVisualContent(
        title=context.lesson_title,
        html=PAGE_TEMPLATE.format(body=PLACEHOLDER_BODY.format(title=title, description=description)),
        description=f"Placeholder visualization for {context.focus}",
    )


def parse_visual(raw: str) -> Optional[InteractiveVisualContent]:
    content = parse_card_content(raw, InteractiveVisualContent, NAME)
    if content is None:
        repaired = escape_html_value(clean_json_response(raw))
        try:
            json.loads(repaired)
        except json.JSONDecodeError:
            return None
        content = parse_card_content(repaired, InteractiveVisualContent, NAME)
        if content is not None:
            logger.info("[interactive_visual] Parsed after escaping html value")
    return content


async def generate(context: GeneratorContext) -> GeneratedCard:
    prompt = build_interactive_visual_prompt(
        context.lesson_title, context.lesson_description, context.lesson_content, context.focus
    )
    raw = await context.client.generate_text(prompt, role=ModelRole.CARD_RICH)
    content = parse_visual(raw)
    if content is None:
        content = fallback_content(context)
    else:
        content.html = ensure_document(content.html)
    return GeneratedCard(type=NAME, content=content.model_dump())


CARD_TYPE = CardType(
    name=NAME,
    display_name="Interactive Visual",
    description="A dynamic visualization written as one self-contained HTML document with CSS and JavaScript.",
    best_used_for="Processes, algorithms, physics, mathematical relationships and state changes that benefit from animation.",
    default_focus="interactively explore the concept",
    generate=generate,
    example_output={
        "title": "Bubble Sort Visualization",
        "html": "<!DOCTYPE html><html>...</html>",
        "description": "Animated bars compared and swapped step by step",
    },
)
