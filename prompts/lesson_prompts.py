"""
Prompt templates for document extraction, lesson segmentation and lesson planning.
"""

from typing import List

from utils.pipeline_config import (
    MIN_LESSONS,
    MAX_LESSONS,
    PLANNER_CONTENT_LIMIT,
    SEGMENTATION_CONTENT_LIMIT,
)


def build_page_extraction_prompt() -> str:
    """Build prompt for page-by-page extraction of an attached document"""
    return """Extract the full content of the attached document, page by page.

REQUIREMENTS:
1. One array entry per page, in page order
2. Each entry is the page's content as markdown: headings, lists, tables
3. Write math as LaTeX ($inline$ or $$block$$)
4. Describe figures and diagrams briefly in italics
5. Do not summarise or skip content

OUTPUT FORMAT (JSON array of strings - no markdown formatting):
["page 1 markdown", "page 2 markdown", ...]"""


def build_lesson_segmentation_prompt(document_text: str) -> str:
    """Build prompt that splits extracted content into a lesson sequence"""
    return f"""You are an expert curriculum designer. Split the following material into a sequence of bite-sized lessons.

MATERIAL:
{document_text[:SEGMENTATION_CONTENT_LIMIT]}

REQUIREMENTS:
1. {MIN_LESSONS}-{MAX_LESSONS} lessons, in the order the material should be learned
2. Each lesson covers a contiguous part of the material
3. Title: short and descriptive
4. Description: one sentence on what the learner will understand

OUTPUT FORMAT (JSON array - no markdown formatting):
[{{"title": "...", "description": "..."}}]"""


def build_lesson_plan_prompt(
    lesson_title: str,
    lesson_description: str,
    lesson_content: str,
    catalog: str,
    allowed_kinds: List[str],
    max_cards: int,
    require_all_kinds: bool,
) -> str:
    """Build prompt asking for an ordered card plan for one lesson"""
    rules = [
        f"Use ONLY these type names: {', '.join(allowed_kinds)}",
        f"At most {max_cards} cards",
        "Teach before testing; end with an assessment",
    ]
    if require_all_kinds:
        rules.append("Use EVERY card type at least once")
    rules.append("focus: one sentence describing what that card should do, specific to this lesson")
    rules_text = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, 1))
    return f"""You are an expert instructional designer planning the cards of one bite-sized lesson.

Lesson: {lesson_title}
Description: {lesson_description or "(none)"}

LESSON CONTENT:
{lesson_content[:PLANNER_CONTENT_LIMIT]}

AVAILABLE CARD TYPES:
{catalog}

RULES:
{rules_text}

OUTPUT FORMAT (JSON - no markdown formatting):
{{"cards": [{{"type": "text", "focus": "..."}}]}}"""
