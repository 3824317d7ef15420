"""
Prompt templates for card generation.
One builder per card kind; every builder returns a single self-contained prompt.
"""

from typing import Optional

from utils.pipeline_config import CARD_CONTENT_LIMIT


def _lesson_header(lesson_title: str, lesson_description: Optional[str]) -> str:
    header = f"Lesson: {lesson_title}"
    if lesson_description:
        header += f"\nDescription: {lesson_description}"
    return header


def build_text_card_prompt(lesson_title: str, lesson_description: str, lesson_content: str, focus: str) -> str:
    """Build prompt for an explanatory text card"""
    return f"""You are writing an explanatory card for a bite-sized learning app.

{_lesson_header(lesson_title, lesson_description)}

SOURCE CONTENT:
{lesson_content[:CARD_CONTENT_LIMIT]}

TASK: Write a text card that will {focus}

REQUIREMENTS:
1. Title of 3-6 words
2. Body of 2-4 sentences or 3-5 bullet points, in markdown
3. Bold the key terms; use $inline$ or $$block$$ LaTeX for math
4. Stay faithful to the source content

OUTPUT FORMAT (JSON - no markdown formatting):
{{"title": "...", "body": "..."}}"""


def build_mc_question_prompt(lesson_title: str, lesson_description: str, lesson_content: str, focus: str) -> str:
    """Build prompt for a multiple choice question card"""
    return f"""You are writing a multiple choice question for a bite-sized learning app.

{_lesson_header(lesson_title, lesson_description)}

SOURCE CONTENT:
{lesson_content[:CARD_CONTENT_LIMIT]}

TASK: Write a question that will {focus}

REQUIREMENTS:
1. Exactly 4 answer options, one of them correct
2. Distractors must be plausible
3. correct_index is the 0-based position of the correct option
4. A one or two sentence explanation of the answer
5. Use $inline$ LaTeX for math

OUTPUT FORMAT (JSON - no markdown formatting):
{{"question": "...", "options": ["...", "...", "...", "..."], "correct_index": 0, "explanation": "..."}}"""


def build_fill_in_blank_prompt(lesson_title: str, lesson_description: str, lesson_content: str, focus: str) -> str:
    """Build prompt for a fill-in-the-blank card"""
    return f"""You are writing a fill-in-the-blank exercise for a bite-sized learning app.

{_lesson_header(lesson_title, lesson_description)}

SOURCE CONTENT:
{lesson_content[:CARD_CONTENT_LIMIT]}

TASK: Write an exercise that will {focus}

REQUIREMENTS:
1. One sentence or short paragraph with 1-3 blanks marked {{{{blank1}}}}, {{{{blank2}}}}, ...
2. Every blank has 3-4 options and exactly one is correct
3. Blanks test key terms, not filler words
4. A brief explanation of the answers

OUTPUT FORMAT (JSON - no markdown formatting):
{{
  "text": "The {{{{blank1}}}} of a function measures its {{{{blank2}}}}.",
  "blanks": {{
    "blank1": [{{"text": "derivative", "is_correct": true}}, {{"text": "integral", "is_correct": false}}, {{"text": "limit", "is_correct": false}}],
    "blank2": [{{"text": "rate of change", "is_correct": true}}, {{"text": "total area", "is_correct": false}}, {{"text": "maximum", "is_correct": false}}]
  }},
  "explanation": "..."
}}"""


def build_infographic_metadata_prompt(lesson_title: str, lesson_description: str, lesson_content: str, focus: str) -> str:
    """Build prompt describing an infographic before the image is rendered"""
    return f"""You are designing an educational infographic for a bite-sized learning app.

{_lesson_header(lesson_title, lesson_description)}

SOURCE CONTENT:
{lesson_content[:CARD_CONTENT_LIMIT]}

TASK: Design an infographic that will {focus}

REQUIREMENTS:
1. A short title
2. image_prompt: a detailed instruction for an image model (layout, labels, colours, clean flat style, legible text)
3. description: 1-2 sentences on what the infographic shows
4. caption: one short line shown under the image

OUTPUT FORMAT (JSON - no markdown formatting):
{{"title": "...", "image_prompt": "...", "description": "...", "caption": "..."}}"""


def build_infographic_image_prompt(image_prompt: str) -> str:
    return f"""{image_prompt}

Render a single clean educational infographic. Landscape orientation, white or light background, clear legible labels, no watermark."""


def build_interactive_visual_prompt(lesson_title: str, lesson_description: str, lesson_content: str, focus: str) -> str:
    """Build prompt for a self-contained interactive HTML visualization"""
    return f"""You are building an interactive visualization for a bite-sized learning app.

{_lesson_header(lesson_title, lesson_description)}

SOURCE CONTENT:
{lesson_content[:CARD_CONTENT_LIMIT]}

TASK: Build an interactive visualization that will {focus}

REQUIREMENTS:
1. One complete HTML document starting with <!DOCTYPE html>
2. All CSS inside a <style> tag and all JavaScript inside a <script> tag
3. No external dependencies, CDN links or imports
4. Works in a 400x300 viewport and scales responsively
5. Includes a visible title and, for animations, a play/restart control
6. Escape quotes and newlines in the html value so the JSON stays valid

OUTPUT FORMAT (JSON - no markdown formatting):
{{"title": "...", "html": "<!DOCTYPE html><html>...</html>", "description": "..."}}"""


def build_oral_exam_prompt(lesson_title: str, lesson_description: str, lesson_content: str, focus: str) -> str:
    """Build prompt for the oral exam configuration"""
    return f"""You are preparing a short spoken exam for a bite-sized learning app.

{_lesson_header(lesson_title, lesson_description)}

SOURCE CONTENT:
{lesson_content[:6000]}

TASK: Prepare an oral exam that will {focus}

REQUIREMENTS:
1. topic: a specific, focused subject for the exam
2. context: the facts, definitions and formulas the examiner needs to judge answers (max 1000 characters)
3. question_count: between 3 and 5

OUTPUT FORMAT (JSON - no markdown formatting):
{{"topic": "...", "context": "...", "question_count": 3}}"""


def build_examiner_system_prompt(topic: str, context: str, question_count: int) -> str:
    """System instruction handed to the live voice examiner"""
    return f"""You are a friendly oral examiner in a learning app. You are assessing the student's understanding of: {topic}

Lesson context:
{context}

HOW TO RUN THE EXAM:
1. Greet the student and say you will ask a few questions about {topic}.
2. Ask {question_count} questions, from easier to harder.
3. Give brief, encouraging feedback after each answer.
4. If the student struggles, rephrase or hint without giving the answer away.
5. When all questions are asked, or the outcome is already clear, call end_exam with:
   - passed: true if the student showed reasonable understanding of the core concepts
   - feedback: 2-3 sentences of constructive feedback
6. Keep turns short and conversational; this is spoken, not a lecture.

You MUST finish by calling end_exam."""
