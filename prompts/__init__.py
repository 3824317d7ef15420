# Prompts module initialization

from .lesson_prompts import (
    build_page_extraction_prompt,
    build_lesson_segmentation_prompt,
    build_lesson_plan_prompt,
)

from .card_prompts import (
    build_text_card_prompt,
    build_mc_question_prompt,
    build_fill_in_blank_prompt,
    build_infographic_metadata_prompt,
    build_infographic_image_prompt,
    build_interactive_visual_prompt,
    build_oral_exam_prompt,
    build_examiner_system_prompt,
)

__all__ = [
    'build_page_extraction_prompt',
    'build_lesson_segmentation_prompt',
    'build_lesson_plan_prompt',
    'build_text_card_prompt',
    'build_mc_question_prompt',
    'build_fill_in_blank_prompt',
    'build_infographic_metadata_prompt',
    'build_infographic_image_prompt',
    'build_interactive_visual_prompt',
    'build_oral_exam_prompt',
    'build_examiner_system_prompt',
]
