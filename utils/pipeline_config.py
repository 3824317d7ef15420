"""
Tunable knobs for the lesson pipeline, read from the environment.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Lesson plan bounds
MAX_PLAN_SIZE = int(os.getenv("LESSON_PLAN_MAX_CARDS", "8"))
MIN_PLAN_SIZE = int(os.getenv("LESSON_PLAN_MIN_CARDS", "3"))
# Require every registered card kind to appear at least once in a plan
PLAN_FULL_COVERAGE = _env_bool("LESSON_PLAN_FULL_COVERAGE", True)

# Prompt input limits (characters)
PLANNER_CONTENT_LIMIT = 10000
SEGMENTATION_CONTENT_LIMIT = 15000
CARD_CONTENT_LIMIT = 8000
ORAL_EXAM_CONTEXT_LIMIT = 1500

# Lesson segmentation bounds
MIN_LESSONS = 5
MAX_LESSONS = 8

# Stuck-status reclaim windows
DOCUMENT_PROCESSING_TTL_SECONDS = int(os.getenv("DOCUMENT_PROCESSING_TTL_SECONDS", "900"))
LESSON_GENERATION_TTL_SECONDS = int(os.getenv("LESSON_GENERATION_TTL_SECONDS", "600"))

SIGNED_URL_TTL_SECONDS = int(os.getenv("SIGNED_URL_TTL_SECONDS", "3600"))
PASSING_SCORE = int(os.getenv("LESSON_PASSING_SCORE", "70"))

# Separators used when stitching chunk text back together
CHUNK_SEPARATOR = "\n\n---\n\n"
PAGE_SEPARATOR = "\n\n---PAGE BREAK---\n\n"
