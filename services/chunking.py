"""
Page chunks and lesson chunk ranges.

One chunk per extracted page. Lessons cover contiguous, non-overlapping
chunk ranges obtained by evenly dividing the chunks across the lessons.
"""

import json
import logging
import math
from typing import Any, Dict, List

from models.lesson_models import ChunkRange

logger = logging.getLogger(__name__)


def normalize_pages(pages: List[Any]) -> List[str]:
    """Coerce extracted pages to non-empty strings, preserving order."""
    normalized = []
    for page in pages:
        if page is None:
            continue
        text = page if isinstance(page, str) else json.dumps(page, ensure_ascii=False)
        text = text.strip()
        if text:
            normalized.append(text)
    return normalized


def build_chunk_rows(document_id: str, pages: List[str]) -> List[Dict[str, Any]]:
    return [
        {"document_id": document_id, "chunk_index": index, "content": page}
        for index, page in enumerate(pages)
    ]


def compute_chunk_ranges(total_chunks: int, lesson_count: int) -> List[ChunkRange]:
    """
    Split chunk indices 0..total_chunks-1 across lessons.

    Each lesson gets ceil(total / count) chunks and the last range is clamped
    to the final chunk. There are never more ranges than chunks, and lessons
    whose start would fall past the final chunk get no range, so the ranges
    always cover every chunk exactly once.

    >>> [(r.start_chunk_index, r.end_chunk_index) for r in compute_chunk_ranges(10, 2)]
    [(0, 4), (5, 9)]
    """
    if total_chunks <= 0 or lesson_count <= 0:
        return []

    count = min(lesson_count, total_chunks)
    per_lesson = math.ceil(total_chunks / count)
    last_index = total_chunks - 1

    ranges = []
    for i in range(count):
        start = i * per_lesson
        if start > last_index:
            logger.info(f"Dropping {count - i} trailing lesson(s): no chunks left to assign")
            break
        end = min(start + per_lesson - 1, last_index)
        ranges.append(ChunkRange(start_chunk_index=start, end_chunk_index=end))
    return ranges
