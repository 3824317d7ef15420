"""
Helpers for pulling structured JSON out of free-form model responses.
"""

import json
import logging
import re
from typing import Any

from utils.exceptions import GenerationError

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*\n?")


def clean_json_response(text: str) -> str:
    """Strip markdown code fences and surrounding whitespace."""
    return _CODE_FENCE.sub("", text or "").strip()


def _starts_with_object(text: str) -> bool:
    brace = text.find("{")
    bracket = text.find("[")
    if bracket == -1:
        return True
    return brace != -1 and brace < bracket


def extract_json(text: str) -> Any:
    """
    Extract a JSON value (object or array) from a model response.

    Tries a direct parse first, then fenced code blocks, then the widest
    object or array found in the text. Raises GenerationError if nothing parses.
    """
    if not text or not text.strip():
        raise GenerationError("Empty model response", error_code="INVALID_MODEL_OUTPUT")

    try:
        # Try direct parsing first
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    object_first = _starts_with_object(text)
    patterns = [
        r'```json\s*(.*?)\s*```',
        r'```\s*(.*?)\s*```',
        r'\{.*\}' if object_first else r'\[.*\]',
        r'\[.*\]' if object_first else r'\{.*\}',
    ]

    for pattern in patterns:
        matches = re.findall(pattern, text, re.DOTALL)
        for match in matches:
            try:
                return json.loads(match)
            except (json.JSONDecodeError, ValueError):
                continue

    logger.warning(f"Could not extract JSON from: {text[:300]}")
    raise GenerationError("Failed to parse JSON response", error_code="INVALID_MODEL_OUTPUT")


def extract_json_object(text: str) -> dict:
    """Like extract_json, but the result must be a JSON object."""
    value = extract_json(text)
    if not isinstance(value, dict):
        raise GenerationError("Expected a JSON object", error_code="INVALID_MODEL_OUTPUT")
    return value


def extract_json_list(text: str, key: str = None) -> list:
    """
    Extract a JSON array. If the model wrapped it in an object, the array is
    taken from `key` when given.
    """
    value = extract_json(text)
    if isinstance(value, dict) and key and isinstance(value.get(key), list):
        value = value[key]
    if not isinstance(value, list):
        raise GenerationError("Expected a JSON array", error_code="INVALID_MODEL_OUTPUT")
    return value
