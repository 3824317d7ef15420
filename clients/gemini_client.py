"""
Gemini client for text, document-attachment and image generation.
"""

import os
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

from dotenv import load_dotenv
from google import genai
from google.genai import types

load_dotenv()

logger = logging.getLogger(__name__)

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")

MAX_RETRIES = 3


@dataclass
class InlineAttachment:
    """Raw binary input sent alongside a prompt."""
    data: bytes
    mime_type: str


@dataclass
class MultimodalResponse:
    text: str = ""
    asset: Optional[bytes] = None
    asset_mime_type: Optional[str] = None


def _is_retryable(error: Exception) -> bool:
    error_str = str(error).lower()
    return (
        "429" in error_str
        or "resource_exhausted" in error_str
        or "rate limit" in error_str
        or "503" in error_str
        or "unavailable" in error_str
    )


class GeminiClient:
    """Thin async wrapper around google-genai with retry on rate limits."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY must be set")
        self.client = genai.Client(api_key=self.api_key)

    async def generate(
        self,
        prompt: str,
        model_config: Dict[str, Any],
        attachment: Optional[InlineAttachment] = None,
        want_image: bool = False,
    ) -> MultimodalResponse:
        contents: List[Any] = []
        if attachment is not None:
            contents.append(
                types.Part.from_bytes(
                    data=attachment.data,
                    mime_type=attachment.mime_type,
                )
            )
        contents.append(prompt)

        config = types.GenerateContentConfig(
            temperature=model_config.get("temperature", 0.7),
            max_output_tokens=model_config.get("max_tokens", 8192),
            response_modalities=["TEXT", "IMAGE"] if want_image else None,
        )

        for attempt in range(MAX_RETRIES):
            try:
                response = await self.client.aio.models.generate_content(
                    model=model_config["model"],
                    contents=contents,
                    config=config,
                )
                return self._to_multimodal_response(response)
            except Exception as e:
                if _is_retryable(e) and attempt < MAX_RETRIES - 1:
                    backoff = 2 ** (attempt + 1)
                    logger.warning(f"Gemini rate limited (attempt {attempt + 1}/{MAX_RETRIES}). Retrying in {backoff}s...")
                    await asyncio.sleep(backoff)
                    continue
                logger.error(f"Gemini API error ({model_config['model']}): {e}")
                raise

    @staticmethod
    def _to_multimodal_response(response) -> MultimodalResponse:
        result = MultimodalResponse()
        candidates = getattr(response, "candidates", None) or []
        if not candidates or candidates[0].content is None:
            return result

        texts = []
        for part in candidates[0].content.parts or []:
            if getattr(part, "text", None):
                texts.append(part.text)
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data and result.asset is None:
                result.asset = inline.data
                result.asset_mime_type = inline.mime_type
        result.text = "".join(texts)
        return result


_gemini_client: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiClient()
    return _gemini_client
