"""
Provider-agnostic generative service used by the pipeline.

Text requests are routed by the model role's provider (Gemini or Groq);
attachments and image output always go to Gemini.
"""

import logging
from typing import Optional

from clients import groq_client
from clients.gemini_client import GeminiClient, InlineAttachment, MultimodalResponse, get_gemini_client
from utils.exceptions import ValidationError
from utils.model_config import ModelConfig, ModelProvider, ModelRole

logger = logging.getLogger(__name__)


class GenerativeClient:
    def __init__(self, gemini: Optional[GeminiClient] = None):
        self._gemini = gemini

    @property
    def gemini(self) -> GeminiClient:
        if self._gemini is None:
            self._gemini = get_gemini_client()
        return self._gemini

    async def generate_text(self, prompt: str, role: ModelRole = ModelRole.CARD_TEXT) -> str:
        model_config = ModelConfig.for_role(role)
        provider = model_config["provider"]

        if provider == ModelProvider.GROQ:
            return await groq_client.generate_text(prompt, model_config)
        elif provider == ModelProvider.GEMINI:
            response = await self.gemini.generate(prompt, model_config)
            return response.text
        else:
            raise ValidationError(f"Unknown provider: {provider}", error_code="INVALID_MODEL")

    async def generate_multimodal(
        self,
        prompt: str,
        role: ModelRole = ModelRole.IMAGE,
        attachment: Optional[InlineAttachment] = None,
        want_image: bool = False,
    ) -> MultimodalResponse:
        model_config = ModelConfig.for_role(role)
        if model_config["provider"] != ModelProvider.GEMINI:
            raise ValidationError(
                f"Role {ModelRole(role).value} needs a Gemini model for multimodal calls",
                error_code="INVALID_MODEL",
            )
        if want_image and not model_config.get("supports_images"):
            logger.warning(f"Model {model_config['model']} is not flagged for image output")
        return await self.gemini.generate(prompt, model_config, attachment=attachment, want_image=want_image)


_generative_client: Optional[GenerativeClient] = None


def get_generative_client() -> GenerativeClient:
    global _generative_client
    if _generative_client is None:
        _generative_client = GenerativeClient()
    return _generative_client
