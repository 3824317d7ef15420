"""
Model configuration for the lesson pipeline.
Each pipeline role (extraction, planning, card generation, ...) maps to one model entry.
"""

import os
from typing import Dict, Any, Optional
from enum import Enum


class ModelProvider(str, Enum):
    GEMINI = "gemini"
    GROQ = "groq"


class ModelRole(str, Enum):
    EXTRACTION = "extraction"
    SEGMENTATION = "segmentation"
    PLANNER = "planner"
    CARD_TEXT = "card_text"
    CARD_RICH = "card_rich"
    IMAGE = "image"


# Model configurations
MODEL_CONFIGS: Dict[str, Dict[str, Any]] = {
    "gemini-2.0-flash": {
        "provider": ModelProvider.GEMINI,
        "model": "gemini-2.0-flash",
        "max_tokens": 8192,
        "supports_attachments": True,
        "supports_images": False,
        "temperature": 0.7
    },
    "gemini-2.5-flash": {
        "provider": ModelProvider.GEMINI,
        "model": "gemini-2.5-flash",
        "max_tokens": 16000,
        "supports_attachments": True,
        "supports_images": False,
        "temperature": 0.7
    },
    "gemini-2.5-pro": {
        "provider": ModelProvider.GEMINI,
        "model": "gemini-2.5-pro",
        "max_tokens": 32000,
        "supports_attachments": True,
        "supports_images": False,
        "temperature": 0.7
    },
    "gemini-2.5-flash-image": {
        "provider": ModelProvider.GEMINI,
        "model": "gemini-2.5-flash-image",
        "max_tokens": 8192,
        "supports_attachments": True,
        "supports_images": True,
        "temperature": 1.0
    },
    "llama-4-scout": {
        "provider": ModelProvider.GROQ,
        "model": "meta-llama/llama-4-scout-17b-16e-instruct",
        "max_tokens": 8192,
        "supports_attachments": False,
        "supports_images": False,
        "temperature": 0.7
    },
    "llama-4-maverick": {
        "provider": ModelProvider.GROQ,
        "model": "meta-llama/llama-4-maverick-17b-128e-instruct",
        "max_tokens": 8192,
        "supports_attachments": False,
        "supports_images": False,
        "temperature": 0.7
    }
}

DEFAULT_MODEL = "gemini-2.5-flash"

# Role -> model key; each can be overridden with MODEL_<ROLE>, e.g. MODEL_PLANNER=llama-4-scout
ROLE_DEFAULTS: Dict[ModelRole, str] = {
    ModelRole.EXTRACTION: "gemini-2.0-flash",
    ModelRole.SEGMENTATION: "gemini-2.5-flash",
    ModelRole.PLANNER: "gemini-2.5-pro",
    ModelRole.CARD_TEXT: "gemini-2.5-flash",
    ModelRole.CARD_RICH: "gemini-2.5-pro",
    ModelRole.IMAGE: "gemini-2.5-flash-image",
}


class ModelConfig:
    """Model configuration manager"""

    @staticmethod
    def get_config(model_key: Optional[str] = None) -> Dict[str, Any]:
        """Get configuration for specified model or default"""
        key = model_key or DEFAULT_MODEL

        if key not in MODEL_CONFIGS:
            raise ValueError(f"Unknown model: {key}. Available: {list(MODEL_CONFIGS.keys())}")

        return MODEL_CONFIGS[key]

    @staticmethod
    def get_available_models() -> list:
        """List all available models"""
        return list(MODEL_CONFIGS.keys())

    @staticmethod
    def model_key_for_role(role: ModelRole) -> str:
        role = ModelRole(role)
        return os.getenv(f"MODEL_{role.value.upper()}", ROLE_DEFAULTS[role])

    @staticmethod
    def for_role(role: ModelRole) -> Dict[str, Any]:
        """Resolve the model configuration used for a pipeline role"""
        return ModelConfig.get_config(ModelConfig.model_key_for_role(role))
