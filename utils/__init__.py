# Lesson pipeline utilities
from .lesson_storage import (
    DocumentStorage,
    ChunkStorage,
    LessonStorage,
    CardStorage,
    generate_uuid,
)

from .model_config import (
    ModelConfig,
    ModelProvider,
    ModelRole,
    MODEL_CONFIGS,
    DEFAULT_MODEL
)

__all__ = [
    'DocumentStorage',
    'ChunkStorage',
    'LessonStorage',
    'CardStorage',
    'generate_uuid',
    'ModelConfig',
    'ModelProvider',
    'ModelRole',
    'MODEL_CONFIGS',
    'DEFAULT_MODEL'
]
