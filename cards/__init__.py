from .base import CardType, GeneratorContext
from .registry import CardTypeRegistry, build_default_registry, get_registry

__all__ = [
    'CardType',
    'GeneratorContext',
    'CardTypeRegistry',
    'build_default_registry',
    'get_registry',
]
