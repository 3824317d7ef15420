"""
Card type registry: the catalog of card kinds keyed by name.
Planner and generator only ever talk to the registry, so adding a kind is a
registration, not a code change elsewhere.
"""

import logging
from typing import Dict, Iterable, List, Optional

from cards.base import CardType

logger = logging.getLogger(__name__)


class CardTypeRegistry:
    def __init__(self, kinds: Optional[Iterable[CardType]] = None):
        self._kinds: Dict[str, CardType] = {}
        for kind in kinds or []:
            self.register(kind)

    def register(self, kind: CardType) -> None:
        if kind.name in self._kinds:
            raise ValueError(f"Card type already registered: {kind.name}")
        self._kinds[kind.name] = kind
        logger.debug(f"Registered card type: {kind.name}")

    def get(self, name: str) -> Optional[CardType]:
        return self._kinds.get(name)

    def list_names(self) -> List[str]:
        return list(self._kinds.keys())

    def describe_all(self) -> str:
        """Human-readable catalog used in the planning prompt"""
        return "\n\n---\n\n".join(kind.describe() for kind in self._kinds.values())

    def __contains__(self, name: str) -> bool:
        return name in self._kinds

    def __len__(self) -> int:
        return len(self._kinds)


def build_default_registry() -> CardTypeRegistry:
    from cards.kinds import BUILTIN_CARD_TYPES

    return CardTypeRegistry(BUILTIN_CARD_TYPES)


_registry: Optional[CardTypeRegistry] = None


def get_registry() -> CardTypeRegistry:
    global _registry
    if _registry is None:
        _registry = build_default_registry()
    return _registry
