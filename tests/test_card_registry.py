import pytest

from cards.base import CardType
from cards.registry import CardTypeRegistry, build_default_registry
from models.lesson_models import GeneratedCard


async def _generate_note(context):
    return GeneratedCard(type="note", content={"text": context.focus})


NOTE_CARD = CardType(
    name="note",
    display_name="Note",
    description="A sticky note.",
    best_used_for="Quick reminders.",
    generate=_generate_note,
    example_output={"text": "Remember this"},
)


def test_default_registry_has_builtin_kinds_in_order():
    registry = build_default_registry()
    assert registry.list_names() == [
        "text", "mc_question", "fill_in_blank", "infographic", "interactive_visual", "oral_exam",
    ]
    assert len(registry) == 6


def test_get_returns_none_for_unknown_kind():
    registry = build_default_registry()
    assert registry.get("video_learning") is None
    assert "video_learning" not in registry
    assert registry.get("text").name == "text"


def test_register_new_kind():
    registry = build_default_registry()
    registry.register(NOTE_CARD)
    assert registry.list_names()[-1] == "note"
    assert registry.get("note") is NOTE_CARD


def test_register_duplicate_rejected():
    registry = CardTypeRegistry([NOTE_CARD])
    with pytest.raises(ValueError):
        registry.register(NOTE_CARD)


def test_describe_all_lists_every_kind():
    registry = build_default_registry()
    catalog = registry.describe_all()
    for name in registry.list_names():
        assert f"Type: {name}" in catalog
    assert "Best used for:" in catalog
    assert '"correct_index": 1' in catalog
    assert catalog.count("---") == len(registry) - 1
