import asyncio

from cards.base import CardType
from conftest import FakeGenerativeClient, FakeObjectStore
from models.lesson_models import GeneratedCard, LessonPlan, PlannedCard
from services.card_generator import CardGenerator


def make_plan(kinds):
    return LessonPlan(cards=[PlannedCard(kind=kind, focus=f"focus {i}") for i, kind in enumerate(kinds)])


def run_generator(generator, plan):
    return asyncio.run(generator.generate(
        plan,
        lesson_id="lesson-1",
        lesson_title="Photosynthesis",
        lesson_description="How plants make food",
        lesson_content="Plants use light.",
    ))


def test_unknown_kind_is_isolated(registry):
    kinds = ["text", "mc_question", "fill_in_blank", "video_learning", "interactive_visual", "oral_exam"]
    generator = CardGenerator(FakeGenerativeClient(), registry, FakeObjectStore())
    result = run_generator(generator, make_plan(kinds))

    assert [card.type for card in result.cards] == ["text", "mc_question", "fill_in_blank", "interactive_visual", "oral_exam"]
    assert len(result.errors) == 1
    assert result.errors[0].index == 3
    assert result.errors[0].error == "Unknown card type: video_learning"


def test_raising_generator_omits_only_its_slot(registry):
    async def explode(context):
        raise RuntimeError("model melted")

    registry.register(CardType(
        name="flaky", display_name="Flaky", description="Always fails.",
        best_used_for="Tests.", generate=explode,
    ))
    generator = CardGenerator(FakeGenerativeClient(), registry, FakeObjectStore())
    result = run_generator(generator, make_plan(["text", "flaky", "mc_question"]))

    assert [card.type for card in result.cards] == ["text", "mc_question"]
    assert [(error.index, error.error) for error in result.errors] == [(1, "model melted")]


def test_results_follow_plan_order_not_completion_order(registry):
    async def slow(context):
        await asyncio.sleep(0.05)
        return GeneratedCard(type="slow", content={"focus": context.focus})

    async def fast(context):
        return GeneratedCard(type="fast", content={"focus": context.focus})

    registry.register(CardType(name="slow", display_name="Slow", description="", best_used_for="", generate=slow))
    registry.register(CardType(name="fast", display_name="Fast", description="", best_used_for="", generate=fast))

    generator = CardGenerator(FakeGenerativeClient(), registry)
    result = run_generator(generator, make_plan(["slow", "fast", "slow", "fast"]))
    assert [card.content["focus"] for card in result.cards] == ["focus 0", "focus 1", "focus 2", "focus 3"]


def test_cards_run_concurrently(registry):
    running = {"now": 0, "peak": 0}

    async def tracked(context):
        running["now"] += 1
        running["peak"] = max(running["peak"], running["now"])
        await asyncio.sleep(0.01)
        running["now"] -= 1
        return GeneratedCard(type="tracked", content={})

    registry.register(CardType(name="tracked", display_name="T", description="", best_used_for="", generate=tracked))
    result = run_generator(CardGenerator(FakeGenerativeClient(), registry), make_plan(["tracked"] * 5))
    assert len(result.cards) == 5
    assert running["peak"] == 5


def test_context_carries_lesson_and_focus(registry):
    seen = []

    async def capture(context):
        seen.append(context)
        return GeneratedCard(type="capture", content={})

    registry.register(CardType(name="capture", display_name="C", description="", best_used_for="", generate=capture))
    store = FakeObjectStore()
    client = FakeGenerativeClient()
    run_generator(CardGenerator(client, registry, store), make_plan(["capture"]))

    context = seen[0]
    assert context.lesson_id == "lesson-1"
    assert context.focus == "focus 0"
    assert context.lesson_content == "Plants use light."
    assert context.client is client
    assert context.object_store is store


def test_infographic_downgrade_keeps_its_slot(registry):
    client = FakeGenerativeClient(image=None)
    result = run_generator(CardGenerator(client, registry, FakeObjectStore()), make_plan(["text", "infographic", "mc_question"]))
    assert [card.type for card in result.cards] == ["text", "text", "mc_question"]
    assert result.errors == []
