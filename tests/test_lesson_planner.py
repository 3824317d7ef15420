import asyncio
import json

from conftest import FakeGenerativeClient, PLANNER
from services.lesson_planner import LessonPlanner
from utils.model_config import ModelRole

ALL_KINDS = ["text", "mc_question", "fill_in_blank", "infographic", "interactive_visual", "oral_exam"]


def plan_response(kinds):
    return json.dumps({"cards": [{"type": kind, "focus": f"focus on {kind}"} for kind in kinds]})


def run_plan(planner):
    return asyncio.run(planner.plan("Photosynthesis", "How plants make food", "Plants use light."))


def test_valid_plan_is_kept_in_order(registry):
    kinds = ["text", "mc_question", "infographic", "fill_in_blank", "interactive_visual", "text", "oral_exam"]
    client = FakeGenerativeClient({PLANNER: plan_response(kinds)})
    plan = run_plan(LessonPlanner(client, registry))
    assert plan.kinds() == kinds
    assert not plan.used_default
    assert plan.cards[0].focus == "focus on text"
    assert client.text_calls[0][1] == ModelRole.PLANNER


def test_prompt_carries_catalog_and_constraints(registry):
    client = FakeGenerativeClient({PLANNER: plan_response(ALL_KINDS)})
    run_plan(LessonPlanner(client, registry))
    prompt = client.text_calls[0][0]
    assert "Use ONLY these type names: text, mc_question" in prompt
    assert "At most 8 cards" in prompt
    assert "Use EVERY card type at least once" in prompt
    assert "Type: oral_exam" in prompt


def test_unknown_kinds_are_dropped(registry):
    kinds = ALL_KINDS[:3] + ["video_learning"] + ALL_KINDS[3:]
    client = FakeGenerativeClient({PLANNER: plan_response(kinds)})
    plan = run_plan(LessonPlanner(client, registry))
    assert plan.kinds() == ALL_KINDS
    assert "video_learning" not in plan.kinds()


def test_plan_truncated_to_max_size(registry):
    kinds = ALL_KINDS + ["text", "mc_question", "text", "mc_question"]
    client = FakeGenerativeClient({PLANNER: plan_response(kinds)})
    plan = run_plan(LessonPlanner(client, registry))
    assert len(plan) == 8
    assert plan.kinds() == kinds[:8]


def test_missing_kind_with_full_coverage_uses_default(registry):
    client = FakeGenerativeClient({PLANNER: plan_response(["text", "mc_question", "text", "fill_in_blank", "infographic", "oral_exam"])})
    plan = run_plan(LessonPlanner(client, registry))
    assert plan.used_default
    assert plan.kinds() == ALL_KINDS


def test_partial_coverage_allowed_when_not_required(registry):
    client = FakeGenerativeClient({PLANNER: plan_response(["text", "mc_question", "text"])})
    plan = run_plan(LessonPlanner(client, registry, full_coverage=False))
    assert plan.kinds() == ["text", "mc_question", "text"]


def test_too_small_plan_uses_default(registry):
    client = FakeGenerativeClient({PLANNER: plan_response(["text", "video_learning", "podcast"])})
    plan = run_plan(LessonPlanner(client, registry, full_coverage=False))
    assert plan.used_default
    assert len(plan) == len(registry)


def test_garbage_response_uses_default(registry):
    client = FakeGenerativeClient({PLANNER: "I think the lesson should have some cards."})
    plan = run_plan(LessonPlanner(client, registry))
    assert plan.used_default
    assert plan.kinds() == ALL_KINDS
    assert plan.cards[0].focus == "introduce the main concept of this lesson"


def test_service_failure_never_raises(registry):
    client = FakeGenerativeClient({PLANNER: RuntimeError("503 unavailable")})
    plan = run_plan(LessonPlanner(client, registry))
    assert plan.used_default
    assert len(plan) > 0


def test_bare_list_and_kind_key_accepted(registry):
    entries = [{"kind": kind} for kind in ALL_KINDS]
    client = FakeGenerativeClient({PLANNER: json.dumps(entries)})
    plan = run_plan(LessonPlanner(client, registry))
    assert plan.kinds() == ALL_KINDS
    assert plan.cards[1].focus == "test basic understanding"


def test_default_plan_is_one_per_registered_kind(registry):
    plan = LessonPlanner(FakeGenerativeClient(), registry).default_plan()
    assert plan.kinds() == registry.list_names()
    assert all(card.focus for card in plan.cards)
