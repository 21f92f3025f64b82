import asyncio
from datetime import date, datetime, timezone

import httpx
import pytest

from goalforge.errors import AIServiceError
from goalforge.providers.base import BaseProvider
from goalforge.providers.groq_provider import GroqProvider
from goalforge.schemas import Achievement, AchievementType, Goal, Habit, ReportConfig, Task
from goalforge.services.ai_service import REFLECTION_FALLBACK, REPORT_FALLBACK, AIService
from goalforge.services.cache_service import ResponseCache
from goalforge.services.key_manager import KeyManager
from goalforge.services.llm_router import LLMRouter, extract_json
from tests.conftest import FakeGenerator


def run(coro):
    return asyncio.run(coro)


# --- Call sites and fallbacks ---
def test_smart_goal_falls_back_to_input():
    ai = AIService(FakeGenerator(error="quota"))
    assert run(ai.generate_smart_goal("get better at talks")) == "get better at talks"


def test_smart_goal_rewrite():
    ai = AIService(FakeGenerator(text="  Give 3 conference talks by June 2027.  "))
    assert run(ai.generate_smart_goal("get better at talks")) == "Give 3 conference talks by June 2027."


def test_milestones_are_parsed():
    ai = AIService(FakeGenerator(structured=[
        {"description": "Draft outline", "status": "pending", "due_date": "2026-11-01"},
        {"description": "Submit CFP", "status": "pending", "due_date": "2026-12-01"},
    ]))
    drafts = run(ai.generate_milestones("Speak at a conference", "by March"))
    assert [d.description for d in drafts] == ["Draft outline", "Submit CFP"]
    assert drafts[0].due_date == date(2026, 11, 1)


@pytest.mark.parametrize("generator", [
    FakeGenerator(error="quota"),
    FakeGenerator(structured={"not": "a list"}),
    FakeGenerator(structured=[{"status": "pending"}]),
])
def test_milestone_fallback_is_empty(generator):
    assert run(AIService(generator).generate_milestones("Speak", "by March")) == []


def test_classification_and_fallback():
    ok = AIService(FakeGenerator(structured={"classification": "Leadership", "summary": "Led the migration."}))
    result = run(ok.classify_achievement("Migration", "Led the DB migration"))
    assert result.classification == AchievementType.LEADERSHIP

    failing = AIService(FakeGenerator(structured={"classification": "Heroics", "summary": "?"}))
    result = run(failing.classify_achievement("Migration", "Led the DB migration"))
    assert result.classification == AchievementType.OTHER
    assert result.summary == "Led the DB migration"


def test_report_prompt_only_includes_items_in_range():
    config = ReportConfig(start_date=date(2026, 10, 1), end_date=date(2026, 10, 31), goal_ids=["g1"])
    goals = [
        Goal(id="g1", user_id="u1", title="Ship v2", progress=67),
        Goal(id="g2", user_id="u1", title="Hidden goal"),
    ]
    achievements = [
        Achievement(user_id="u1", title="Launched beta", summary="Shipped", date=date(2026, 10, 5)),
        Achievement(user_id="u1", title="Old win", date=date(2026, 9, 5)),
    ]
    tasks = [
        Task(user_id="u1", list_id="l1", title="Write docs", status="completed",
             completed_at=datetime(2026, 10, 10, tzinfo=timezone.utc)),
        Task(user_id="u1", list_id="l1", title="Stale task", status="completed",
             completed_at=datetime(2026, 8, 10, tzinfo=timezone.utc)),
        Task(user_id="u1", list_id="l1", title="Open task"),
    ]
    prompt = AIService.build_report_prompt(config, goals, achievements, tasks)

    assert "Ship v2 (67% complete)" in prompt
    assert "Hidden goal" not in prompt
    assert "Launched beta" in prompt and "Old win" not in prompt
    assert "Write docs" in prompt
    assert "Stale task" not in prompt and "Open task" not in prompt


def test_report_and_reflection_fallbacks():
    ai = AIService(FakeGenerator(error="down"))
    config = ReportConfig(start_date=date(2026, 10, 1), end_date=date(2026, 10, 31))
    assert run(ai.generate_report(config, [], [], [])) == REPORT_FALLBACK
    habits = [Habit(user_id="u1", name="Read", streak_count=4)]
    assert run(ai.generate_reflection(habits, [])) == REFLECTION_FALLBACK


def test_reflection_prompt_mentions_streaks():
    generator = FakeGenerator(text="- Well done")
    habits = [Habit(user_id="u1", name="Read", streak_count=4)]
    goals = [Goal(user_id="u1", title="Ship v2", progress=50)]
    assert run(AIService(generator).generate_reflection(habits, goals)) == "- Well done"
    assert "Read: Streak 4" in generator.prompts[0]
    assert "Ship v2 is 50% done" in generator.prompts[0]


# --- Router ---
class ScriptedProvider(BaseProvider):
    """Answers from a per-key script: a string is a reply, "error:..." a failed result, an Exception is raised."""

    def __init__(self, provider_name, api_key, script):
        self._name = provider_name
        self.api_key = api_key
        self.script = script

    @property
    def name(self):
        return self._name

    async def generate(self, prompt, model=None, response_schema=None):
        outcome = self.script[self.api_key]
        if isinstance(outcome, Exception):
            raise outcome
        if outcome.startswith("error:"):
            return self._result(model or "m", error=outcome[len("error:"):])
        return self._result(model or "m", text=outcome)


def _router(keys, script):
    providers = [
        {"name": name, "provider_class": lambda api_key, name=name: ScriptedProvider(name, api_key, script), "priority": i}
        for i, name in enumerate(keys, start=1)
    ]
    return LLMRouter(key_manager=KeyManager(keys), providers=providers)


def test_rate_limited_key_rotates_to_next():
    router = _router({"alpha": ["k1", "k2"]}, {"k1": "error:429 Too Many Requests", "k2": "hello"})
    assert run(router.generate_text("hi")) == "hello"
    assert router.key_manager.get_active_key_count("alpha") == 1


def test_failing_provider_falls_back_to_next():
    router = _router({"alpha": ["k1"], "beta": ["k2"]}, {"k1": RuntimeError("boom"), "k2": "from beta"})
    assert run(router.generate_text("hi")) == "from beta"
    status = {p["name"]: p for p in router.get_provider_status()}
    assert status["alpha"]["failure_count"] == 1


def test_all_providers_failing_raises():
    router = _router({"alpha": ["k1"]}, {"k1": "error:500 internal"})
    with pytest.raises(AIServiceError):
        run(router.generate_text("hi"))


def test_no_configured_providers_raises():
    router = LLMRouter(key_manager=KeyManager({"gemini": [], "groq": []}))
    assert router.providers == []
    with pytest.raises(AIServiceError):
        run(router.generate_text("hi"))


def test_structured_output_is_extracted_from_prose():
    router = _router({"alpha": ["k1"]}, {"k1": 'Sure! {"classification": "Impact", "summary": "x"} Hope that helps.'})
    assert run(router.generate_structured("classify", {"type": "OBJECT"})) == {"classification": "Impact", "summary": "x"}


def test_unparseable_structured_output_raises():
    router = _router({"alpha": ["k1"]}, {"k1": "no json here"})
    with pytest.raises(AIServiceError):
        run(router.generate_structured("classify", {"type": "OBJECT"}))


def test_cached_responses_skip_providers():
    script = {"k1": "first"}
    router = _router({"alpha": ["k1"]}, script)
    assert run(router.generate_text("hi", cache_ttl=60)) == "first"
    script["k1"] = "second"
    assert run(router.generate_text("hi", cache_ttl=60)) == "first"
    assert run(router.generate_text("hi")) == "second"


def test_extract_json():
    assert extract_json('[{"a": 1}]') == [{"a": 1}]
    assert extract_json('Here: [{"a": 1}] done', {"type": "ARRAY"}) == [{"a": 1}]
    with pytest.raises(ValueError):
        extract_json("")
    with pytest.raises(ValueError):
        extract_json("plain words")


# --- Providers ---
def test_groq_provider_success_and_rate_limit():
    def handler(request):
        if request.headers["Authorization"] == "Bearer good":
            return httpx.Response(200, json={"choices": [{"message": {"content": "hi there"}}]})
        return httpx.Response(429, text="rate limited")

    transport = httpx.MockTransport(handler)
    ok = run(GroqProvider("good", transport=transport).generate("hello"))
    assert ok["status"] == "success" and ok["text"] == "hi there"

    limited = run(GroqProvider("spent", transport=transport).generate("hello"))
    assert limited["status"] == "failed"
    assert "429" in limited["error"]


def test_key_manager_round_robin():
    keys = KeyManager({"alpha": ["k1", "k2"]})
    assert [keys.get_next_key("alpha") for _ in range(3)] == ["k1", "k2", "k1"]
    keys.mark_exhausted_by_value("alpha", "k1")
    assert keys.get_next_key("alpha") == "k2"
    keys.mark_exhausted_by_value("alpha", "k2")
    assert keys.get_next_key("alpha") is None
    keys.reset_daily()
    assert keys.get_active_key_count("alpha") == 2


def test_key_manager_resets_on_a_new_day():
    day = {"value": date(2026, 10, 18)}
    keys = KeyManager({"alpha": ["k1"]}, today=lambda: day["value"])
    keys.mark_exhausted_by_value("alpha", "k1")
    assert keys.get_next_key("alpha") is None
    day["value"] = date(2026, 10, 19)
    assert keys.get_next_key("alpha") == "k1"


def test_cache_expiry_and_eviction():
    now = {"value": 1000.0}
    cache = ResponseCache(max_entries=2, clock=lambda: now["value"])
    cache.set("a", {"text": "A"}, ttl_seconds=10)
    cache.set("b", {"text": "B"}, ttl_seconds=100)
    assert cache.get("a") == {"text": "A"}

    cache.set("c", {"text": "C"}, ttl_seconds=100)
    assert cache.get("b") is None  # least recently used
    now["value"] += 50
    assert cache.get("a") is None
    assert cache.get("c") == {"text": "C"}
    assert cache.get_stats()["hits"] == 2

    cache.set("d", {"text": "D"}, ttl_seconds=0)
    assert cache.get("d") is None


def test_full_cache_drops_expired_entries_first():
    now = {"value": 0.0}
    cache = ResponseCache(max_entries=2, clock=lambda: now["value"])
    cache.set("old", {"text": "old"}, ttl_seconds=100)
    cache.set("short", {"text": "short"}, ttl_seconds=5)
    now["value"] = 10
    cache.set("new", {"text": "new"}, ttl_seconds=100)

    assert cache.get("old") == {"text": "old"}
    assert cache.get("new") == {"text": "new"}
    assert cache.get_stats()["total_entries"] == 2
    assert cache.clear_expired() == 0
