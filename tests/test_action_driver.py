import asyncio
from types import SimpleNamespace

import pytest

from stage_hand.action_cache import ActionCache, CachedAction
from stage_hand.action_driver import StagehandDriver


class FakeStagehandPage:
    def __init__(self, observed=None, fail_on=None):
        self.observed = observed if observed is not None else []
        self.fail_on = fail_on
        self.acted = []
        self.observed_calls = []

    async def act(self, action):
        self.acted.append(action)
        if self.fail_on is not None and self.fail_on(action):
            return SimpleNamespace(success=False, message="Could not act", action=str(action))
        return SimpleNamespace(success=True, message="ok", action=str(action))

    async def observe(self, instruction=None):
        self.observed_calls.append(instruction)
        return self.observed


def observe_result(selector="xpath=/html/body/button", description="Sign in button"):
    return SimpleNamespace(selector=selector, description=description, method="click", arguments=[])


def driver_for(page, cache=None):
    return StagehandDriver(SimpleNamespace(page=page), cache)


def test_without_cache_acts_directly():
    page = FakeStagehandPage()
    asyncio.run(driver_for(page).act("User clicks Sign In"))
    assert page.acted == ["User clicks Sign In"]
    assert page.observed_calls == []


def test_failed_act_result_raises():
    page = FakeStagehandPage(fail_on=lambda action: True)
    with pytest.raises(RuntimeError, match="Could not act"):
        asyncio.run(driver_for(page).act("User clicks Sign In"))


def test_observe_then_cache(tmp_path):
    cache = ActionCache(str(tmp_path))
    page = FakeStagehandPage(observed=[observe_result()])

    asyncio.run(driver_for(page, cache).act("User clicks Sign In"))

    assert page.observed_calls == ["User clicks Sign In"]
    assert page.acted[0].selector == "xpath=/html/body/button"
    cached = ActionCache(str(tmp_path)).get("User clicks Sign In")
    assert cached == CachedAction(
        instruction="User clicks Sign In",
        selector="xpath=/html/body/button",
        method="click",
        arguments=[],
        description="Sign in button",
    )


def test_cached_action_is_replayed_without_observe(tmp_path):
    cache = ActionCache(str(tmp_path))
    cache.put(CachedAction("User clicks Sign In", "xpath=/html/body/button", "click", [], "Sign in button"))
    page = FakeStagehandPage()

    asyncio.run(driver_for(page, cache).act("User clicks Sign In"))

    assert page.observed_calls == []
    assert page.acted[0].selector == "xpath=/html/body/button"


def test_stale_cache_entry_falls_back_to_observe(tmp_path):
    cache = ActionCache(str(tmp_path))
    cache.put(CachedAction("User clicks Sign In", "xpath=/old", "click", [], "old"))
    page = FakeStagehandPage(
        observed=[observe_result(selector="xpath=/new")],
        fail_on=lambda action: getattr(action, "selector", None) == "xpath=/old",
    )

    asyncio.run(driver_for(page, cache).act("User clicks Sign In"))

    assert [a.selector for a in page.acted] == ["xpath=/old", "xpath=/new"]
    assert cache.get("User clicks Sign In").selector == "xpath=/new"


def test_nothing_observed_acts_on_instruction(tmp_path):
    cache = ActionCache(str(tmp_path))
    page = FakeStagehandPage(observed=[])

    asyncio.run(driver_for(page, cache).act("Scroll down"))

    assert page.acted == ["Scroll down"]
    assert len(cache) == 0


def test_observe_returns_descriptions():
    page = FakeStagehandPage(observed=[observe_result(description="Click Log in"), observe_result(description="Type email")])
    assert asyncio.run(driver_for(page).observe()) == ["Click Log in", "Type email"]
    assert page.observed_calls == [None]


def test_unreadable_cache_file_starts_empty(tmp_path):
    (tmp_path / "actions.json").write_text("not json")
    assert len(ActionCache(str(tmp_path))) == 0
