import asyncio

from conftest import FakeDriver, FakePage
from runner.act_executor import execute_act_step


def test_successful_act_records_url():
    page = FakePage(url="http://localhost:8080/login")
    driver = FakeDriver(page, navigations={"User clicks Sign In": "http://localhost:8080/dashboard"})

    result = asyncio.run(execute_act_step("User clicks Sign In", driver))

    assert result.success is True
    assert result.page_url == "http://localhost:8080/dashboard"
    assert result.error is None
    assert result.duration >= 0
    assert driver.calls == ["User clicks Sign In"]
    assert driver.observe_calls == 0


def test_failed_act_captures_snapshot_and_observations():
    page = FakePage(html="<html><body><button>Log in</button></body></html>")
    driver = FakeDriver(
        page,
        failures={"User clicks Sign In": "No element found for Sign In"},
        observations=["Click the Log in button", "Fill the email field"],
    )

    result = asyncio.run(execute_act_step("User clicks Sign In", driver))

    assert result.success is False
    assert result.error == "No element found for Sign In"
    assert result.page_snapshot == page.html
    assert result.available_actions == ["Click the Log in button", "Fill the email field"]


def test_observe_failure_leaves_empty_actions():
    page = FakePage()
    driver = FakeDriver(page, failures={"go": "timeout"}, observations=RuntimeError("observe broke"))

    result = asyncio.run(execute_act_step("go", driver))

    assert result.success is False
    assert result.available_actions == []
    assert driver.calls == ["go"]
