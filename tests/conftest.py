from pathlib import Path
from types import SimpleNamespace

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakePage:
    """Enough of the Playwright/Stagehand page API for the runner."""

    def __init__(self, url="http://localhost:8080/", title="Home", text="", html="<html><body></body></html>"):
        self.url = url
        self.title_text = title
        self.text = text
        self.html = html
        self.elements = []
        self.counts = {}
        self.input_values = {}
        self.checkboxes = {}
        self.visits = []
        # script substring -> browser error message
        self.script_errors = {}

    async def goto(self, url):
        self.visits.append(url)
        self.url = url

    async def title(self):
        return self.title_text

    async def evaluate(self, script, arg=None):
        for fragment, message in self.script_errors.items():
            if fragment in script:
                raise RuntimeError(message)
        if "outerHTML" in script:
            return self.html
        if "innerText" in script:
            return self.text
        if "button, a, input, select, textarea" in script:
            return self.elements
        if "querySelectorAll(selector).length" in script:
            return self.counts.get(arg, 0)
        if "activeElement" in script:
            return self.input_values.get(arg)
        if "checked" in script:
            return self.checkboxes.get(arg)
        raise AssertionError(f"unexpected script: {script}")


class FakeDriver:
    """Action capability; instructions listed in ``failures`` raise."""

    def __init__(self, page, failures=None, observations=None, navigations=None):
        self.page = page
        self.failures = failures or {}
        self.observations = observations if observations is not None else []
        self.navigations = navigations or {}
        self.calls = []
        self.observe_calls = 0

    async def act(self, instruction):
        self.calls.append(instruction)
        if instruction in self.failures:
            raise RuntimeError(self.failures[instruction])
        if instruction in self.navigations:
            self.page.url = self.navigations[instruction]

    async def observe(self, instruction=None):
        self.observe_calls += 1
        if isinstance(self.observations, Exception):
            raise self.observations
        return list(self.observations)


class FakeTester:
    """Semantic capability recording the snapshot protocol."""

    def __init__(self, verdicts=None):
        self.verdicts = verdicts or {}
        self.events = []
        self.snapshot_count = 0
        self.clear_count = 0
        self.asserted = []

    async def snapshot(self, page):
        self.snapshot_count += 1
        self.events.append("snapshot")
        return SimpleNamespace(n=self.snapshot_count, url=page.url)

    def clear_snapshots(self):
        self.clear_count += 1
        self.events.append("clear")

    async def assert_(self, condition, before=None, after=None):
        self.events.append("assert")
        self.asserted.append((condition, before, after))
        return self.verdicts.get(condition, True)


class FakeSession:
    def __init__(self, page, driver, tester):
        self.page = page
        self.driver = driver
        self.tester = tester
        self.closed = False

    async def close(self):
        self.closed = True
        self.tester.clear_snapshots()


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture
def make_session():
    """Build (factory, session) where factory matches SpecOrchestrator's session_factory."""

    def _make(page=None, failures=None, navigations=None, observations=None, verdicts=None):
        page = page or FakePage()
        driver = FakeDriver(page, failures=failures, navigations=navigations, observations=observations)
        session = FakeSession(page, driver, FakeTester(verdicts))
        opened = []

        async def factory(config, cache_dir):
            opened.append(cache_dir)
            return session

        factory.opened = opened
        return factory, session

    return _make
