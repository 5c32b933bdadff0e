import difflib
import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from runner.errors import SnapshotError

logger = logging.getLogger(__name__)

MAX_DIFF_LINES = 200
MAX_PAGE_TEXT = 6000

_VISIBLE_TEXT_JS = "() => document.body ? document.body.innerText : ''"


@dataclass(frozen=True)
class PageState:
    url: str
    title: str
    text: str


def diff_states(before: PageState, after: PageState) -> str:
    diff = difflib.unified_diff(
        before.text.splitlines(),
        after.text.splitlines(),
        fromfile="before",
        tofile="after",
        lineterm="",
        n=2,
    )
    lines = list(diff)
    if len(lines) > MAX_DIFF_LINES:
        lines = lines[:MAX_DIFF_LINES] + [f"... ({len(lines) - MAX_DIFF_LINES} more diff lines)"]
    return "\n".join(lines) or "(no visible text changes)"


def build_assert_prompt(condition: str, before: PageState, after: PageState) -> str:
    return f"""
You are a QA assertion engine for a web application.

A user action was performed on the page. Decide whether the condition below
is TRUE for the page state AFTER the action, using the before/after
comparison as evidence.

Condition: {condition}

BEFORE:
  URL: {before.url}
  Title: {before.title}

AFTER:
  URL: {after.url}
  Title: {after.title}

Visible text diff (unified):
{diff_states(before, after)}

Visible text AFTER (truncated):
{after.text[:MAX_PAGE_TEXT]}

Return ONLY valid JSON in this exact format (no markdown, no explanation):
{{
  "passed": true,
  "reasoning": "one short sentence"
}}
"""


def parse_verdict(raw: str) -> bool:
    """
    Read the boolean verdict from the model answer. Anything unreadable
    counts as not confirmed.
    """
    text = raw.strip()
    json_match = re.search(r'```(?:json)?\s*(\{.*?\})\s*```', text, re.DOTALL)
    if json_match:
        text = json_match.group(1)
    else:
        brace_match = re.search(r'\{.*\}', text, re.DOTALL)
        if brace_match:
            text = brace_match.group(0)

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.warning(f"Could not parse assertion verdict: {raw!r}")
        return bool(re.search(r'"?passed"?\s*:\s*true', raw, re.IGNORECASE))

    if isinstance(data, dict):
        logger.debug(f"Assertion reasoning: {data.get('reasoning')}")
        return data.get("passed") is True
    return False


class PageTester:
    """
    Semantic assertion capability.

    Accumulates page snapshots and judges a natural-language condition
    against the diff between two of them.
    """

    def __init__(self, page, llm):
        self.page = page
        self.llm = llm
        self._snapshots: List[PageState] = []

    @property
    def snapshots(self) -> List[PageState]:
        return list(self._snapshots)

    async def snapshot(self, page=None) -> PageState:
        page = page or self.page
        state = PageState(
            url=page.url,
            title=await page.title(),
            text=await page.evaluate(_VISIBLE_TEXT_JS) or "",
        )
        self._snapshots.append(state)
        logger.debug(f"Snapshot #{len(self._snapshots)} taken at {state.url}")
        return state

    def clear_snapshots(self) -> None:
        self._snapshots.clear()

    async def assert_(
        self,
        condition: str,
        before: Optional[PageState] = None,
        after: Optional[PageState] = None,
    ) -> bool:
        if before is None or after is None:
            if len(self._snapshots) < 2:
                raise SnapshotError(
                    "Semantic assertion needs a 'before' and an 'after' snapshot"
                )
            before = before or self._snapshots[0]
            after = after or self._snapshots[-1]

        prompt = build_assert_prompt(condition, before, after)
        raw = await self.llm.ask(prompt)
        passed = parse_verdict(raw)
        logger.info(f"Semantic check '{condition}': {'passed' if passed else 'failed'}")
        return passed
