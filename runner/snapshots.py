# runner/snapshots.py
import logging
from typing import Optional

from runner.errors import SnapshotError

logger = logging.getLogger(__name__)


class SnapshotLifecycle:
    """
    Before/after page-state pair used by semantic checks.

    start()          initial baseline when an example begins
    rebaseline()     before every Act: clear the tester, new baseline
    capture_after()  semantic Check: state to compare against the baseline
    evaluate()       ask the tester about (before, after)

    Every semantic check compares the state right before the most recent
    action with the state at check time.
    """

    def __init__(self, tester):
        self.tester = tester
        self.before = None
        self.after = None

    @property
    def has_baseline(self) -> bool:
        return self.before is not None

    async def start(self, page) -> None:
        self.after = None
        self.before = await self.tester.snapshot(page)

    async def rebaseline(self, page) -> None:
        self.tester.clear_snapshots()
        self.after = None
        self.before = await self.tester.snapshot(page)

    async def capture_after(self, page) -> None:
        if self.before is None:
            raise SnapshotError("No 'before' snapshot: semantic check ran before any baseline")
        self.after = await self.tester.snapshot(page)

    async def evaluate(self, condition: str) -> bool:
        if self.before is None or self.after is None:
            raise SnapshotError("Semantic check needs both a 'before' and an 'after' snapshot")
        return await self.tester.assert_(condition, before=self.before, after=self.after)

    def reset(self) -> None:
        self.before = None
        self.after = None
