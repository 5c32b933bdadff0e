import logging
from typing import List, Optional

from stagehand import ObserveResult

from stage_hand.action_cache import ActionCache, CachedAction

logger = logging.getLogger(__name__)


def normalize_observe_result(result) -> Optional[ObserveResult]:
    """
    Normalize Stagehand observe output to a single ObserveResult (or None)
    """
    if not result:
        return None
    if isinstance(result, list):
        return result[0]
    return result


def _ensure_success(result, instruction: str) -> None:
    if getattr(result, "success", True) is False:
        message = getattr(result, "message", None) or f"Action failed: {instruction}"
        raise RuntimeError(message)


class StagehandDriver:
    """
    Natural-language action capability on top of a Stagehand session.

    With an action cache, an instruction is resolved once through observe()
    and the selector is replayed on later runs; a replay that fails drops the
    entry and falls back to a fresh observe.
    """

    def __init__(self, stagehand, cache: Optional[ActionCache] = None):
        self.stagehand = stagehand
        self.cache = cache

    @property
    def page(self):
        return self.stagehand.page

    async def act(self, instruction: str):
        page = self.page

        if self.cache is None:
            result = await page.act(instruction)
            _ensure_success(result, instruction)
            return result

        # 1️⃣ Replay (no LLM)
        cached = self.cache.get(instruction)
        if cached:
            try:
                result = await page.act(self._to_observe_result(cached))
                _ensure_success(result, instruction)
                logger.debug(f"Replayed cached action for: {instruction}")
                return result
            except Exception as e:
                logger.warning(f"Cached action failed for '{instruction}' ({e}), re-observing")
                self.cache.discard(instruction)

        # 2️⃣ Observe (LLM)
        observed = normalize_observe_result(await page.observe(instruction))
        if observed is None or not observed.selector:
            result = await page.act(instruction)
            _ensure_success(result, instruction)
            return result

        # 3️⃣ Cache + act on the exact node
        self.cache.put(CachedAction.from_observe(instruction, observed))
        result = await page.act(observed)
        _ensure_success(result, instruction)
        return result

    async def observe(self, instruction: Optional[str] = None) -> List[str]:
        """Descriptions of the actions Stagehand currently sees on the page."""
        if instruction:
            results = await self.page.observe(instruction)
        else:
            results = await self.page.observe()

        if results and not isinstance(results, list):
            results = [results]
        return [getattr(r, "description", None) or str(r) for r in results or []]

    @staticmethod
    def _to_observe_result(cached: CachedAction) -> ObserveResult:
        return ObserveResult(
            selector=cached.selector,
            description=cached.description,
            method=cached.method,
            arguments=cached.arguments,
        )
