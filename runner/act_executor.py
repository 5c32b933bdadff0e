# runner/act_executor.py
import logging
import time

from runner.result import ActResult

logger = logging.getLogger(__name__)

_OUTER_HTML_JS = "() => document.documentElement.outerHTML"


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


async def execute_act_step(instruction: str, driver) -> ActResult:
    """
    Run one natural-language action. Action errors never propagate: they
    come back as a failed ActResult with a DOM snapshot and the actions
    Stagehand could still see.
    """
    start = time.monotonic()

    try:
        await driver.act(instruction)
        duration = _elapsed_ms(start)
        return ActResult(success=True, duration=duration, page_url=driver.page.url)

    except Exception as e:
        duration = _elapsed_ms(start)
        logger.warning(f"Act failed: {instruction} → {e}")

        page = driver.page
        page_snapshot = ""
        if page is not None:
            try:
                page_snapshot = await page.evaluate(_OUTER_HTML_JS)
            except Exception as snapshot_error:
                logger.debug(f"Could not capture page snapshot: {snapshot_error}")

        try:
            available_actions = await driver.observe()
        except Exception as observe_error:
            logger.debug(f"observe failed after act error: {observe_error}")
            available_actions = []

        return ActResult(
            success=False,
            duration=duration,
            page_url=page.url if page is not None else None,
            error=str(e) or type(e).__name__,
            page_snapshot=page_snapshot,
            available_actions=available_actions,
        )
