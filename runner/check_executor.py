# runner/check_executor.py
import logging

from runner.result import CheckResult
from runner.snapshots import SnapshotLifecycle
from spec_parser.check_patterns import DETERMINISTIC_CHECKS, KNOWN_PATTERN_HINT
from spec_parser.dsl_models import CheckType

logger = logging.getLogger(__name__)

UNRECOGNIZED_PATTERN = "Unrecognized check pattern"


async def execute_check_step(
    instruction: str,
    check_type: CheckType,
    page,
    snapshots: SnapshotLifecycle,
) -> CheckResult:
    if check_type == CheckType.DETERMINISTIC:
        return await execute_deterministic_check(instruction, page)
    return await execute_semantic_check(instruction, page, snapshots)


async def execute_deterministic_check(instruction: str, page) -> CheckResult:
    trimmed = instruction.strip()

    for check in DETERMINISTIC_CHECKS:
        match = check.match(trimmed)
        if not match:
            continue

        expected = check.get_expected(match)
        try:
            actual = await check.get_actual(page, match)
        except Exception as e:
            return _unreadable_check(check.name, match, expected, e)
        passed = check.compare(actual, expected)
        logger.debug(f"[{check.name}] expected={expected!r} actual={actual!r} → {passed}")

        return CheckResult(
            passed=passed,
            check_type=CheckType.DETERMINISTIC,
            expected=expected,
            actual=actual,
        )

    logger.warning(f"No deterministic handler matches: {instruction}")
    return CheckResult(
        passed=False,
        check_type=CheckType.DETERMINISTIC,
        expected=instruction,
        actual=UNRECOGNIZED_PATTERN,
        suggestion=KNOWN_PATTERN_HINT,
    )


def _unreadable_check(name: str, match, expected: str, error: Exception) -> CheckResult:
    # the page refused the query (bad CSS selector, navigation in flight)
    logger.warning(f"[{name}] could not read page state: {error}")
    selector = match.groupdict().get("selector")

    if selector:
        actual = f"Invalid selector: {selector.strip()}"
        suggestion = f"Use a CSS selector the browser accepts (e.g. li.item, #email). Browser said: {error}"
    else:
        actual = f"Could not read page state: {error}"
        suggestion = "Make sure the page has finished loading before this check"

    return CheckResult(
        passed=False,
        check_type=CheckType.DETERMINISTIC,
        expected=expected,
        actual=actual,
        suggestion=suggestion,
    )


async def execute_semantic_check(
    instruction: str,
    page,
    snapshots: SnapshotLifecycle,
) -> CheckResult:
    """
    Take the "after" snapshot and judge the condition against the baseline
    the orchestrator took before the last action.
    """
    await snapshots.capture_after(page)
    passed = await snapshots.evaluate(instruction)

    return CheckResult(
        passed=passed,
        check_type=CheckType.SEMANTIC,
        expected=instruction,
        actual="Condition met" if passed else "Condition not met",
        reasoning=(
            f'LLM confirmed: "{instruction}"'
            if passed
            else f'LLM could not confirm: "{instruction}"'
        ),
    )
