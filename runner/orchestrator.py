# runner/orchestrator.py
import logging
import os
import re
import shutil
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from config.config import RunnerConfig
from runner.act_executor import execute_act_step
from runner.check_executor import execute_check_step
from runner.errors import ExampleNotFoundError, NoExamplesError, SessionError
from runner.failure_context import generate_failure_context
from runner.result import ExampleResult, FailedAt, SpecTestResult, StepResult
from runner.snapshots import SnapshotLifecycle
from spec_parser.dsl_models import ActStep, CheckStep, Example, Specification, Step
from spec_parser.spec_loader import parse_spec_file

logger = logging.getLogger(__name__)

SessionFactory = Callable[[RunnerConfig, Optional[str]], Awaitable]


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def cache_slug(name: str) -> str:
    """Lower-case, runs of non-alphanumerics collapsed to '-'."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower())


async def _open_browser_session(config: RunnerConfig, cache_dir: Optional[str]):
    # Stagehand is only imported when a real browser is needed
    from stage_hand.browser_session import BrowserSession

    return await BrowserSession.open(config, cache_dir)


@dataclass
class StepContext:
    step_index: int
    total_steps: int
    previous_results: List[StepResult]
    page: object
    driver: object
    snapshots: SnapshotLifecycle


class SpecOrchestrator:
    """
    Runs parsed behavior specs against the configured base URL.

    Snapshot lifecycle per example:
    1. goto base URL, initial snapshot (first "before")
    2. Act: clear tester snapshots + fresh "before", then run the action
    3. Check: semantic checks take the "after" snapshot and compare

    So a semantic check always compares "state before the last action"
    with "state at check time". The browser session is opened on first
    use, shared by every example of this instance, and released by close().
    """

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    CLOSED = "closed"

    def __init__(self, config: RunnerConfig, session_factory: Optional[SessionFactory] = None):
        self.config = config
        self.session_factory = session_factory or _open_browser_session
        self.session = None
        self.snapshots: Optional[SnapshotLifecycle] = None
        self.current_spec: Optional[Specification] = None
        self.state = self.UNINITIALIZED

    # ─────────── CACHE ───────────

    def get_cache_dir(self, spec: Optional[Specification] = None) -> Optional[str]:
        if not self.config.cache_dir:
            return None

        if self.config.cache_per_spec and spec is not None:
            return os.path.join(self.config.cache_dir, cache_slug(spec.name))

        return self.config.cache_dir

    def clear_cache(self) -> None:
        """
        Remove the cache directory so the next run re-resolves every action.
        """
        if not self.config.cache_dir:
            return

        if os.path.exists(self.config.cache_dir):
            logger.info(f"Clearing action cache: {self.config.cache_dir}")
            shutil.rmtree(self.config.cache_dir, ignore_errors=True)

    # ─────────── SESSION ───────────

    async def initialize(self):
        if self.session is not None:
            return self.session

        cache_dir = self.get_cache_dir(self.current_spec)
        logger.info(f"Starting browser session (cache: {cache_dir or 'disabled'})")

        self.session = await self.session_factory(self.config, cache_dir)
        self.snapshots = SnapshotLifecycle(self.session.tester)
        self.state = self.INITIALIZED
        return self.session

    async def close(self) -> None:
        session, self.session = self.session, None
        try:
            if session is not None:
                await session.close()
        finally:
            if self.snapshots is not None:
                self.snapshots.reset()
                self.snapshots = None
            if self.state == self.INITIALIZED:
                self.state = self.CLOSED

    async def __aenter__(self) -> "SpecOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ─────────── RUN ───────────

    async def run_from_file(self, path: str, example_name: Optional[str] = None) -> SpecTestResult:
        spec = await parse_spec_file(path)
        return await self.run_from_spec(spec, example_name)

    def select_examples(self, spec: Specification, example_name: Optional[str] = None) -> List[Example]:
        if not spec.examples:
            raise NoExamplesError("No examples found in specification")

        if example_name is None:
            return list(spec.examples)

        example = spec.find_example(example_name)
        if example is None:
            raise ExampleNotFoundError(example_name, spec.example_names())
        return [example]

    async def run_from_spec(self, spec: Specification, example_name: Optional[str] = None) -> SpecTestResult:
        start = time.monotonic()

        # cache dir is resolved from the spec when the session opens
        self.current_spec = spec
        examples = self.select_examples(spec, example_name)

        logger.info(f"▶ Running spec '{spec.name}' ({len(examples)} example(s))")
        example_results: List[ExampleResult] = []

        for example in examples:
            example_results.append(await self.run_example(example))

        success = all(r.success for r in example_results)
        logger.info(f"{'✅ PASSED' if success else '❌ FAILED'}: {spec.name}")

        return SpecTestResult(
            success=success,
            spec=spec,
            example_results=example_results,
            duration=_elapsed_ms(start),
        )

    async def run_example(self, example: Example) -> ExampleResult:
        start = time.monotonic()
        session = await self.initialize()
        page = session.page

        if page is None:
            raise SessionError("No active page available")

        logger.info(f"▶ Example: {example.name}")

        # fresh start for every example
        await page.goto(self.config.base_url)
        await self.snapshots.start(page)

        step_results: List[StepResult] = []
        failed_at: Optional[FailedAt] = None

        for idx, step in enumerate(example.steps):
            context = StepContext(
                step_index=idx,
                total_steps=len(example.steps),
                previous_results=step_results,
                page=page,
                driver=session.driver,
                snapshots=self.snapshots,
            )
            logger.info(f"[{idx + 1}/{len(example.steps)}] {step.type.upper()}: {step.instruction}")

            step_result = await self.run_step(step, context)
            step_results.append(step_result)

            if not step_result.success:
                logger.error(f"Step {idx + 1} failed: {step_result.error}")
                failure_context = await generate_failure_context(page, step, step_result.error)
                failed_at = FailedAt(step_index=idx, step=step, context=failure_context)
                break

        return ExampleResult(
            example=example,
            success=failed_at is None,
            steps=step_results,
            duration=_elapsed_ms(start),
            failed_at=failed_at,
        )

    async def run_step(self, step: Step, context: StepContext) -> StepResult:
        start = time.monotonic()

        if isinstance(step, ActStep):
            # new "before" baseline for the checks that follow this action
            await context.snapshots.rebaseline(context.page)
            act_result = await execute_act_step(step.instruction, context.driver)
            return StepResult(
                step=step,
                success=act_result.success,
                duration=_elapsed_ms(start),
                act_result=act_result,
            )

        if isinstance(step, CheckStep):
            check_result = await execute_check_step(
                step.instruction,
                step.check_type,
                context.page,
                context.snapshots,
            )
            return StepResult(
                step=step,
                success=check_result.passed,
                duration=_elapsed_ms(start),
                check_result=check_result,
            )

        raise TypeError(f"Unknown step type: {type(step).__name__}")
