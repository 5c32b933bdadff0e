# runner/reporter.py
from typing import Callable, Optional

from runner.result import ExampleResult, SpecTestResult
from spec_parser.dsl_models import Specification

RULE = "=" * 60


def print_outline(spec: Specification, example_name: Optional[str] = None, out: Callable = print) -> None:
    out(f"Behavior: {spec.name}")
    if spec.directory:
        out(f"Directory: {spec.directory}")
    out(f"Examples: {len(spec.examples)}")
    out()

    for idx, example in enumerate(spec.examples, start=1):
        marker = ">>>" if example_name is None or example.name == example_name else "   "
        out(f"{marker} Example {idx}: {example.name}")

        for n, step in enumerate(example.steps, start=1):
            prefix = "->" if step.type == "act" else "ok"
            check_type = f" [{step.check_type.value}]" if step.type == "check" else ""
            out(f"      {n}. {prefix} {step.type.upper()}: {step.instruction}{check_type}")
        out()


def _print_example(idx: int, result: ExampleResult, out: Callable) -> None:
    status = "[PASS]" if result.success else "[FAIL]"
    out(f"{status} Example {idx}: {result.example.name}")
    out(f"  Duration: {result.duration}ms")

    for n, step_result in enumerate(result.steps, start=1):
        mark = "+" if step_result.success else "x"
        out(f"  {mark} Step {n} ({step_result.step.type.upper()}): {step_result.step.instruction}")

        act = step_result.act_result
        if act and not act.success:
            out(f"    Error: {act.error}")

        check = step_result.check_result
        if check and not check.passed:
            out(f"    Expected: {check.expected}")
            out(f"    Actual: {check.actual}")
            if check.reasoning:
                out(f"    Reasoning: {check.reasoning}")
            if check.suggestion:
                out(f"    Suggestion: {check.suggestion}")

    if result.failed_at:
        context = result.failed_at.context
        out()
        out("  Failure Context:")
        out(f"    Step: {result.failed_at.step_index + 1}")
        out(f"    URL: {context.page_url}")
        out(f"    Error: {context.error}")
        out()
        out("    Suggestions:")
        for suggestion in context.suggestions:
            out(f"      - {suggestion}")
        out()
        out("    Available Elements:")
        for el in context.available_elements[:10]:
            out(f"      - {el.type}: {el.text or el.selector}")
    out()


def print_report(result: SpecTestResult, cache_dir: Optional[str] = None, out: Callable = print) -> None:
    out(RULE)
    out("PASSED" if result.success else "FAILED")
    out(RULE)
    out(f"Total Duration: {result.duration}ms")
    out(f"Examples Run: {len(result.example_results)}")
    out()

    for idx, example_result in enumerate(result.example_results, start=1):
        _print_example(idx, example_result, out)

    out(RULE)
    out(f"Summary: {result.passed_count} passed, {result.failed_count} failed")
    if cache_dir:
        out(f"Cache: {cache_dir} (subsequent runs will be faster)")
    out(RULE)
