# run_spec.py
import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from config.config import RunnerConfig
from runner.errors import SpecRunnerError
from runner.orchestrator import SpecOrchestrator
from runner.reporter import RULE, print_outline, print_report
from spec_parser.spec_loader import parse_spec_file

logger = logging.getLogger("spec_runner")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spec-runner",
        description="Run a markdown behavior spec (Act/Check steps) against a live web app.",
    )
    parser.add_argument("spec_file", help="Markdown spec file")
    parser.add_argument("example", nargs="?", help="Run only the example with this name")
    parser.add_argument("--base-url", help="Application URL (env BASE_URL, default http://localhost:8080)")
    parser.add_argument("--cache-dir", help="Action cache directory (env CACHE_DIR)")
    parser.add_argument("--cache-per-spec", action="store_true", help="One cache sub-directory per spec")
    parser.add_argument("--clear-cache", action="store_true", help="Clear the cache before running (env CLEAR_CACHE=true)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--json", dest="json_path", help="Also write the run report as JSON to this path")
    parser.add_argument("--list", action="store_true", help="Only print the parsed examples and steps")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


async def main_async(args: argparse.Namespace) -> int:
    config = RunnerConfig.from_env(
        base_url=args.base_url,
        cache_dir=args.cache_dir,
        cache_per_spec=True if args.cache_per_spec else None,
        headless=False if args.headed else None,
    )
    clear_cache = args.clear_cache or os.getenv("CLEAR_CACHE") == "true"

    print(RULE)
    print("Spec Test Runner")
    print(RULE)
    print(f"Base URL: {config.base_url}")
    print(f"Spec file: {args.spec_file}")
    if args.example:
        print(f"Example: {args.example}")
    if config.cache_dir:
        print(f"Cache: {config.cache_dir}{' (will be cleared)' if clear_cache else ''}")
    print()

    spec = await parse_spec_file(args.spec_file)
    print_outline(spec, args.example)
    if args.list:
        return 0

    orchestrator = SpecOrchestrator(config)
    if clear_cache:
        orchestrator.clear_cache()

    try:
        result = await orchestrator.run_from_spec(spec, args.example)
    except SpecRunnerError as e:
        logger.error(f"Runner error: {e}")
        return 1
    finally:
        await orchestrator.close()

    print_report(result, orchestrator.get_cache_dir(spec))

    if args.json_path:
        with open(args.json_path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)

    return 0 if result.success else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(main_async(args))
    except FileNotFoundError as e:
        logger.error(f"Spec file not found: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
