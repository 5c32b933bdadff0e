# spec_parser/spec_parser.py
import logging
import re
from typing import List, Optional

from spec_parser.check_classifier import classify_check
from spec_parser.dsl_models import ActStep, CheckStep, Example, Specification, Step

logger = logging.getLogger(__name__)

STEP_PATTERN = re.compile(r"^\s*\*\s*(Act|Check):\s*(.+)$")
NAME_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)
DIRECTORY_PATTERN = re.compile(r"^Directory:\s*`([^`]+)`", re.MULTILINE)
EXAMPLES_HEADING_PATTERN = re.compile(r"^## Examples\s*$", re.MULTILINE)
SECTION_HEADING_PATTERN = re.compile(r"^## [^#]", re.MULTILINE)
EXAMPLE_HEADING_PATTERN = re.compile(r"^###\s+(.+)$", re.MULTILINE)

DEFAULT_SPEC_NAME = "Unnamed"
DEFAULT_EXAMPLE_NAME = "Default"


def _normalize(text: str) -> str:
    return text.replace("\r\n", "\n")


def parse_steps(content: str, line_offset: int = 0) -> List[Step]:
    """
    Extract Act/Check bullet lines. Anything else is ignored.

    ``line_offset`` is the number of lines preceding ``content`` in the
    document, so line numbers point into the spec file.
    """
    steps: List[Step] = []

    for index, line in enumerate(_normalize(content).split("\n"), start=line_offset + 1):
        match = STEP_PATTERN.match(line)
        if not match:
            continue

        step_type, raw_instruction = match.groups()
        instruction = raw_instruction.strip()

        if step_type == "Act":
            steps.append(ActStep(instruction=instruction, line_number=index))
        else:
            steps.append(
                CheckStep(
                    instruction=instruction,
                    check_type=classify_check(instruction),
                    line_number=index,
                )
            )

    return steps


def parse_examples(content: str) -> List[Example]:
    content = _normalize(content)

    examples_match = EXAMPLES_HEADING_PATTERN.search(content)
    if not examples_match:
        # legacy format: the whole document is one example
        steps = parse_steps(content)
        if steps:
            return [Example(name=DEFAULT_EXAMPLE_NAME, steps=tuple(steps))]
        return []

    start = examples_match.end()
    next_section = SECTION_HEADING_PATTERN.search(content, start)
    end = next_section.start() if next_section else len(content)
    section = content[start:end]

    headings = list(EXAMPLE_HEADING_PATTERN.finditer(section))
    examples: List[Example] = []

    for idx, heading in enumerate(headings):
        name = heading.group(1).strip()
        body_end = headings[idx + 1].start() if idx + 1 < len(headings) else len(section)
        body_start = start + heading.end()
        steps = parse_steps(
            section[heading.end():body_end],
            line_offset=content.count("\n", 0, body_start),
        )

        if not steps:
            logger.debug(f"Skipping example without steps: {name}")
            continue
        examples.append(Example(name=name, steps=tuple(steps)))

    _warn_duplicates(examples)
    return examples


def _warn_duplicates(examples: List[Example]) -> None:
    seen = set()
    for example in examples:
        if example.name in seen:
            logger.warning(
                f"Duplicate example name '{example.name}': only the first one can be selected by name"
            )
        seen.add(example.name)


def parse_spec(text: str) -> Specification:
    """
    Parse a behavior specification.

    Format:
    - ``# Name``                  → behavior name
    - ``Directory: `path` ``      → optional directory
    - ``## Examples`` / ``### X`` → named examples with ``* Act:`` / ``* Check:`` steps

    Documents without an Examples section become a single "Default" example.
    """
    name_match = NAME_PATTERN.search(text)
    name = name_match.group(1).strip() if name_match else DEFAULT_SPEC_NAME

    directory: Optional[str] = None
    dir_match = DIRECTORY_PATTERN.search(text)
    if dir_match:
        directory = dir_match.group(1).strip()

    return Specification(
        name=name,
        directory=directory,
        examples=tuple(parse_examples(text)),
    )
