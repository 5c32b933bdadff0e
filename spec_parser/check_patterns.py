# spec_parser/check_patterns.py
"""
Deterministic check patterns.

One ordered table drives both the classifier (``prefix``) and the
deterministic comparator (``pattern`` + ``get_actual`` + ``compare``), so a
check can only be classified deterministic if a handler for its prefix exists.
"""
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional
from re import Match, Pattern

_SELECTOR = r"`?(?P<selector>[^`]+?)`?"
# a quoted value is taken whole, so " in "/" for " inside it never start a selector
_VALUE = r"""(?P<expected>'[^']*'|"[^"]*"|.+?)"""

_INPUT_VALUE_JS = """(selector) => {
    const el = selector ? document.querySelector(selector) : document.activeElement;
    if (!el || !('value' in el)) return null;
    return String(el.value);
}"""

_CHECKBOX_JS = """(selector) => {
    if (selector) {
        const el = document.querySelector(selector);
        return el ? Boolean(el.checked) : null;
    }
    return Array.from(document.querySelectorAll("input[type=checkbox]")).some((el) => el.checked);
}"""

_ELEMENT_COUNT_JS = "(selector) => document.querySelectorAll(selector).length"


def unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _selector(match: Match) -> Optional[str]:
    selector = match.groupdict().get("selector")
    return selector.strip() if selector else None


async def _page_url(page, match: Match) -> str:
    return page.url


async def _page_title(page, match: Match) -> str:
    return await page.title()


async def _element_count(page, match: Match) -> str:
    count = await page.evaluate(_ELEMENT_COUNT_JS, _selector(match))
    return str(count)


async def _input_value(page, match: Match) -> str:
    value = await page.evaluate(_INPUT_VALUE_JS, _selector(match))
    if value is None:
        return "No input element found"
    return value


async def _checkbox_state(page, match: Match) -> str:
    checked = await page.evaluate(_CHECKBOX_JS, _selector(match))
    if checked is None:
        return "No checkbox element found"
    return "checked" if checked else "unchecked"


def _contains(actual: str, expected: str) -> bool:
    return expected in actual


def _equals(actual: str, expected: str) -> bool:
    return actual == expected


def _expected_group(match: Match) -> str:
    return unquote(match.group("expected"))


@dataclass(frozen=True)
class CheckPattern:
    name: str
    prefix: Pattern
    pattern: Pattern
    get_actual: Callable[[Any, Match], Awaitable[str]]
    compare: Callable[[str, str], bool]
    get_expected: Callable[[Match], str] = _expected_group

    def matches_prefix(self, instruction: str) -> bool:
        return self.prefix.match(instruction) is not None

    def match(self, instruction: str) -> Optional[Match]:
        return self.pattern.match(instruction)


def _p(regex: str) -> Pattern:
    return re.compile(regex, re.IGNORECASE)


DETERMINISTIC_CHECKS = [
    CheckPattern(
        name="url contains",
        prefix=_p(r"^url\s+contains\s+"),
        pattern=_p(r"^url\s+contains\s+(?P<expected>.+)$"),
        get_actual=_page_url,
        compare=_contains,
    ),
    CheckPattern(
        name="url is",
        prefix=_p(r"^url\s+is\s+"),
        pattern=_p(r"^url\s+is\s+(?P<expected>.+)$"),
        get_actual=_page_url,
        compare=_equals,
    ),
    CheckPattern(
        name="page title is",
        prefix=_p(r"^page\s+title\s+is\s+"),
        pattern=_p(r"^page\s+title\s+is\s+(?P<expected>.+)$"),
        get_actual=_page_title,
        compare=_equals,
    ),
    CheckPattern(
        name="page title contains",
        prefix=_p(r"^page\s+title\s+contains\s+"),
        pattern=_p(r"^page\s+title\s+contains\s+(?P<expected>.+)$"),
        get_actual=_page_title,
        compare=_contains,
    ),
    CheckPattern(
        name="element count is",
        prefix=_p(r"^element\s+count\s+is\s+"),
        pattern=_p(r"^element\s+count\s+is\s+(?P<expected>\d+)\s+(?:for|of)\s+" + _SELECTOR + r"$"),
        get_actual=_element_count,
        compare=_equals,
    ),
    CheckPattern(
        name="input value is",
        prefix=_p(r"^input\s+value\s+is\s+"),
        pattern=_p(r"^input\s+value\s+is\s+" + _VALUE + r"(?:\s+(?:in|for)\s+`?(?P<selector>[^`\s]+)`?)?$"),
        get_actual=_input_value,
        compare=_equals,
    ),
    CheckPattern(
        name="checkbox is checked",
        prefix=_p(r"^checkbox\s+is\s+checked"),
        pattern=_p(r"^checkbox\s+is\s+checked(?:\s+(?:in|for)\s+" + _SELECTOR + r")?$"),
        get_actual=_checkbox_state,
        compare=_equals,
        get_expected=lambda match: "checked",
    ),
]

KNOWN_PATTERN_HINT = (
    "Use patterns like 'URL contains X', 'URL is X', 'Page title is Y', "
    "'Page title contains Y', 'Element count is N for <selector>', "
    "'Input value is X in <selector>' or 'Checkbox is checked for <selector>'"
)
