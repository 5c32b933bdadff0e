# runner/failure_context.py
import logging
from typing import Any, Dict, List

from runner.result import FailureContext, InteractiveElement
from spec_parser.dsl_models import Step

logger = logging.getLogger(__name__)

MAX_ELEMENTS = 20
MAX_TEXT_LENGTH = 50
MAX_SUGGESTED_ELEMENTS = 5
ELEMENT_ATTRIBUTES = ("type", "name", "placeholder", "href", "value")

_OUTER_HTML_JS = "() => document.documentElement.outerHTML"

# Raw facts only; naming and selector rules live in describe_element()
_INTERACTIVE_ELEMENTS_JS = """(args) => {
    const [limit, attrNames] = args;
    const elements = document.querySelectorAll("button, a, input, select, textarea");
    return Array.from(elements).slice(0, limit).map((el) => {
        const attributes = {};
        for (const name of attrNames) {
            const value = el.getAttribute(name);
            if (value) attributes[name] = value;
        }
        return {
            tag: el.tagName.toLowerCase(),
            id: el.id || "",
            className: typeof el.className === "string" ? el.className : "",
            text: el.textContent || "",
            attributes: attributes,
        };
    });
}"""


def build_selector(tag: str, element_id: str = "", class_name: str = "", name: str = "") -> str:
    """tag#id, else tag.firstClass, else tag[name='x'], else tag"""
    if element_id:
        return f"{tag}#{element_id}"
    classes = class_name.split()
    if classes:
        return f"{tag}.{classes[0]}"
    if name:
        return f"{tag}[name='{name}']"
    return tag


def describe_element(raw: Dict[str, Any]) -> InteractiveElement:
    tag = (raw.get("tag") or "").lower()
    attributes = {
        k: v for k, v in (raw.get("attributes") or {}).items()
        if k in ELEMENT_ATTRIBUTES and v
    }
    text = (raw.get("text") or "").strip()[:MAX_TEXT_LENGTH]

    return InteractiveElement(
        type="link" if tag == "a" else tag,
        text=text or None,
        selector=build_selector(
            tag,
            raw.get("id") or "",
            raw.get("className") or "",
            attributes.get("name", ""),
        ),
        attributes=attributes or None,
    )


async def extract_interactive_elements(page) -> List[InteractiveElement]:
    raw_elements = await page.evaluate(
        _INTERACTIVE_ELEMENTS_JS, [MAX_ELEMENTS, list(ELEMENT_ATTRIBUTES)]
    )
    return [describe_element(raw) for raw in (raw_elements or [])[:MAX_ELEMENTS]]


def generate_suggestions(
    error: str,
    step: Step,
    elements: List[InteractiveElement],
) -> List[str]:
    suggestions: List[str] = []
    error_lower = error.lower()

    if "not found" in error_lower or "no element" in error_lower:
        suggestions.append(f'Element not found for: "{step.instruction}"')

        clickable = [el for el in elements if el.type in ("button", "link")]
        if clickable:
            names = [el.text or el.selector for el in clickable][:MAX_SUGGESTED_ELEMENTS]
            suggestions.append(f"Available clickable elements: {', '.join(names)}")

        suggestions.append("Try using more specific text or check if element exists")

    if "timeout" in error_lower:
        suggestions.append("Operation timed out - the element may not be visible or page is still loading")
        suggestions.append("Consider adding a wait step before this action")
        suggestions.append("Check if the page has fully loaded or if there are async operations")

    if step.type == "check" or "check" in error_lower or "expected" in error_lower:
        suggestions.append(f'Check failed for: "{step.instruction}"')
        suggestions.append("Verify the expected condition matches the current page state")
        suggestions.append("Consider rewording the check or using a different assertion")

    if not suggestions:
        suggestions.append(f'Step failed: "{step.instruction}"')
        suggestions.append(f"Error: {error}")
        suggestions.append("Review the page state and try a different approach")

    return suggestions


async def generate_failure_context(page, step: Step, error: str) -> FailureContext:
    """
    Diagnostic bundle for a failed step: where the page is, what can be
    interacted with, and what to try next.
    """
    page_url = page.url
    try:
        page_snapshot = await page.evaluate(_OUTER_HTML_JS)
    except Exception as e:
        logger.warning(f"Could not capture page HTML: {e}")
        page_snapshot = ""

    try:
        available_elements = await extract_interactive_elements(page)
    except Exception as e:
        logger.warning(f"Could not list interactive elements: {e}")
        available_elements = []

    return FailureContext(
        page_url=page_url,
        page_snapshot=page_snapshot or "",
        failed_step=step,
        error=error,
        available_elements=available_elements,
        suggestions=generate_suggestions(error, step, available_elements),
    )
