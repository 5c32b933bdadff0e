# spec_parser/check_classifier.py
from spec_parser.check_patterns import DETERMINISTIC_CHECKS
from spec_parser.dsl_models import CheckType


def classify_check(instruction: str) -> CheckType:
    """
    Deterministic when the instruction starts with a known page-state prefix
    (case-insensitive), semantic otherwise.
    """
    trimmed = instruction.strip()

    for check in DETERMINISTIC_CHECKS:
        if check.matches_prefix(trimmed):
            return CheckType.DETERMINISTIC

    return CheckType.SEMANTIC
