# runner/result.py
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from spec_parser.dsl_models import CheckType, Example, Specification, Step


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _step_dict(step: Step) -> Dict[str, Any]:
    data = _plain(asdict(step))
    data["type"] = step.type
    return data


class _Serializable:

    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))


@dataclass
class ActResult(_Serializable):
    success: bool
    duration: int
    page_url: Optional[str] = None
    error: Optional[str] = None
    page_snapshot: Optional[str] = None
    available_actions: List[str] = field(default_factory=list)


@dataclass
class CheckResult(_Serializable):
    passed: bool
    check_type: CheckType
    expected: str
    actual: str
    reasoning: Optional[str] = None
    suggestion: Optional[str] = None


@dataclass
class InteractiveElement(_Serializable):
    type: str
    selector: str
    text: Optional[str] = None
    attributes: Optional[Dict[str, str]] = None


@dataclass
class FailureContext:
    page_url: str
    page_snapshot: str
    failed_step: Step
    error: str
    available_elements: List[InteractiveElement] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_url": self.page_url,
            "page_snapshot": self.page_snapshot,
            "failed_step": _step_dict(self.failed_step),
            "error": self.error,
            "available_elements": [el.to_dict() for el in self.available_elements],
            "suggestions": list(self.suggestions),
        }


@dataclass
class StepResult:
    step: Step
    success: bool
    duration: int
    act_result: Optional[ActResult] = None
    check_result: Optional[CheckResult] = None

    @property
    def error(self) -> str:
        """Text describing why the step failed."""
        if self.act_result is not None:
            return self.act_result.error or "Act step failed"
        if self.check_result is not None:
            return self.check_result.actual or "Check step failed"
        return "Step failed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": _step_dict(self.step),
            "success": self.success,
            "duration": self.duration,
            "act_result": self.act_result.to_dict() if self.act_result else None,
            "check_result": self.check_result.to_dict() if self.check_result else None,
        }


@dataclass
class FailedAt:
    step_index: int
    step: Step
    context: FailureContext

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_index": self.step_index,
            "step": _step_dict(self.step),
            "context": self.context.to_dict(),
        }


@dataclass
class ExampleResult:
    example: Example
    success: bool
    steps: List[StepResult]
    duration: int
    failed_at: Optional[FailedAt] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "example": self.example.name,
            "success": self.success,
            "steps": [s.to_dict() for s in self.steps],
            "duration": self.duration,
            "failed_at": self.failed_at.to_dict() if self.failed_at else None,
        }


@dataclass
class SpecTestResult:
    success: bool
    spec: Specification
    example_results: List[ExampleResult]
    duration: int

    # kept for single-example callers: mirror the first example
    @property
    def steps(self) -> List[StepResult]:
        return self.example_results[0].steps if self.example_results else []

    @property
    def failed_at(self) -> Optional[FailedAt]:
        return self.example_results[0].failed_at if self.example_results else None

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.example_results if r.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.example_results if not r.success)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "spec": {
                "name": self.spec.name,
                "directory": self.spec.directory,
                "examples": self.spec.example_names(),
            },
            "example_results": [r.to_dict() for r in self.example_results],
            "duration": self.duration,
        }
