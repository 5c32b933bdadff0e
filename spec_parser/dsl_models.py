# spec_parser/dsl_models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class CheckType(str, Enum):
    DETERMINISTIC = "deterministic"
    SEMANTIC = "semantic"


@dataclass(frozen=True)
class ActStep:
    instruction: str
    line_number: Optional[int] = None

    @property
    def type(self) -> str:
        return "act"


@dataclass(frozen=True)
class CheckStep:
    instruction: str
    check_type: CheckType = CheckType.SEMANTIC
    line_number: Optional[int] = None

    @property
    def type(self) -> str:
        return "check"


Step = Union[ActStep, CheckStep]


@dataclass(frozen=True)
class Example:
    name: str
    steps: Tuple[Step, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Specification:
    name: str
    directory: Optional[str] = None
    examples: Tuple[Example, ...] = field(default_factory=tuple)

    def example_names(self):
        return [example.name for example in self.examples]

    def find_example(self, name: str) -> Optional[Example]:
        # first match wins
        return next((e for e in self.examples if e.name == name), None)
