import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

CACHE_FILENAME = "actions.json"


@dataclass
class CachedAction:
    instruction: str              # original NL step
    selector: str
    method: str                   # click | fill | press | select ...
    arguments: List[str] = field(default_factory=list)
    description: str = ""         # from observe

    @classmethod
    def from_observe(cls, instruction: str, result) -> "CachedAction":
        return cls(
            instruction=instruction,
            selector=result.selector,
            method=result.method or "click",
            arguments=list(result.arguments or []),
            description=result.description or "",
        )


class ActionCache:
    """
    Resolved selectors per instruction, persisted as JSON in a cache
    directory so later runs can skip the observe round-trip.
    """

    def __init__(self, cache_dir: str):
        self.path = Path(cache_dir) / CACHE_FILENAME
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.data: Dict[str, dict] = self._load()

    def _load(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable action cache: {self.path}")
            return {}

    def __len__(self) -> int:
        return len(self.data)

    def get(self, instruction: str) -> Optional[CachedAction]:
        raw = self.data.get(instruction)
        return CachedAction(**raw) if raw else None

    def put(self, action: CachedAction) -> None:
        self.data[action.instruction] = asdict(action)
        self.path.write_text(json.dumps(self.data, indent=2), encoding="utf-8")

    def discard(self, instruction: str) -> None:
        if self.data.pop(instruction, None) is not None:
            self.path.write_text(json.dumps(self.data, indent=2), encoding="utf-8")
