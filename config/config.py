from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import os

from dotenv import load_dotenv

from runner.errors import ConfigError

# Load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "http://localhost:8080"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RunnerConfig:
    # Application under test
    base_url: str = DEFAULT_BASE_URL
    headless: bool = True
    viewport: Dict[str, int] = field(default_factory=lambda: {"width": 1280, "height": 980})

    # Stagehand (act / observe)
    model_name: str = "google/gemini-2.5-flash"
    model_api_key: Optional[str] = None
    browserbase_api_key: Optional[str] = None
    browserbase_project_id: Optional[str] = None
    stagehand_options: Dict[str, Any] = field(default_factory=dict)

    # Semantic assertions
    assertion_model: str = "models/gemini-2.5-flash"

    # Action cache
    cache_dir: Optional[str] = None
    cache_per_spec: bool = False

    @property
    def is_local(self) -> bool:
        return not self.browserbase_api_key

    def require_api_key(self) -> str:
        if not self.model_api_key:
            raise ConfigError("GEMINI_API_KEY environment variable not set")
        return self.model_api_key

    @classmethod
    def from_env(cls, **overrides) -> "RunnerConfig":
        """
        Build a config from the environment (.env included); explicit
        keyword overrides win, None overrides are ignored.
        """
        values: Dict[str, Any] = {
            "base_url": os.getenv("BASE_URL", DEFAULT_BASE_URL),
            "headless": _env_flag("HEADLESS", True),
            "model_api_key": os.getenv("GEMINI_API_KEY"),
            "browserbase_api_key": os.getenv("BROWSERBASE_API_KEY"),
            "browserbase_project_id": os.getenv("BROWSERBASE_PROJECT_ID"),
            "cache_dir": os.getenv("CACHE_DIR") or None,
            "cache_per_spec": _env_flag("CACHE_PER_SPEC"),
        }
        if os.getenv("STAGEHAND_MODEL"):
            values["model_name"] = os.getenv("STAGEHAND_MODEL")
        if os.getenv("ASSERTION_MODEL"):
            values["assertion_model"] = os.getenv("ASSERTION_MODEL")

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
