import logging
from dataclasses import dataclass
from typing import Optional

from stagehand import Stagehand, StagehandConfig

from config.config import RunnerConfig
from runner.errors import SessionError
from stage_hand.action_cache import ActionCache
from stage_hand.action_driver import StagehandDriver
from stage_hand.llm_client import LLMClient
from stage_hand.page_tester import PageTester

logger = logging.getLogger(__name__)


@dataclass
class BrowserSession:
    """Everything one orchestrator owns for the lifetime of a run."""

    stagehand: Stagehand
    driver: StagehandDriver
    tester: PageTester

    @property
    def page(self):
        page = self.stagehand.page
        if page is None:
            raise SessionError("No active page available")
        return page

    @classmethod
    async def open(cls, config: RunnerConfig, cache_dir: Optional[str] = None) -> "BrowserSession":
        api_key = config.require_api_key()

        stagehand_config = StagehandConfig(
            env="LOCAL" if config.is_local else "BROWSERBASE",
            api_key=config.browserbase_api_key,
            project_id=config.browserbase_project_id,
            model_name=config.model_name,
            model_api_key=api_key,
            local_browser_launch_options={"headless": config.headless} if config.is_local else None,
            verbose=1,
            **config.stagehand_options,
        )

        stagehand = Stagehand(stagehand_config)
        try:
            await stagehand.init()
        except Exception as e:
            raise SessionError(f"Failed to start Stagehand: {e}") from e

        page = stagehand.page
        if page is None:
            await stagehand.close()
            raise SessionError("Failed to get active page from Stagehand")

        await page.set_viewport_size(config.viewport)

        cache = ActionCache(cache_dir) if cache_dir else None
        if cache is not None:
            logger.info(f"Using action cache at {cache.path} ({len(cache)} entries)")

        tester = PageTester(page, LLMClient(api_key, config.assertion_model))
        return cls(
            stagehand=stagehand,
            driver=StagehandDriver(stagehand, cache),
            tester=tester,
        )

    async def close(self) -> None:
        self.tester.clear_snapshots()
        await self.stagehand.close()
