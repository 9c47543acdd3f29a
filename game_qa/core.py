"""游戏 QA 智能体核心类：浏览器生命周期 + 组件装配 + 报告"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from openai import AsyncOpenAI
from playwright.async_api import async_playwright

from .comparator import StateComparator
from .config import Settings
from .controller import Controller
from .errors import categorize_error
from .executor import GroupExecutor
from .files import FileManager
from .loop import AdaptiveQALoop
from .models import AdaptiveLoopResult, CompletionReason, GameMetadata
from .perception import Perception
from .planner import Planner

logger = logging.getLogger(__name__)


def build_report(
    result: Optional[AdaptiveLoopResult],
    game_url: str,
    session_id: str,
    duration_ms: float,
    error: Optional[str] = None,
) -> Dict:
    """
    生成最终报告。
    status: error（循环以 error 结束或运行失败）/ pass（至少一个动作组成功）/ fail
    """
    if result is None or result.completion_reason == CompletionReason.ERROR:
        status = "error"
    elif result.successful_group_count > 0:
        status = "pass"
    else:
        status = "fail"

    report = {
        "status": status,
        "gameUrl": game_url,
        "sessionId": session_id,
        "durationMs": round(duration_ms),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if result is not None:
        report.update(result.to_dict())
    message = error or (result.error_message if result else None)
    if message:
        report["issues"] = [{"severity": "critical", "description": message}]
    else:
        report["issues"] = []
    return report


class GameQAAgent:
    """游戏 QA 智能体"""

    def __init__(
        self,
        settings: Settings,
        metadata: Optional[GameMetadata] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        if client is None:
            if not settings.openai_api_key:
                raise ValueError("请设置环境变量 OPENAI_API_KEY，例如：export OPENAI_API_KEY='sk-...'")
            client = AsyncOpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)
        self.settings = settings
        self.metadata = metadata
        self.client = client

    async def run(self, game_url: str) -> Dict:
        """
        打开游戏页面并执行一次完整的自适应 QA 测试，返回报告。
        浏览器或导航失败时返回 status=error 的报告，不抛异常。
        """
        session_id = uuid.uuid4().hex[:12]
        files = FileManager(session_id, self.settings.output_dir)
        started = time.monotonic()
        result: Optional[AdaptiveLoopResult] = None
        error: Optional[str] = None

        logger.info("开始 QA 测试: %s (session=%s)", game_url, session_id)

        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=self.settings.headless)
                try:
                    page = await browser.new_page()
                    await page.goto(game_url, timeout=self.settings.navigation_timeout_ms)
                    logger.info("✓ 已打开页面: %s", game_url)
                    await asyncio.sleep(self.settings.game_load_delay_ms / 1000)

                    perception = Perception(page, files, self.settings.screenshot_timeout_ms)
                    executor = GroupExecutor(
                        Controller(page, self.settings.interaction_timeout_ms),
                        perception,
                        StateComparator(self.client, self.settings.model),
                        settle_delay_ms=self.settings.settle_delay_ms,
                    )
                    loop = AdaptiveQALoop(
                        Planner(self.client, self.settings.model),
                        executor,
                        perception,
                        self.settings.adaptive_config(),
                        metadata=self.metadata,
                    )
                    result = await loop.run()
                finally:
                    await browser.close()
        except Exception as e:
            qa_error = categorize_error(e)
            logger.error("❌ QA 测试失败 [%s]: %s", qa_error.category.value, qa_error.message)
            error = qa_error.message

        report = build_report(result, game_url, session_id, (time.monotonic() - started) * 1000, error)
        report["reportPath"] = files.save_report(report)
        return report
