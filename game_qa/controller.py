"""执行模块：把单个动作派发到浏览器"""

import asyncio
import logging

from playwright.async_api import Page

from .models import Action, ClickAction, CompleteAction, KeypressAction, WaitAction

logger = logging.getLogger(__name__)


class Controller:
    """
    执行模块：派发点击 / 按键 / 等待。

    派发失败（超时、坐标无效、页面拒绝）返回 False，不抛异常；
    只有页面已关闭这类基础设施故障才会向上抛出。
    """

    def __init__(self, page: Page, interaction_timeout_ms: int = 90_000):
        self.page = page
        self.interaction_timeout_ms = interaction_timeout_ms

    async def execute_action(self, action: Action) -> bool:
        if self.page.is_closed():
            raise RuntimeError("Browser page is closed")

        if isinstance(action, CompleteAction):
            return True
        if isinstance(action, ClickAction):
            return await self._click(action.x, action.y)
        if isinstance(action, KeypressAction):
            return await self._press(action.key)
        if isinstance(action, WaitAction):
            return await self._wait(action.duration_ms)

        logger.warning("❌ 未知 action: %r", action)
        return False

    async def _click(self, x: float, y: float) -> bool:
        """在坐标处点击"""
        if x < 0 or y < 0:
            logger.warning("❌ 无效坐标 (%s, %s)", x, y)
            return False
        try:
            await asyncio.wait_for(
                self.page.mouse.click(round(x), round(y)),
                timeout=self.interaction_timeout_ms / 1000,
            )
            logger.info("✓ 点击 (%d, %d)", round(x), round(y))
            return True
        except Exception as e:
            logger.warning("❌ 点击失败 (%s, %s): %s", x, y, e)
            return False

    async def _press(self, key: str) -> bool:
        """按键"""
        try:
            await asyncio.wait_for(
                self.page.keyboard.press(key),
                timeout=self.interaction_timeout_ms / 1000,
            )
            logger.info("✓ 按键 %s", key)
            return True
        except Exception as e:
            logger.warning("❌ 按键失败 %s: %s", key, e)
            return False

    async def _wait(self, duration_ms: int) -> bool:
        """等待"""
        await asyncio.sleep(max(duration_ms, 0) / 1000)
        logger.info("✓ 等待 %dms", duration_ms)
        return True
