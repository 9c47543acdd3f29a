"""感知模块：采集游戏画面状态（DOM + 截图 + 可交互区域）"""

import asyncio
import logging
import re
import time
from typing import List

from playwright.async_api import Page

from .files import FileManager
from .models import CapturedState

logger = logging.getLogger(__name__)

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_HANDLER_DQ_RE = re.compile(r"\s+on\w+=\"[^\"]*\"", re.IGNORECASE)
_HANDLER_SQ_RE = re.compile(r"\s+on\w+='[^']*'", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_html(html: str) -> str:
    """去掉 script / style 和内联事件处理器，压缩空白，保留结构给模型看"""
    sanitized = _SCRIPT_RE.sub("", html)
    sanitized = _STYLE_RE.sub("", sanitized)
    sanitized = _HANDLER_DQ_RE.sub("", sanitized)
    sanitized = _HANDLER_SQ_RE.sub("", sanitized)
    return _WHITESPACE_RE.sub(" ", sanitized).strip()


class Perception:
    """
    状态采集：每次调用生成一个新的 CapturedState。
    截图写入 FileManager 的会话目录，状态里只保存路径。
    """

    # 游戏页面里值得告诉模型的区域：画布 + 常规可交互元素
    _ELEMENTS_JS = """
    () => {
        const isVisible = (el) => {
            const style = window.getComputedStyle(el);
            const rect = el.getBoundingClientRect();
            if (style.display === 'none') return false;
            if (style.visibility === 'hidden') return false;
            if (parseFloat(style.opacity) === 0) return false;
            if (rect.width <= 0 || rect.height <= 0) return false;
            return true;
        };

        const getLabel = (el) => {
            const candidates = [
                (el.innerText || '').trim(),
                (el.value || '').trim(),
                el.getAttribute('aria-label') || '',
                el.getAttribute('title') || '',
                el.id || '',
            ];
            return candidates.find(c => c.length > 0) || '';
        };

        const elements = [];
        const nodes = document.querySelectorAll('canvas, button, a, input, [role="button"]');
        for (const el of nodes) {
            if (!isVisible(el)) continue;
            const rect = el.getBoundingClientRect();
            elements.push({
                tag: el.tagName.toLowerCase(),
                label: getLabel(el).slice(0, 40),
                x: Math.round(rect.x),
                y: Math.round(rect.y),
                width: Math.round(rect.width),
                height: Math.round(rect.height),
            });
        }
        return elements;
    }
    """

    def __init__(self, page: Page, file_manager: FileManager, screenshot_timeout_ms: int = 10_000):
        self.page = page
        self.file_manager = file_manager
        self.screenshot_timeout_ms = screenshot_timeout_ms

    async def capture_current_state(self, stage: str = "after_group") -> CapturedState:
        """采集当前状态；截图超时或失败直接抛出"""
        html = await self.page.content()
        elements = await self.extract_elements()
        image = await asyncio.wait_for(
            self.page.screenshot(type="png"),
            timeout=self.screenshot_timeout_ms / 1000,
        )
        screenshot = self.file_manager.save_screenshot(image, stage)
        logger.debug("✓ 截图 %s (%d bytes)", screenshot.path, len(image))
        return CapturedState(
            html=sanitize_html(html),
            screenshot=screenshot,
            timestamp=time.time(),
            elements=elements,
        )

    async def extract_elements(self) -> str:
        """可见画布与按钮的位置摘要，帮助模型给出点击坐标"""
        items: List[dict] = await self.page.evaluate(self._ELEMENTS_JS)
        lines = []
        for item in items:
            label = f" \"{item['label']}\"" if item["label"] else ""
            lines.append(
                f"{item['tag']}{label} @ ({item['x']}, {item['y']}) "
                f"size {item['width']}x{item['height']}"
            )
        return "\n".join(lines)
