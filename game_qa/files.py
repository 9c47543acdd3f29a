"""输出文件管理：截图与报告按会话分目录保存"""

import base64
import json
import logging
import time
from pathlib import Path
from typing import Dict, Optional

from .models import Screenshot

logger = logging.getLogger(__name__)

SCREENSHOTS_SUBDIR = "screenshots"
REPORTS_SUBDIR = "reports"


class FileManager:
    """
    目录结构：
        <output_dir>/screenshots/<session_id>/<id>.png
        <output_dir>/reports/<session_id>/report.json
    """

    def __init__(self, session_id: str, output_dir: str = "/tmp/game-qa-output"):
        self.session_id = session_id
        self.output_dir = Path(output_dir)
        self._counter = 0

    @property
    def screenshots_dir(self) -> Path:
        return self.output_dir / SCREENSHOTS_SUBDIR / self.session_id

    @property
    def reports_dir(self) -> Path:
        return self.output_dir / REPORTS_SUBDIR / self.session_id

    def ensure_output_directory(self) -> None:
        self.screenshots_dir.mkdir(parents=True, exist_ok=True)
        self.reports_dir.mkdir(parents=True, exist_ok=True)

    def save_screenshot(self, data: bytes, stage: str, screenshot_id: Optional[str] = None) -> Screenshot:
        """保存 PNG 截图；同一毫秒内多次保存靠计数器区分文件名"""
        timestamp = time.time()
        if screenshot_id is None:
            screenshot_id = f"{int(timestamp * 1000)}-{self._counter}"
            self._counter += 1
        self.ensure_output_directory()
        path = self.screenshots_dir / f"{screenshot_id}.png"
        path.write_bytes(data)
        return Screenshot(id=screenshot_id, path=str(path), timestamp=timestamp, stage=stage)

    def save_report(self, report: Dict) -> str:
        self.ensure_output_directory()
        path = self.reports_dir / "report.json"
        path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("✓ 报告已保存: %s", path)
        return str(path)


def read_image_data_uri(path: str) -> str:
    """读取 PNG 截图并编码为 data URI，供视觉模型使用"""
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Screenshot file not found: {path}")
    encoded = base64.b64encode(file_path.read_bytes()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
