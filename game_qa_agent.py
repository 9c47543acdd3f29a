"""
Game QA Agent - 基于 Playwright + OpenAI 视觉模型的浏览器游戏自适应 QA 智能体

运行示例：
    python game_qa_agent.py https://example.com/game
    python game_qa_agent.py https://example.com/game --metadata metadata.json --max-budget 1.0

依赖安装：
    pip install -e .
    playwright install chromium
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from game_qa import GameMetadata, GameQAAgent, Settings


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="对浏览器游戏执行一次自适应 QA 测试")
    parser.add_argument("game_url", help="游戏页面地址")
    parser.add_argument("--metadata", type=Path, default=None, help="游戏描述 JSON（操作方式、类型、测试说明）")
    parser.add_argument("--max-budget", type=float, default=None, help="预算上限（美元）")
    parser.add_argument("--max-duration", type=int, default=None, help="最长运行时间（毫秒）")
    parser.add_argument("--headed", action="store_true", help="显示浏览器界面，便于调试")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="日志级别",
    )
    return parser.parse_args(argv)


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https", "file") and bool(parsed.netloc or parsed.path)


def load_metadata(path: Optional[Path]) -> Optional[GameMetadata]:
    if path is None:
        return None
    return GameMetadata.from_dict(json.loads(path.read_text(encoding="utf-8")))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not is_valid_url(args.game_url):
        print(f"Error: Invalid URL format: {args.game_url}", file=sys.stderr)
        print("Usage: python game_qa_agent.py <game-url>", file=sys.stderr)
        return 1

    settings = Settings.from_env().with_overrides(
        max_budget=args.max_budget,
        max_duration_ms=args.max_duration,
        headless=False if args.headed else None,
    )
    agent = GameQAAgent(settings, metadata=load_metadata(args.metadata))
    report = asyncio.run(agent.run(args.game_url))

    print("\n📊 QA 测试结果：")
    print(json.dumps(report, indent=2, ensure_ascii=False))
    return 0 if report["status"] == "pass" else 1


if __name__ == "__main__":
    sys.exit(main())
