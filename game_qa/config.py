"""配置：循环策略参数 + 从环境变量（.env）读取的运行设置"""

import os
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from dotenv import load_dotenv

from .cost import calculate_estimated_cost

# (动作数, 截图数, 状态检查数) -> 估算费用
CostEstimator = Callable[[int, int, int], float]


@dataclass(frozen=True)
class AdaptiveTestConfig:
    """自适应 QA 循环的策略参数"""
    max_budget: float = 0.50  # 美元
    max_duration_ms: int = 240_000
    settle_delay_ms: int = 1_000  # 每个动作之后的固定等待
    budget_threshold: float = 0.9  # 估算费用达到预算的该比例即停止
    cost_estimator: CostEstimator = field(default=calculate_estimated_cost, compare=False)

    def __post_init__(self):
        if self.max_budget <= 0:
            raise ValueError(f"max_budget must be > 0, got: {self.max_budget}")
        if self.max_duration_ms <= 0:
            raise ValueError(f"max_duration_ms must be > 0, got: {self.max_duration_ms}")
        if self.settle_delay_ms < 0:
            raise ValueError(f"settle_delay_ms must be >= 0, got: {self.settle_delay_ms}")
        if not 0 < self.budget_threshold <= 1:
            raise ValueError(f"budget_threshold must be in (0, 1], got: {self.budget_threshold}")

    @property
    def budget_limit(self) -> float:
        return self.max_budget * self.budget_threshold


@dataclass(frozen=True)
class Settings:
    """运行设置，默认值可被环境变量覆盖"""
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    model: str = "gpt-4o"
    max_duration_ms: int = 240_000
    max_budget: float = 0.50
    settle_delay_ms: int = 1_000
    interaction_timeout_ms: int = 90_000
    screenshot_timeout_ms: int = 10_000
    navigation_timeout_ms: int = 30_000
    game_load_delay_ms: int = 3_000
    headless: bool = True
    output_dir: str = "/tmp/game-qa-output"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            model=os.getenv("OPENAI_MODEL", "gpt-4o").strip() or "gpt-4o",
            max_duration_ms=_get_env_int("MAX_TEST_DURATION", default=240_000, minimum=1),
            max_budget=_get_env_float("MAX_BUDGET", default=0.50, minimum=0.01),
            settle_delay_ms=_get_env_int("SETTLE_DELAY_MS", default=1_000, minimum=0),
            interaction_timeout_ms=_get_env_int("INTERACTION_TIMEOUT", default=90_000, minimum=1),
            screenshot_timeout_ms=_get_env_int("SCREENSHOT_TIMEOUT", default=10_000, minimum=1),
            navigation_timeout_ms=_get_env_int("PAGE_NAVIGATION_TIMEOUT", default=30_000, minimum=1),
            game_load_delay_ms=_get_env_int("GAME_LOAD_DELAY_MS", default=3_000, minimum=0),
            headless=_get_env_bool("HEADLESS", default=True),
            output_dir=os.getenv("QA_OUTPUT_DIR", "/tmp/game-qa-output"),
        )

    def with_overrides(self, **overrides) -> "Settings":
        """用命令行参数覆盖设置，值为 None 的参数忽略"""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def adaptive_config(self) -> AdaptiveTestConfig:
        return AdaptiveTestConfig(
            max_budget=self.max_budget,
            max_duration_ms=self.max_duration_ms,
            settle_delay_ms=self.settle_delay_ms,
        )


def _get_env_int(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got: {raw!r}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got: {value}")
    return value


def _get_env_float(name: str, default: float, minimum: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got: {raw!r}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got: {value}")
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")
