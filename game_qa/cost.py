"""预算估算：按动作数、截图数、状态检查数估算模型调用费用（美元）"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CostRates:
    per_action: float = 0.02  # 每个动作对应的推荐调用
    per_screenshot: float = 0.02
    per_state_check: float = 0.03


DEFAULT_RATES = CostRates()


def calculate_estimated_cost(
    action_count: int,
    screenshot_count: int,
    state_check_count: int = 0,
    rates: CostRates = DEFAULT_RATES,
) -> float:
    """估算当前已花费的成本，例如 (5, 6, 3) -> 0.31"""
    return (
        action_count * rates.per_action
        + screenshot_count * rates.per_screenshot
        + state_check_count * rates.per_state_check
    )
