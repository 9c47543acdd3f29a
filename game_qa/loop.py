"""
自适应 QA 循环。

每一轮：检查时长 → 检查预算 → 请求动作组 → 校验并按置信度排序 →
依次执行各组（共享同一条状态时间线）→ 收集成功组 → 决定是否继续。

结束原因：max_duration / budget_limit / llm_complete /
zero_successful_groups / error。run() 总是返回结果，不向外抛异常。
"""

import logging
import time
from typing import Callable, List, Optional

from .config import AdaptiveTestConfig
from .contract import sort_by_confidence, validate_action_groups
from .errors import categorize_error
from .memory import RunState
from .models import (
    AdaptiveLoopResult,
    CapturedState,
    CompletionReason,
    GameMetadata,
    GameState,
    SuccessfulActionGroup,
)
from .prompts import goal_for_iteration

logger = logging.getLogger(__name__)


class AdaptiveQALoop:
    """循环控制器：唯一持有并修改 RunState 的组件"""

    def __init__(
        self,
        planner,
        executor,
        perception,
        config: AdaptiveTestConfig,
        metadata: Optional[GameMetadata] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.planner = planner
        self.executor = executor
        self.perception = perception
        self.config = config
        self.metadata = metadata
        self.clock = clock

    async def run(self) -> AdaptiveLoopResult:
        logger.info(
            "开始自适应 QA 循环 (预算 $%.2f, 最长 %dms)",
            self.config.max_budget, self.config.max_duration_ms,
        )
        state = RunState(started_at=self.clock())

        try:
            current = await self.perception.capture_current_state("initial_load")
            state.record_screenshot(current.screenshot.path)
            state.completion_reason = await self._iterate(state, current)
        except Exception as e:
            error = categorize_error(e)
            logger.error("❌ 自适应 QA 循环出错 [%s]: %s", error.category.value, error.message)
            state.completion_reason = CompletionReason.ERROR
            state.error_message = error.message

        result = AdaptiveLoopResult(
            screenshots=list(state.screenshots),
            action_history=list(state.action_history),
            state_check_count=state.state_check_count,
            estimated_cost=state.estimated_cost,
            completion_reason=state.completion_reason,
            iterations=state.iteration,
            successful_group_count=state.total_successful_groups,
            error_message=state.error_message,
        )
        logger.info(
            "✓ 循环结束: %s (轮次 %d, 动作 %d, 截图 %d, 状态检查 %d, 估算费用 $%.2f)",
            result.completion_reason.value, result.iterations, len(result.action_history),
            len(result.screenshots), result.state_check_count, result.estimated_cost,
        )
        return result

    async def _iterate(self, state: RunState, current: CapturedState) -> CompletionReason:
        while True:
            elapsed = state.elapsed_ms(self.clock())
            logger.info(
                "%s\n第 %d 轮 (已用 %.0fms, 动作 %d, 截图 %d)\n%s",
                "=" * 60, state.iteration, elapsed, len(state.action_history), len(state.screenshots), "=" * 60,
            )

            if elapsed >= self.config.max_duration_ms:
                logger.warning("⚠ 达到最长时长 %dms", self.config.max_duration_ms)
                return CompletionReason.MAX_DURATION

            cost = self._estimate_cost(state)
            if cost >= self.config.budget_limit:
                logger.warning("⚠ 估算费用 $%.2f 已接近预算上限 $%.2f", cost, self.config.budget_limit)
                return CompletionReason.BUDGET_LIMIT

            groups = await self.planner.recommend(
                self._game_state(state, current),
                state.iteration,
                state.successful_groups if state.iteration > 1 else None,
            )
            if not groups:
                logger.info("✓ 模型表示没有更多可尝试的动作")
                return CompletionReason.LLM_COMPLETE

            groups = sort_by_confidence(validate_action_groups(groups, state.iteration))

            successful: List[SuccessfulActionGroup] = []
            for index, group in enumerate(groups, 1):
                logger.info(
                    "执行动作组 %d/%d (置信度 %.2f, %d 个动作): %s",
                    index, len(groups), group.confidence, len(group.actions), group.reasoning,
                )
                result = await self.executor.execute(group, current)
                state.record_group(result)
                self._estimate_cost(state)
                current = result.after_state
                if result.success:
                    successful.append(result.to_successful_group())

            if not successful:
                logger.warning("⚠ 第 %d 轮没有成功的动作组", state.iteration)
                return CompletionReason.ZERO_SUCCESSFUL_GROUPS

            logger.info("✓ 第 %d 轮成功动作组: %d/%d", state.iteration, len(successful), len(groups))
            state.advance(successful)

    def _game_state(self, state: RunState, current: CapturedState) -> GameState:
        return GameState(
            html=current.html,
            screenshot=current.screenshot.path,
            goal=goal_for_iteration(state.iteration),
            previous_actions=list(state.action_history),
            metadata=self.metadata,
            elements=current.elements,
        )

    def _estimate_cost(self, state: RunState) -> float:
        """估算当前费用并记到 state 上；估算出错时 state 保留上一次的值"""
        state.estimated_cost = self.config.cost_estimator(
            len(state.action_history),
            len(state.screenshots),
            state.state_check_count,
        )
        return state.estimated_cost
