"""动作组执行器：按顺序执行一组动作，并给出整组的成功判定"""

import asyncio
import logging
from typing import List, Tuple

from .models import Action, ActionGroup, CapturedState, CompleteAction, ExecutedAction, GroupExecutionResult

logger = logging.getLogger(__name__)


class GroupExecutor:
    """
    执行一个动作组：

    1. 组内动作严格按给定顺序执行，单个动作失败不中断后续动作；
       遇到 complete 立即停止，记为执行成功。
    2. 每个派发的动作之后等待固定的 settle 时间。
    3. 执行完采集 after 状态，与 before 状态比较是否推进；
       比较出错按"已推进"处理。
    4. 整组成功 = 所有动作都执行成功 且 状态推进。
    5. 推进判定在整组结束后统一写入每个动作。
    """

    def __init__(self, controller, perception, comparator, settle_delay_ms: int = 1_000):
        self.controller = controller
        self.perception = perception
        self.comparator = comparator
        self.settle_delay_ms = settle_delay_ms

    async def execute(self, group: ActionGroup, before_state: CapturedState) -> GroupExecutionResult:
        outcomes: List[Tuple[Action, bool]] = []

        for action in group.actions:
            if isinstance(action, CompleteAction):
                logger.info("✓ 模型在组内给出 complete，停止执行本组剩余动作")
                outcomes.append((action, True))
                break

            ok = await self.controller.execute_action(action)
            outcomes.append((action, ok))
            await asyncio.sleep(self.settle_delay_ms / 1000)

        after_state = await self.perception.capture_current_state("after_group")
        progressed = await self.check_progression(before_state, after_state)

        all_executed = all(ok for _, ok in outcomes)
        success = all_executed and progressed

        executed_actions = [
            ExecutedAction(action=action, success=ok, state_progressed=progressed)
            for action, ok in outcomes
        ]

        logger.info(
            "%s 动作组 \"%s\": 执行 %d/%d 成功, 状态%s推进",
            "✓" if success else "❌",
            group.reasoning[:60],
            sum(1 for _, ok in outcomes if ok),
            len(outcomes),
            "已" if progressed else "未",
        )

        return GroupExecutionResult(
            group=group,
            executed_actions=executed_actions,
            before_state=before_state,
            after_state=after_state,
            state_progressed=progressed,
            success=success,
        )

    async def check_progression(self, before_state: CapturedState, after_state: CapturedState) -> bool:
        """比较前后截图；比较本身失败时认为已推进"""
        try:
            return bool(await self.comparator.has_progressed(
                before_state.screenshot.path,
                after_state.screenshot.path,
            ))
        except Exception as e:
            logger.warning("⚠ 状态比较异常，按已推进处理: %s", e)
            return True
