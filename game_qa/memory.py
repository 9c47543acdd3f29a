"""记忆模块：一次运行的状态，以及给模型看的历史摘要"""

import json
from dataclasses import dataclass, field
from typing import List, Optional

from .models import (
    ClickAction,
    CompletionReason,
    ExecutedAction,
    GroupExecutionResult,
    KeypressAction,
    SuccessfulActionGroup,
)


@dataclass
class RunState:
    """
    一次 QA 运行的全部可变状态，只由循环控制器持有和修改。

    successful_groups 只保留上一轮的成功动作组（每轮替换，不累加）；
    完整的动作历史在 action_history 中。
    """
    started_at: float
    iteration: int = 1
    action_history: List[ExecutedAction] = field(default_factory=list)
    screenshots: List[str] = field(default_factory=list)
    state_check_count: int = 0
    successful_groups: List[SuccessfulActionGroup] = field(default_factory=list)
    total_successful_groups: int = 0
    estimated_cost: float = 0.0  # 最近一次成功估算的费用
    completion_reason: Optional[CompletionReason] = None
    error_message: Optional[str] = None

    def elapsed_ms(self, now: float) -> float:
        return (now - self.started_at) * 1000

    def record_screenshot(self, path: str) -> None:
        self.screenshots.append(path)

    def record_group(self, result: GroupExecutionResult) -> None:
        """记录一个已执行的动作组：动作、组后截图、一次状态检查"""
        self.action_history.extend(result.executed_actions)
        self.record_screenshot(result.after_state.screenshot.path)
        self.state_check_count += 1

    def advance(self, successful: List[SuccessfulActionGroup]) -> None:
        """本轮有成功组：替换上下文，进入下一轮"""
        self.successful_groups = list(successful)
        self.total_successful_groups += len(successful)
        self.iteration += 1


def _describe_target(action: ExecutedAction) -> str:
    if isinstance(action.action, ClickAction):
        return f"({action.action.x:g}, {action.action.y:g})"
    return json.dumps(action.action.target, ensure_ascii=False)


def format_history(actions: List[ExecutedAction], last_n: int = 20) -> str:
    """把最近的动作按成功 / 失败分类，给模型作为反馈"""
    recent = actions[-last_n:]
    if not recent:
        return ""

    succeeded = [a for a in recent if a.success and a.state_progressed]
    failed = [a for a in recent if not a.success or not a.state_progressed]

    lines = []
    if succeeded:
        lines.append("\n\n**✅ 成功的动作（在这些基础上继续）：**")
        clicks = [a for a in succeeded if isinstance(a.action, ClickAction)]
        keys = [a for a in succeeded if isinstance(a.action, KeypressAction)]
        others = [a for a in succeeded if not isinstance(a.action, (ClickAction, KeypressAction))]
        if clicks:
            lines.append("\n**成功的点击：**")
            for i, a in enumerate(clicks[-10:], 1):
                lines.append(f"{i}. 点击 {_describe_target(a)} - {a.action.reasoning}")
            lines.append("策略：在这些成功坐标附近尝试相关的点击，例如偏移 10 像素左右。")
        if keys:
            lines.append("\n**成功的按键：**")
            for i, a in enumerate(keys[-10:], 1):
                lines.append(f"{i}. 按键 \"{a.action.key}\" - {a.action.reasoning}")
            lines.append("策略：继续使用这些有效的按键模式。")
        if others:
            lines.append("\n**其他成功动作：**")
            for i, a in enumerate(others[-5:], 1):
                lines.append(f"{i}. {a.kind} {_describe_target(a)} - {a.action.reasoning}")

    if failed:
        lines.append("\n\n**❌ 失败的动作（不要原样重复）：**")
        for i, a in enumerate(failed[-10:], 1):
            reason = "执行失败" if not a.success else "执行成功但画面没有变化"
            lines.append(f"{i}. {a.kind} {_describe_target(a)} - {a.action.reasoning}（{reason}）")

    rate = len(succeeded) / len(recent)
    lines.append("\n\n**动作结果统计：**")
    lines.append(f"- 总数: {len(recent)}")
    lines.append(f"- 成功（执行成功且画面推进）: {len(succeeded)}")
    lines.append(f"- 失败: {len(failed)}")
    lines.append(f"- 成功率: {rate * 100:.1f}%")
    if rate > 0.5:
        lines.append("继续沿着成功的模式尝试。")
    elif rate > 0.2:
        lines.append("部分动作有效，围绕有效的模式做变化。")
    else:
        lines.append("大部分动作无效，换完全不同的思路或坐标。")
    return "\n".join(lines)


def format_successful_groups(groups: List[SuccessfulActionGroup], iteration: int) -> str:
    """上一轮成功的动作组，作为本轮的策略上下文"""
    if not groups:
        return ""
    lines = ["\n\n**✅ 上一轮成功的动作组（在这些策略上继续）：**"]
    for index, group in enumerate(groups, 1):
        lines.append(f"\n**成功动作组 {index}：**")
        lines.append(f"- 策略: {group.reasoning}")
        lines.append(f"- 置信度: {group.confidence}")
        lines.append(f"- 已执行动作数: {len(group.actions)}")
        for action_index, a in enumerate(group.actions, 1):
            lines.append(f"  {action_index}. {a.kind} {_describe_target(a)} - {a.action.reasoning}")
        lines.append(f"- 执行前截图: {group.before_screenshot}")
        lines.append(f"- 执行后截图: {group.after_screenshot}")
    return "\n".join(lines)
