"""数据模型定义"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Union


@dataclass(frozen=True)
class ClickAction:
    """在画面坐标 (x, y) 处点击"""
    kind: ClassVar[str] = "click"
    x: float
    y: float
    reasoning: str = ""

    @property
    def target(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class KeypressAction:
    """按下一个键（Playwright 键名，如 ArrowUp / Space / KeyW）"""
    kind: ClassVar[str] = "keypress"
    key: str
    reasoning: str = ""

    @property
    def target(self) -> str:
        return self.key


@dataclass(frozen=True)
class WaitAction:
    """原地等待若干毫秒"""
    kind: ClassVar[str] = "wait"
    duration_ms: int
    reasoning: str = ""

    @property
    def target(self) -> int:
        return self.duration_ms


@dataclass(frozen=True)
class CompleteAction:
    """模型认为目标已达成，组内后续动作不再执行"""
    kind: ClassVar[str] = "complete"
    reasoning: str = ""

    @property
    def target(self) -> None:
        return None


# 以 kind 区分的动作联合类型
Action = Union[ClickAction, KeypressAction, WaitAction, CompleteAction]


@dataclass(frozen=True)
class ExecutedAction:
    """
    已执行的动作 + 执行结果。

    state_progressed 是所属动作组的统一判定，只有整组执行完毕后才能确定，
    组内判定前为 None。
    """
    action: Action
    success: bool
    state_progressed: Optional[bool] = None

    @property
    def kind(self) -> str:
        return self.action.kind

    def to_dict(self) -> Dict:
        return {
            "action": self.action.kind,
            "target": self.action.target,
            "reasoning": self.action.reasoning,
            "success": self.success,
            "stateProgressed": self.state_progressed,
        }


@dataclass
class ActionGroup:
    """一组共享同一策略的动作（由推荐器给出）"""
    reasoning: str
    confidence: float
    actions: List[Action]


@dataclass
class SuccessfulActionGroup:
    """通过成功判定的动作组，作为下一轮推荐的上下文"""
    reasoning: str
    confidence: float
    actions: List[ExecutedAction]
    before_screenshot: str
    after_screenshot: str


@dataclass(frozen=True)
class Screenshot:
    """单张截图"""
    id: str
    path: str
    timestamp: float
    stage: str  # initial_load|after_group|final_state


@dataclass(frozen=True)
class CapturedState:
    """游戏画面快照：DOM + 截图 + 采集时间"""
    html: str
    screenshot: Screenshot
    timestamp: float
    elements: str = ""  # 可见画布 / 按钮的位置摘要


@dataclass
class GameMetadata:
    """被测游戏的可选描述信息，会拼进提示词"""
    title: Optional[str] = None
    genre: Optional[str] = None
    expected_controls: Optional[str] = None
    instructions: Optional[str] = None  # 针对该游戏的测试说明，优先级最高

    @classmethod
    def from_dict(cls, data: Dict) -> "GameMetadata":
        strategy = data.get("testingStrategy") or {}
        return cls(
            title=data.get("title"),
            genre=data.get("genre"),
            expected_controls=data.get("expectedControls") or data.get("expected_controls"),
            instructions=strategy.get("instructions") or data.get("instructions"),
        )


@dataclass
class GameState:
    """推荐器的输入：当前状态 + 目标 + 近期动作历史"""
    html: str
    screenshot: str
    goal: str
    previous_actions: List[ExecutedAction] = field(default_factory=list)
    metadata: Optional[GameMetadata] = None
    elements: str = ""


@dataclass
class GroupExecutionResult:
    """执行器对单个动作组的输出"""
    group: ActionGroup
    executed_actions: List[ExecutedAction]
    before_state: CapturedState
    after_state: CapturedState
    state_progressed: bool
    success: bool

    def to_successful_group(self) -> SuccessfulActionGroup:
        return SuccessfulActionGroup(
            reasoning=self.group.reasoning,
            confidence=self.group.confidence,
            actions=list(self.executed_actions),
            before_screenshot=self.before_state.screenshot.path,
            after_screenshot=self.after_state.screenshot.path,
        )


class CompletionReason(str, Enum):
    """循环结束原因"""
    MAX_DURATION = "max_duration"
    BUDGET_LIMIT = "budget_limit"
    LLM_COMPLETE = "llm_complete"
    ZERO_SUCCESSFUL_GROUPS = "zero_successful_groups"
    ERROR = "error"


@dataclass
class AdaptiveLoopResult:
    """自适应 QA 循环的最终结果"""
    screenshots: List[str]
    action_history: List[ExecutedAction]
    state_check_count: int
    estimated_cost: float
    completion_reason: CompletionReason
    iterations: int = 0
    successful_group_count: int = 0
    error_message: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "screenshots": list(self.screenshots),
            "actionHistory": [a.to_dict() for a in self.action_history],
            "stateCheckCount": self.state_check_count,
            "estimatedCost": round(self.estimated_cost, 4),
            "completionReason": self.completion_reason.value,
            "iterations": self.iterations,
            "successfulGroupCount": self.successful_group_count,
            "errorMessage": self.error_message,
        }
