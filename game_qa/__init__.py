"""浏览器游戏自适应 QA 智能体包

包含各个模块：
- models: 数据模型
- schema: 模型输出的结构校验
- contract: 按轮次约束动作组
- perception: 状态采集模块
- planner: 策略推荐模块
- controller: 动作执行模块
- comparator: 状态比较模块
- executor: 动作组执行器
- memory: 运行状态与历史摘要
- loop: 自适应 QA 循环
- core: 核心 Agent 类
"""

from .models import (
    Action,
    ActionGroup,
    AdaptiveLoopResult,
    CapturedState,
    ClickAction,
    CompleteAction,
    CompletionReason,
    ExecutedAction,
    GameMetadata,
    GameState,
    KeypressAction,
    SuccessfulActionGroup,
    WaitAction,
)
from .config import AdaptiveTestConfig, Settings
from .contract import validate_action_groups, sort_by_confidence
from .errors import ActionGroupContractError, QAError, RecommenderError
from .perception import Perception
from .planner import Planner
from .controller import Controller
from .comparator import StateComparator
from .executor import GroupExecutor
from .memory import RunState
from .loop import AdaptiveQALoop
from .core import GameQAAgent

__all__ = [
    "Action",
    "ActionGroup",
    "AdaptiveLoopResult",
    "CapturedState",
    "ClickAction",
    "CompleteAction",
    "CompletionReason",
    "ExecutedAction",
    "GameMetadata",
    "GameState",
    "KeypressAction",
    "SuccessfulActionGroup",
    "WaitAction",
    "AdaptiveTestConfig",
    "Settings",
    "validate_action_groups",
    "sort_by_confidence",
    "ActionGroupContractError",
    "QAError",
    "RecommenderError",
    "Perception",
    "Planner",
    "Controller",
    "StateComparator",
    "GroupExecutor",
    "RunState",
    "AdaptiveQALoop",
    "GameQAAgent",
]
