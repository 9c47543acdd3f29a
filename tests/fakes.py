"""测试用的假协作者：状态采集、动作派发、状态比较、策略推荐"""

from typing import Callable, List, Optional

from game_qa.models import (
    ActionGroup,
    CapturedState,
    ClickAction,
    GameState,
    KeypressAction,
    Screenshot,
    SuccessfulActionGroup,
)


def make_state(index: int) -> CapturedState:
    path = f"/tmp/screenshot-{index}.png"
    return CapturedState(
        html="<div>test</div>",
        screenshot=Screenshot(id=f"screenshot-{index}", path=path, timestamp=float(index), stage="after_group"),
        timestamp=float(index),
    )


def make_group(action_count: int = 1, confidence: float = 0.9, reasoning: str = "Test strategy for game") -> ActionGroup:
    return ActionGroup(
        reasoning=reasoning,
        confidence=confidence,
        actions=[ClickAction(x=100 + i * 10, y=200, reasoning=f"action {i + 1}") for i in range(action_count)],
    )


def make_key_group(keys: List[str], confidence: float = 0.8) -> ActionGroup:
    return ActionGroup(
        reasoning="Keyboard strategy for game",
        confidence=confidence,
        actions=[KeypressAction(key=k, reasoning=f"press {k}") for k in keys],
    )


class FakePerception:
    def __init__(self, fail_on: Optional[int] = None):
        self.count = 0
        self.stages: List[str] = []
        self.fail_on = fail_on

    async def capture_current_state(self, stage: str = "after_group") -> CapturedState:
        if self.fail_on is not None and self.count == self.fail_on:
            raise RuntimeError("Screenshot capture timed out")
        state = make_state(self.count)
        self.count += 1
        self.stages.append(stage)
        return state


class FakeController:
    def __init__(self, results: Optional[Callable] = None):
        self.dispatched = []
        self.results = results or (lambda action: True)

    async def execute_action(self, action) -> bool:
        self.dispatched.append(action)
        return self.results(action)


class FakeComparator:
    def __init__(self, progressed=True):
        self.calls = []
        self.progressed = progressed

    async def has_progressed(self, before: str, after: str) -> bool:
        self.calls.append((before, after))
        if isinstance(self.progressed, Exception):
            raise self.progressed
        if callable(self.progressed):
            return self.progressed(before, after)
        return self.progressed


class FakePlanner:
    """按轮次返回预设的动作组，并记录每次调用的参数"""

    def __init__(self, script: Callable[[int], List[ActionGroup]]):
        self.script = script
        self.calls: List[tuple] = []

    async def recommend(
        self,
        state: GameState,
        iteration: int,
        previous_successful_groups: Optional[List[SuccessfulActionGroup]] = None,
    ) -> List[ActionGroup]:
        self.calls.append((state, iteration, previous_successful_groups))
        return self.script(iteration)
