"""动作组执行器的测试"""

import pytest

from game_qa.executor import GroupExecutor
from game_qa.models import ActionGroup, ClickAction, CompleteAction, KeypressAction
from tests.fakes import FakeComparator, FakeController, FakePerception, make_group, make_state


def make_executor(controller=None, comparator=None, perception=None):
    return GroupExecutor(
        controller or FakeController(),
        perception or FakePerception(),
        comparator or FakeComparator(),
        settle_delay_ms=0,
    )


class TestGroupExecutor:

    @pytest.mark.asyncio
    async def test_success_when_all_actions_succeed_and_state_progresses(self):
        controller = FakeController()
        executor = make_executor(controller=controller)
        group = make_group(3)

        result = await executor.execute(group, make_state(99))

        assert result.success is True
        assert result.state_progressed is True
        assert controller.dispatched == group.actions
        assert all(a.success and a.state_progressed for a in result.executed_actions)

    @pytest.mark.asyncio
    async def test_compares_before_and_after_screenshots(self):
        comparator = FakeComparator()
        executor = make_executor(comparator=comparator)

        result = await executor.execute(make_group(1), make_state(99))

        assert comparator.calls == [("/tmp/screenshot-99.png", result.after_state.screenshot.path)]
        assert result.before_state.screenshot.path == "/tmp/screenshot-99.png"

    @pytest.mark.asyncio
    async def test_failed_dispatch_does_not_abort_group_but_fails_it(self):
        controller = FakeController(results=lambda action: action.x != 110)
        executor = make_executor(controller=controller)

        result = await executor.execute(make_group(3), make_state(0))

        assert len(controller.dispatched) == 3
        assert [a.success for a in result.executed_actions] == [True, False, True]
        assert result.state_progressed is True
        assert result.success is False

    @pytest.mark.asyncio
    async def test_no_progression_fails_group_and_stamps_every_action(self):
        executor = make_executor(comparator=FakeComparator(progressed=False))

        result = await executor.execute(make_group(4), make_state(0))

        assert result.success is False
        assert all(a.success for a in result.executed_actions)
        assert all(a.state_progressed is False for a in result.executed_actions)

    @pytest.mark.asyncio
    async def test_comparison_fault_counts_as_progressed(self):
        executor = make_executor(comparator=FakeComparator(progressed=RuntimeError("vision api down")))

        result = await executor.execute(make_group(2), make_state(0))

        assert result.state_progressed is True
        assert result.success is True

    @pytest.mark.asyncio
    async def test_complete_stops_remaining_actions(self):
        controller = FakeController()
        executor = make_executor(controller=controller)
        group = ActionGroup(
            reasoning="Start then finish the run",
            confidence=0.7,
            actions=[
                KeypressAction(key="Space"),
                CompleteAction(reasoning="goal reached"),
                ClickAction(x=1, y=1),
            ],
        )

        result = await executor.execute(group, make_state(0))

        assert controller.dispatched == [group.actions[0]]
        assert [a.kind for a in result.executed_actions] == ["keypress", "complete"]
        assert result.executed_actions[1].success is True
        assert result.success is True

    @pytest.mark.asyncio
    async def test_captures_after_state_once(self):
        perception = FakePerception()
        executor = make_executor(perception=perception)

        result = await executor.execute(make_group(5), make_state(42))

        assert perception.stages == ["after_group"]
        assert result.after_state.screenshot.path == "/tmp/screenshot-0.png"

    @pytest.mark.asyncio
    async def test_infrastructure_fault_in_dispatch_propagates(self):
        def broken(action):
            raise RuntimeError("Browser page is closed")

        executor = make_executor(controller=FakeController(results=broken))

        with pytest.raises(RuntimeError):
            await executor.execute(make_group(1), make_state(0))

    @pytest.mark.asyncio
    async def test_group_success_implies_all_actions_succeeded(self):
        for progressed in (True, False):
            for failing_x in (None, 100, 120):
                controller = FakeController(results=lambda action, fx=failing_x: action.x != fx)
                executor = make_executor(controller=controller, comparator=FakeComparator(progressed=progressed))
                result = await executor.execute(make_group(3), make_state(0))
                if result.success:
                    assert all(a.success for a in result.executed_actions)
                assert {a.state_progressed for a in result.executed_actions} == {result.state_progressed}
