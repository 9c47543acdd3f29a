"""
动作组约束：按轮次限制推荐结果的形状。

- 第 1 轮：1-3 个动作组，每组 1-2 个动作（少量、低成本、相互独立的探索）
- 第 2 轮：组数不限（通常每个上轮成功组对应一组），每组 3-5 个动作
- 第 3 轮起：组数不限，每组 6-10 个动作

唯一的兜底：第 1 轮组数过多时按置信度截取前 3 组再校验一次。
其余任何不符都抛出 ActionGroupContractError。
"""

import logging
from typing import List, Sequence, Tuple

from .errors import ActionGroupContractError
from .models import ActionGroup, ClickAction, CompleteAction, KeypressAction, WaitAction

logger = logging.getLogger(__name__)

MAX_FIRST_ITERATION_GROUPS = 3
MIN_REASONING_LENGTH = 10
MAX_REASONING_LENGTH = 500


def action_count_range(iteration: int) -> Tuple[int, int]:
    """返回该轮次每组允许的动作数 [最小, 最大]"""
    if iteration < 1:
        raise ValueError(f"iteration must be >= 1, got: {iteration}")
    if iteration == 1:
        return 1, 2
    if iteration == 2:
        return 3, 5
    return 6, 10


def sort_by_confidence(groups: Sequence[ActionGroup]) -> List[ActionGroup]:
    """按置信度降序排序；置信度相同的保持原有相对顺序"""
    return sorted(groups, key=lambda g: g.confidence, reverse=True)


def validate_action_groups(groups: Sequence[ActionGroup], iteration: int) -> List[ActionGroup]:
    """
    校验推荐器返回的动作组，返回通过校验的列表（可能已截断）。

    纯函数：不回调推荐器，也不修改传入的组。
    """
    groups = list(groups)
    if iteration == 1 and len(groups) > MAX_FIRST_ITERATION_GROUPS:
        logger.warning(
            "⚠ 第 1 轮返回了 %d 个动作组，按置信度截取前 %d 个",
            len(groups), MAX_FIRST_ITERATION_GROUPS,
        )
        groups = sort_by_confidence(groups)[:MAX_FIRST_ITERATION_GROUPS]

    _check_groups(groups, iteration)
    return groups


def _check_groups(groups: List[ActionGroup], iteration: int) -> None:
    if iteration == 1 and not 1 <= len(groups) <= MAX_FIRST_ITERATION_GROUPS:
        raise ActionGroupContractError(
            f"Iteration 1 must return 1-{MAX_FIRST_ITERATION_GROUPS} action groups, got {len(groups)}",
            iteration=iteration,
        )

    min_actions, max_actions = action_count_range(iteration)
    for group_index, group in enumerate(groups):
        if not 0.0 <= group.confidence <= 1.0:
            raise ActionGroupContractError(
                f"Group {group_index}: confidence must be in [0, 1], got {group.confidence}",
                iteration=iteration, group_index=group_index,
            )
        if not MIN_REASONING_LENGTH <= len(group.reasoning) <= MAX_REASONING_LENGTH:
            raise ActionGroupContractError(
                f"Group {group_index}: reasoning must be {MIN_REASONING_LENGTH}-{MAX_REASONING_LENGTH} "
                f"characters, got {len(group.reasoning)}",
                iteration=iteration, group_index=group_index,
            )
        if not min_actions <= len(group.actions) <= max_actions:
            raise ActionGroupContractError(
                f"Group {group_index}: iteration {iteration} requires {min_actions}-{max_actions} "
                f"actions per group, got {len(group.actions)}",
                iteration=iteration, group_index=group_index,
            )
        for action_index, action in enumerate(group.actions):
            problem = _check_action(action)
            if problem:
                raise ActionGroupContractError(
                    f"Group {group_index}, action {action_index}: {problem}",
                    iteration=iteration, group_index=group_index, action_index=action_index,
                )


def _check_action(action) -> str:
    """校验单个动作的 target 形状，返回问题描述，合法时返回空串"""
    if isinstance(action, ClickAction):
        if not _is_number(action.x) or not _is_number(action.y):
            return f"click target must be numeric coordinates, got ({action.x!r}, {action.y!r})"
        if action.x < 0 or action.y < 0:
            return f"click coordinates must be non-negative, got ({action.x}, {action.y})"
        return ""
    if isinstance(action, KeypressAction):
        if not isinstance(action.key, str) or not action.key.strip():
            return f"keypress target must be a non-empty key name, got {action.key!r}"
        return ""
    if isinstance(action, WaitAction):
        if not isinstance(action.duration_ms, int) or isinstance(action.duration_ms, bool) or action.duration_ms < 0:
            return f"wait target must be a non-negative duration in ms, got {action.duration_ms!r}"
        return ""
    if isinstance(action, CompleteAction):
        return ""
    return f"unknown action type {type(action).__name__}"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
