"""
模型结构化输出的 schema。

模型返回的 JSON 形如：
{
  "groups": [
    {
      "reasoning": "...",
      "confidence": 0.9,
      "actions": [
        {"action": "click", "target": {"x": 100, "y": 200}, "reasoning": "..."},
        {"action": "keypress", "target": "Space", "reasoning": "..."}
      ]
    }
  ]
}
target 的类型由 action 字段决定，这里用 pydantic 的判别联合在边界处一次性校验。
这里只管结构；取值范围（组数、动作数、置信度、坐标等）交给 contract 按轮次校验，
第 1 轮截断时被丢弃的组不会让整个回复失败。
"""

from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, Field, ValidationError

from .errors import RecommenderError
from .models import Action, ActionGroup, ClickAction, CompleteAction, KeypressAction, WaitAction


class Point(BaseModel):
    x: float
    y: float


class ClickSchema(BaseModel):
    action: Literal["click"]
    target: Point
    reasoning: str = ""


class KeypressSchema(BaseModel):
    action: Literal["keypress"]
    target: str
    reasoning: str = ""


class WaitSchema(BaseModel):
    action: Literal["wait"]
    target: int
    reasoning: str = ""


class CompleteSchema(BaseModel):
    action: Literal["complete"]
    target: Any = None
    reasoning: str = ""


ActionSchema = Annotated[
    Union[ClickSchema, KeypressSchema, WaitSchema, CompleteSchema],
    Field(discriminator="action"),
]


class ActionGroupSchema(BaseModel):
    reasoning: str
    confidence: float
    actions: List[ActionSchema]


class ActionGroupsSchema(BaseModel):
    groups: List[ActionGroupSchema] = Field(default_factory=list)


def _to_action(item: BaseModel) -> Action:
    if isinstance(item, ClickSchema):
        return ClickAction(x=item.target.x, y=item.target.y, reasoning=item.reasoning)
    if isinstance(item, KeypressSchema):
        return KeypressAction(key=item.target, reasoning=item.reasoning)
    if isinstance(item, WaitSchema):
        return WaitAction(duration_ms=item.target, reasoning=item.reasoning)
    return CompleteAction(reasoning=item.reasoning)


def parse_action_groups(payload: Any) -> List[ActionGroup]:
    """
    把模型输出（已 json.loads 的 dict，或裸 list）转换成 ActionGroup 列表。
    校验失败抛出 RecommenderError。
    """
    if isinstance(payload, list):
        payload = {"groups": payload}
    try:
        parsed = ActionGroupsSchema.model_validate(payload)
    except ValidationError as e:
        raise RecommenderError(f"Action group schema validation failed: {e}") from e

    return [
        ActionGroup(
            reasoning=group.reasoning,
            confidence=group.confidence,
            actions=[_to_action(a) for a in group.actions],
        )
        for group in parsed.groups
    ]
