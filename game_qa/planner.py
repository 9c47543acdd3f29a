"""规划模块：调用视觉模型，推荐下一轮的动作组"""

import json
import logging
from typing import List, Optional

from openai import AsyncOpenAI

from .errors import RecommenderError
from .files import read_image_data_uri
from .memory import format_history, format_successful_groups
from .models import ActionGroup, GameState, SuccessfulActionGroup
from .prompts import STATE_ANALYSIS_PROMPT, iteration_instructions
from .schema import parse_action_groups

logger = logging.getLogger(__name__)

HTML_PREVIEW_CHARS = 2000


class Planner:
    """
    策略推荐器。

    只负责"问模型 + 解析结构"：返回的动作组未经轮次约束校验，
    也不排序，排序和校验由循环控制器负责。
    模型返回空 groups 表示"没有更多可尝试的"，这里原样返回 []。
    """

    def __init__(self, client: AsyncOpenAI, model: str, temperature: float = 0.3):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def recommend(
        self,
        state: GameState,
        iteration: int,
        previous_successful_groups: Optional[List[SuccessfulActionGroup]] = None,
    ) -> List[ActionGroup]:
        logger.info(
            "请求第 %d 轮动作组 (历史动作 %d 个, 上轮成功组 %d 个)",
            iteration, len(state.previous_actions), len(previous_successful_groups or []),
        )
        prompt = self.build_prompt(state, iteration, previous_successful_groups)

        try:
            image = read_image_data_uri(state.screenshot)
            response = await self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": STATE_ANALYSIS_PROMPT},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {"type": "image_url", "image_url": {"url": image}},
                        ],
                    },
                ],
            )
        except Exception as e:
            raise RecommenderError(f"State analysis request failed: {e}") from e

        output_str = response.choices[0].message.content or ""
        try:
            data = json.loads(output_str)
        except json.JSONDecodeError as e:
            logger.error("JSON 解析失败: %s, 原始输出: %s", e, output_str[:500])
            raise RecommenderError(f"Model returned invalid JSON: {e}") from e

        groups = parse_action_groups(data)
        logger.info(
            "✓ 收到 %d 个动作组: %s",
            len(groups), [(len(g.actions), g.confidence) for g in groups],
        )
        return groups

    def build_prompt(
        self,
        state: GameState,
        iteration: int,
        previous_successful_groups: Optional[List[SuccessfulActionGroup]] = None,
    ) -> str:
        """拼接用户提示：轮次要求 → 上轮成功组 → 目标 → 游戏说明 → 历史反馈 → 页面信息"""
        prompt = iteration_instructions(iteration)

        if iteration > 1 and previous_successful_groups:
            prompt += format_successful_groups(previous_successful_groups, iteration)

        prompt += f"\n\n**当前目标：** {state.goal}"

        metadata = state.metadata
        if metadata and metadata.instructions:
            prompt += f"\n\n**🎮 游戏说明（重要，请严格遵循）：**\n{metadata.instructions}"

        prompt += format_history(state.previous_actions)

        if metadata:
            if metadata.expected_controls and not metadata.instructions:
                prompt += f"\n\n**预期操作方式：** {metadata.expected_controls}"
            if metadata.genre:
                prompt += f"\n**游戏类型：** {metadata.genre}"

        if state.elements:
            prompt += f"\n\n**可见画布 / 按钮位置：**\n{state.elements}"

        if state.html:
            prompt += f"\n\n**HTML 结构（前 {HTML_PREVIEW_CHARS} 个字符）：**\n{state.html[:HTML_PREVIEW_CHARS]}"
            if len(state.html) > HTML_PREVIEW_CHARS:
                prompt += f"\n[... HTML 已截断，总长度 {len(state.html)} 个字符]"

        return prompt
