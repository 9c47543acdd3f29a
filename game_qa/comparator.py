"""状态比较：让视觉模型判断前后两张截图是否有实质变化"""

import logging

from openai import AsyncOpenAI

from .files import read_image_data_uri
from .prompts import PROGRESSION_PROMPT

logger = logging.getLogger(__name__)


class StateComparator:
    """判断游戏状态是否推进"""

    def __init__(self, client: AsyncOpenAI, model: str):
        self.client = client
        self.model = model

    async def has_progressed(self, before_screenshot: str, after_screenshot: str) -> bool:
        """
        比较两张截图，返回是否推进。

        比较本身出错（读文件失败、网络、模型异常）时返回 True：
        基础设施故障不能被当成"卡住"的判断。
        """
        try:
            before_image = read_image_data_uri(before_screenshot)
            after_image = read_image_data_uri(after_screenshot)

            response = await self.client.chat.completions.create(
                model=self.model,
                temperature=0.1,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": PROGRESSION_PROMPT},
                            {"type": "image_url", "image_url": {"url": before_image}},
                            {"type": "image_url", "image_url": {"url": after_image}},
                        ],
                    },
                ],
            )
            text = (response.choices[0].message.content or "").strip().upper()
        except Exception as e:
            logger.warning("⚠ 状态比较失败，按已推进处理: %s", e)
            return True

        progressed = "YES" in text
        logger.debug("状态比较结果: %s (%s)", progressed, text[:100])
        return progressed
