"""错误类型定义与归类"""

from enum import Enum
from typing import Dict, Optional


class ErrorCategory(str, Enum):
    BROWSER_INIT = "browser_init"
    NAVIGATION = "navigation"
    GAMEPLAY = "gameplay"
    SCREENSHOT = "screenshot"
    VISION_API = "vision_api"
    STATE_ANALYSIS = "state_analysis"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class QAError(Exception):
    """QA 运行中的结构化错误"""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        recoverable: bool = False,
        context: Optional[Dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.recoverable = recoverable
        self.context = context or {}


class RecommenderError(QAError):
    """推荐器失败：网络、JSON 解析或 schema 校验错误"""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(message, ErrorCategory.STATE_ANALYSIS, recoverable=False, context=context)


class ActionGroupContractError(QAError):
    """推荐结果违反当前轮次的动作组约束"""

    def __init__(
        self,
        message: str,
        iteration: int,
        group_index: Optional[int] = None,
        action_index: Optional[int] = None,
    ):
        super().__init__(
            message,
            ErrorCategory.STATE_ANALYSIS,
            recoverable=False,
            context={"iteration": iteration, "group_index": group_index, "action_index": action_index},
        )
        self.iteration = iteration
        self.group_index = group_index
        self.action_index = action_index


def categorize_error(error: BaseException) -> QAError:
    """
    把任意异常归类为 QAError（按错误信息关键字匹配，不区分大小写）。
    已经是 QAError 的原样返回。
    """
    if isinstance(error, QAError):
        return error

    message = str(error) or type(error).__name__
    lowered = message.lower()

    if "timeout" in lowered or "timed out" in lowered:
        return QAError(message, ErrorCategory.TIMEOUT, recoverable=True)
    if "screenshot" in lowered:
        return QAError(message, ErrorCategory.SCREENSHOT, recoverable=True)
    if "openai" in lowered or "api" in lowered:
        return QAError(message, ErrorCategory.VISION_API, recoverable=True)
    if "navigation" in lowered or "navigate" in lowered:
        return QAError(message, ErrorCategory.NAVIGATION)
    if "browser" in lowered:
        return QAError(message, ErrorCategory.BROWSER_INIT)
    return QAError(message, ErrorCategory.UNKNOWN)
