"""提示词模板"""

from .contract import MAX_FIRST_ITERATION_GROUPS, action_count_range

PROMPT_VERSION = "2.0.0"

FIRST_ITERATION_GOAL = "启动游戏并开始游玩"
FOLLOW_UP_GOAL = "继续游玩，推进游戏进度"

STATE_ANALYSIS_PROMPT = (
    "你是一个浏览器游戏的自动化 QA 测试智能体。\n"
    "你会看到当前游戏截图、精简后的 HTML、可见画布/按钮的位置，以及之前动作的执行结果。\n"
    "你的任务是给出若干个\"动作组\"（Action Group）：每个动作组代表一种策略，\n"
    "包含按顺序执行的若干动作，整组执行完后会判断游戏画面是否有实质变化。\n"
    "\n"
    "可用动作：\n"
    "- click：target 为截图像素坐标 {\"x\": 100, \"y\": 200}\n"
    "- keypress：target 为 Playwright 键名，如 \"ArrowUp\"、\"Space\"、\"Enter\"、\"KeyW\"\n"
    "- wait：target 为等待毫秒数，如 1000\n"
    "- complete：target 为 null，表示测试目标已经达成\n"
    "\n"
    "【极其重要的规则】：\n"
    "1. 围绕最近成功过的坐标或按键构造变化，不要原样重复失败或没有引起变化的动作。\n"
    "2. 每个动作组的 reasoning 为 10-500 个字符，说明整组共同的策略。\n"
    "3. confidence 为 0 到 1 之间的小数。\n"
    "4. 如果你认为已经没有值得尝试的动作，返回空的 groups 列表。\n"
    "\n"
    "你必须且只能输出 JSON 字符串，格式如下：\n"
    "{\n"
    "  \"groups\": [\n"
    "    {\n"
    "      \"reasoning\": \"这一组动作共同的策略\",\n"
    "      \"confidence\": 0.9,\n"
    "      \"actions\": [\n"
    "        {\"action\": \"click\", \"target\": {\"x\": 400, \"y\": 300}, \"reasoning\": \"点击开始按钮\"}\n"
    "      ]\n"
    "    }\n"
    "  ]\n"
    "}"
)

PROGRESSION_PROMPT = (
    "比较这两张游戏截图，判断游戏状态是否发生了实质变化。\n"
    "第一张：执行动作之前的状态。\n"
    "第二张：执行动作之后的状态。\n"
    "画面切换、UI 更新、分数变化、角色移动、游戏推进都算变化。\n"
    "如果状态推进了，只回答 \"YES\"；如果状态相同或卡住，只回答 \"NO\"。"
)


def goal_for_iteration(iteration: int) -> str:
    return FIRST_ITERATION_GOAL if iteration == 1 else FOLLOW_UP_GOAL


def iteration_instructions(iteration: int) -> str:
    """每轮的动作组数量要求，和 contract 中的约束保持一致"""
    min_actions, max_actions = action_count_range(iteration)
    if iteration == 1:
        return (
            "\n\n**第 1 轮要求（必须遵守）：**\n"
            f"- 必须返回 1-{MAX_FIRST_ITERATION_GROUPS} 个动作组，不能多也不能少\n"
            f"- 每组只能包含 {min_actions}-{max_actions} 个动作\n"
            "- 每组代表一种不同的策略\n"
            f"- 如果你有超过 {MAX_FIRST_ITERATION_GROUPS} 个想法，只保留置信度最高的 {MAX_FIRST_ITERATION_GROUPS} 个"
        )
    return (
        f"\n\n**第 {iteration} 轮要求：**\n"
        "- 对下面每个成功的动作组，各返回 1 个动作组\n"
        f"- 每组必须包含 {min_actions}-{max_actions} 个动作，沿着成功的策略继续深入\n"
        "- 动作之间要相关，遵循成功动作组的同一思路"
    )
