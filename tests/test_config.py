"""配置、费用估算与错误归类的测试"""

import pytest

from game_qa.config import AdaptiveTestConfig, Settings
from game_qa.cost import CostRates, calculate_estimated_cost
from game_qa.errors import ActionGroupContractError, ErrorCategory, QAError, categorize_error

ENV_VARS = [
    "OPENAI_API_KEY", "OPENAI_BASE_URL", "OPENAI_MODEL", "MAX_TEST_DURATION", "MAX_BUDGET",
    "SETTLE_DELAY_MS", "INTERACTION_TIMEOUT", "SCREENSHOT_TIMEOUT", "PAGE_NAVIGATION_TIMEOUT",
    "GAME_LOAD_DELAY_MS", "HEADLESS", "QA_OUTPUT_DIR",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestCost:

    def test_estimated_cost(self):
        assert calculate_estimated_cost(5, 6, 3) == pytest.approx(0.31)
        assert calculate_estimated_cost(0, 0) == 0

    def test_monotonic(self):
        base = calculate_estimated_cost(2, 2, 2)
        assert calculate_estimated_cost(3, 2, 2) >= base
        assert calculate_estimated_cost(2, 3, 2) >= base
        assert calculate_estimated_cost(2, 2, 3) >= base

    def test_custom_rates(self):
        rates = CostRates(per_action=1.0, per_screenshot=0.0, per_state_check=0.0)
        assert calculate_estimated_cost(4, 100, 100, rates) == 4.0


class TestAdaptiveTestConfig:

    def test_defaults(self):
        config = AdaptiveTestConfig()
        assert config.budget_limit == pytest.approx(0.45)
        assert config.cost_estimator(5, 6, 3) == pytest.approx(0.31)

    def test_rejects_invalid_values(self):
        with pytest.raises(ValueError):
            AdaptiveTestConfig(max_budget=0)
        with pytest.raises(ValueError):
            AdaptiveTestConfig(settle_delay_ms=-1)
        with pytest.raises(ValueError):
            AdaptiveTestConfig(budget_threshold=1.5)


class TestSettings:

    def test_defaults(self, clean_env):
        settings = Settings.from_env()
        assert settings.model == "gpt-4o"
        assert settings.max_duration_ms == 240_000
        assert settings.headless is True
        assert settings.openai_api_key is None

    def test_env_overrides(self, clean_env):
        clean_env.setenv("MAX_BUDGET", "1.5")
        clean_env.setenv("SETTLE_DELAY_MS", "250")
        clean_env.setenv("HEADLESS", "false")
        settings = Settings.from_env()

        assert settings.max_budget == 1.5
        assert settings.headless is False
        config = settings.adaptive_config()
        assert config.settle_delay_ms == 250
        assert config.max_budget == 1.5

    def test_invalid_int_names_variable(self, clean_env):
        clean_env.setenv("MAX_TEST_DURATION", "soon")
        with pytest.raises(ValueError, match="MAX_TEST_DURATION"):
            Settings.from_env()

    def test_below_minimum(self, clean_env):
        clean_env.setenv("SETTLE_DELAY_MS", "-1")
        with pytest.raises(ValueError, match="SETTLE_DELAY_MS"):
            Settings.from_env()

    def test_with_overrides_ignores_none(self, clean_env):
        settings = Settings.from_env().with_overrides(max_budget=None, max_duration_ms=1000)
        assert settings.max_budget == 0.50
        assert settings.max_duration_ms == 1000


class TestCategorizeError:

    @pytest.mark.parametrize("message, category, recoverable", [
        ("Screenshot capture timed out", ErrorCategory.TIMEOUT, True),
        ("Failed to save screenshot", ErrorCategory.SCREENSHOT, True),
        ("OpenAI rate limit", ErrorCategory.VISION_API, True),
        ("navigation failed", ErrorCategory.NAVIGATION, False),
        ("Browser crashed", ErrorCategory.BROWSER_INIT, False),
        ("something odd", ErrorCategory.UNKNOWN, False),
    ])
    def test_by_message(self, message, category, recoverable):
        error = categorize_error(RuntimeError(message))
        assert error.category == category
        assert error.recoverable is recoverable
        assert error.message == message

    def test_qa_error_passthrough(self):
        original = ActionGroupContractError("bad group", iteration=2, group_index=1)
        assert categorize_error(original) is original
        assert isinstance(original, QAError)
        assert original.context["group_index"] == 1
