"""
Tests for centralized configuration system.
Verifies environment variable loading and default values.
"""
import pytest
from src.config import Settings, get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Clear the lru_cache so each test reads the environment again."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestConfigurationSystem:
    """Test suite for configuration management."""

    def test_default_values(self):
        """Verify all configuration fields have sensible defaults."""
        settings = Settings()

        # Token estimation
        assert settings.chars_per_token == 4
        assert settings.binary_token_estimate == 50
        assert settings.robot_context_token_limit == 8000

        # Observability
        assert settings.log_level == "INFO"
        assert settings.enable_structured_logging is False
        assert settings.enable_metrics is True

        assert settings.environment in ["development", "staging", "production"]

    def test_environment_variable_override(self, monkeypatch):
        """Verify environment variables override defaults."""
        monkeypatch.setenv("CHARS_PER_TOKEN", "3")
        monkeypatch.setenv("BINARY_TOKEN_ESTIMATE", "120")
        monkeypatch.setenv("ROBOT_CONTEXT_TOKEN_LIMIT", "16000")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = get_settings()

        assert settings.chars_per_token == 3
        assert settings.binary_token_estimate == 120
        assert settings.robot_context_token_limit == 16000
        assert settings.log_level == "DEBUG"
        assert settings.environment == "production"

    def test_boolean_environment_variables(self, monkeypatch):
        """Verify boolean environment variables parse correctly."""
        monkeypatch.setenv("ENABLE_METRICS", "false")
        monkeypatch.setenv("ENABLE_STRUCTURED_LOGGING", "true")

        settings = get_settings()

        assert settings.enable_metrics is False
        assert settings.enable_structured_logging is True

    def test_singleton_pattern(self):
        """Verify get_settings() returns same instance."""
        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_invalid_log_level_rejected(self, monkeypatch):
        """Literal fields reject unknown values."""
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")

        with pytest.raises(ValueError):
            Settings()

    def test_token_settings_drive_estimator(self, monkeypatch):
        """The estimator reads its ratio from settings."""
        from src.utils.token_estimator import estimate_text_tokens

        monkeypatch.setenv("CHARS_PER_TOKEN", "2")

        assert estimate_text_tokens("abcdef") == 3

    def test_metrics_switch_disables_tracking(self, monkeypatch):
        """Conversations read the metrics switch at construction."""
        from src.conversations import Conversation
        from src.utils.metrics import metrics

        monkeypatch.setenv("ENABLE_METRICS", "false")
        conversation = Conversation("conv-1", "Support", "Billing")

        conversation.add_customer_message("m1", "customer-1", "Hello")

        assert metrics.messages_appended.collect() == []
