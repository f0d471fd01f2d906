"""
Unit tests for application settings and app wiring helpers.
"""

from fastapi.middleware.trustedhost import TrustedHostMiddleware

from finviz_assistant.agent.llm_client import DashScopeClient, OfflineGenerator
from finviz_assistant.core.config import Settings, get_settings
from finviz_assistant.main import create_app, create_text_generator


class TestSettings:
    """Test defaults and derived properties"""

    def test_defaults(self):
        settings = Settings(_env_file=None, session_backend="file")

        assert settings.default_llm_model == "qwen-plus"
        assert settings.sessions_file == "sessions.json"
        assert settings.classifier_none_case_sensitive is True
        assert settings.fallback_min_price == 50.0
        assert settings.fallback_max_price == 1000.0
        assert settings.fallback_min_volume == 50_000
        assert settings.fallback_max_volume == 5_000_000

    def test_llm_configured(self):
        assert Settings(_env_file=None, dashscope_api_key="").llm_configured is False
        assert Settings(_env_file=None, dashscope_api_key="sk-1").llm_configured is True

    def test_environment_flags(self):
        production = Settings(_env_file=None, environment="production")

        assert production.is_production is True
        assert production.is_development is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "5")

        assert Settings(_env_file=None).llm_timeout_seconds == 5.0

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestCreateTextGenerator:
    """The app runs on fallbacks when no model is configured"""

    def test_offline_without_key(self, settings):
        assert isinstance(create_text_generator(settings), OfflineGenerator)

    def test_dashscope_with_key(self, settings, monkeypatch):
        settings.dashscope_api_key = "sk-test"
        monkeypatch.setattr(
            "finviz_assistant.agent.llm_client.ChatTongyi", lambda **kwargs: object()
        )

        assert isinstance(create_text_generator(settings), DashScopeClient)

    def test_client_init_failure_falls_back(self, settings, monkeypatch):
        settings.dashscope_api_key = "sk-test"

        def broken(**kwargs):
            raise ValueError("bad key")

        monkeypatch.setattr("finviz_assistant.agent.llm_client.ChatTongyi", broken)

        assert isinstance(create_text_generator(settings), OfflineGenerator)


class TestCreateApp:
    """Environment flags drive docs and host checking"""

    def test_docs_only_in_development(self, monkeypatch):
        monkeypatch.setattr(
            "finviz_assistant.main.get_settings",
            lambda: Settings(_env_file=None, environment="development"),
        )

        assert create_app().docs_url == "/docs"

    def test_trusted_hosts_only_in_production(self, monkeypatch):
        monkeypatch.setattr(
            "finviz_assistant.main.get_settings",
            lambda: Settings(_env_file=None, environment="production"),
        )

        app = create_app()

        assert app.docs_url is None
        assert any(m.cls is TrustedHostMiddleware for m in app.user_middleware)

    def test_no_host_check_outside_production(self, settings, monkeypatch):
        monkeypatch.setattr("finviz_assistant.main.get_settings", lambda: settings)

        app = create_app()

        assert app.docs_url is None
        assert not any(m.cls is TrustedHostMiddleware for m in app.user_middleware)
