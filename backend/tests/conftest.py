"""
Shared test configuration.
"""

import os

# Must be set before finviz_assistant.core.config is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SESSION_BACKEND", "memory")

import pytest  # noqa: E402

from finviz_assistant.core.config import Settings  # noqa: E402


@pytest.fixture
def settings():
    """Settings for tests: no API key, in-memory sessions."""
    return Settings(
        environment="test",
        dashscope_api_key="",
        session_backend="memory",
        _env_file=None,
    )
