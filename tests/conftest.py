"""Shared fixtures for chatline tests."""

import logging

import pytest

_CHAT_ENV_VARS = (
    "CHAT_FILE",
    "CHAT_MODEL",
    "CHAT_MODE",
    "CHAT_TOOLS",
    "GOOGLE_API_KEY",
    "GEMINI_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_chat_env(monkeypatch):
    """Start every test without chat settings or credentials in the environment."""
    for name in _CHAT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def api_key(monkeypatch):
    """Provide a fake Gemini API key."""
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    return "test-key"


@pytest.fixture(autouse=True)
def restore_chatline_logger():
    """Undo the handler setup done by the command so caplog keeps working."""
    logger = logging.getLogger("chatline")
    saved = (logger.handlers[:], logger.level, logger.propagate)
    yield
    logger.handlers[:], logger.level, logger.propagate = saved
