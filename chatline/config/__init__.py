"""Configuration utilities for chatline."""

from .models import ModelConfig, ModelRegistry, resolve_model_id, DEFAULT_MODEL_ID
from .settings import (
    ChatConfig,
    ChatMode,
    DEFAULT_CHAT_FILE,
    EXIT_KEYWORD,
    resolve_api_key,
)

__all__ = [
    # Model configuration
    "ModelConfig",
    "ModelRegistry",
    "resolve_model_id",
    "DEFAULT_MODEL_ID",
    # Settings
    "ChatConfig",
    "ChatMode",
    "DEFAULT_CHAT_FILE",
    "EXIT_KEYWORD",
    "resolve_api_key",
]
