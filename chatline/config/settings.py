"""Runtime settings for a chat session.

Settings are read from the process environment. A ``.env`` file in the
working directory is loaded first so credentials can live outside the shell:

    CHAT_FILE        transcript path (default: chat.txt)
    CHAT_MODEL       model override (default: gemini-flash-latest)
    CHAT_MODE        "agent" (default) or "chat"
    CHAT_TOOLS       "true" (default) or "false"
    GOOGLE_API_KEY   credential for the Gemini API (GEMINI_API_KEY also works)
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dotenv import load_dotenv

from .models import resolve_model_id

LOGGER = logging.getLogger(__name__)

DEFAULT_CHAT_FILE = "chat.txt"
EXIT_KEYWORD = "exit"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ChatMode(Enum):
    """How a query reaches the model."""

    AGENT = "agent"  # LlmAgent with tools and conversation memory
    CHAT = "chat"  # Single-turn generate_content call


def resolve_api_key(explicit: Optional[str] = None) -> Optional[str]:
    """Resolve the API key, preferring an explicit override."""

    return explicit or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    LOGGER.warning("Invalid boolean value %r, using %s", value, default)
    return default


@dataclass
class ChatConfig:
    """Configuration for a chat session."""

    chat_file: str = DEFAULT_CHAT_FILE
    mode: ChatMode = ChatMode.AGENT
    tools_enabled: bool = True
    api_key: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 2048
    exit_keyword: str = EXIT_KEYWORD

    @property
    def model(self) -> str:
        """Model identifier for the next query (re-read on every access)."""
        return resolve_model_id()

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "ChatConfig":
        """Build a configuration from environment variables.

        Args:
            load_dotenv_file: Whether to load a ``.env`` file before reading

        Returns:
            ChatConfig instance
        """
        if load_dotenv_file:
            load_dotenv()

        chat_file = os.getenv("CHAT_FILE") or DEFAULT_CHAT_FILE

        mode_value = (os.getenv("CHAT_MODE") or ChatMode.AGENT.value).strip().lower()
        try:
            mode = ChatMode(mode_value)
        except ValueError:
            LOGGER.warning("Invalid CHAT_MODE=%s, falling back to agent", mode_value)
            mode = ChatMode.AGENT

        return cls(
            chat_file=chat_file,
            mode=mode,
            tools_enabled=_parse_bool(os.getenv("CHAT_TOOLS"), True),
            api_key=resolve_api_key(),
        )
