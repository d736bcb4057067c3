"""Tools the chat agent can call."""

from .base import ToolSpec, ToolRegistry
from .calculator import calculate
from .google_tools import google_search
from .specs import build_default_tools

__all__ = [
    "ToolSpec",
    "ToolRegistry",
    "calculate",
    "google_search",
    "build_default_tools",
]
