"""Interactive terminal chat with Gemini models and optional agent tools."""

__version__ = "0.1.0"
