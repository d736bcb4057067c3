"""Session lifecycle: transcript, context and the chat loop."""

from .transcript import Transcript, format_block, BLOCK_SEPARATOR
from .context import SessionContext
from .loop import ChatSession, SignalShutdown

__all__ = [
    "Transcript",
    "format_block",
    "BLOCK_SEPARATOR",
    "SessionContext",
    "ChatSession",
    "SignalShutdown",
]
