"""Error taxonomy for chat sessions.

Every error carries the stage that produced it so the user can tell a
transcript problem from a model or tool failure.
"""

from typing import Optional


class ChatlineError(Exception):
    """Base class for all fatal session errors."""

    stage = "program failure"

    def __init__(self, detail: str, stage: Optional[str] = None):
        if stage:
            self.stage = stage
        self.detail = detail
        super().__init__(f"{self.stage}: {detail}")


class TranscriptError(ChatlineError):
    """Transcript file could not be opened, written or closed."""

    stage = "transcript error"


class BackendError(ChatlineError):
    """Language-model backend could not be constructed."""

    stage = "llm error"


class ToolError(ChatlineError):
    """An auxiliary tool could not be constructed."""

    stage = "tool error"


class AgentError(ChatlineError):
    """The orchestration agent could not be constructed."""

    stage = "agent initialization error"


class QueryError(ChatlineError):
    """The model or agent call failed or returned no usable text."""

    stage = "chain error"


class InputError(ChatlineError):
    """Terminal input could not be read."""

    stage = "input error"
