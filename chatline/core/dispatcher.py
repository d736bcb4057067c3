"""Turn one user utterance into one model response."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from chatline.config.settings import ChatMode
from chatline.core.backend import (
    AgentBackend,
    ChatBackend,
    DirectChatBackend,
    resolve_backend_model,
)
from chatline.core.errors import ChatlineError, QueryError
from chatline.tools.base import ToolRegistry
from chatline.tools.specs import build_default_tools

if TYPE_CHECKING:
    from chatline.session.context import SessionContext

LOGGER = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Outcome of one query: a response or the error that stopped it."""

    success: bool
    response: Optional[str] = None
    error: Optional[ChatlineError] = None
    model: Optional[str] = None

    @classmethod
    def ok(cls, response: str, model: Optional[str] = None) -> "QueryResult":
        return cls(success=True, response=response, model=model)

    @classmethod
    def failure(cls, error: ChatlineError, model: Optional[str] = None) -> "QueryResult":
        return cls(success=False, error=error, model=model)


class QueryDispatcher:
    """Builds a backend for every query and returns its answer.

    Nothing is cached between calls: the model identifier is re-resolved and
    the client, tools and agent are constructed fresh each time. Only the
    conversation memory in the session context carries over.
    """

    def __init__(self, context: "SessionContext"):
        self.context = context

    def dispatch(self, utterance: str) -> QueryResult:
        """Answer ``utterance``.

        Never raises: construction and call failures come back as
        ``QueryResult.failure`` with the stage recorded on the error.
        """
        model_id = None
        try:
            model_id = self.context.config.model
            LOGGER.info("model: %s", model_id)
            backend = self._build_backend(model_id)
            return QueryResult.ok(backend.generate(utterance), model=model_id)
        except ChatlineError as e:
            LOGGER.debug("Query failed", exc_info=True)
            return QueryResult.failure(e, model=model_id)
        except Exception as e:  # noqa: BLE001
            LOGGER.debug("Unexpected fault during query", exc_info=True)
            error = QueryError(f"{type(e).__name__}: {e}", stage="unexpected error")
            error.__cause__ = e
            return QueryResult.failure(error, model=model_id)

    def _build_backend(self, model_id: str) -> ChatBackend:
        config = self.context.config

        if config.mode is ChatMode.CHAT:
            return DirectChatBackend(
                model_id,
                api_key=config.api_key,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
            )

        # Fail on the model before building any tools.
        model_name = resolve_backend_model(model_id, config.api_key)

        if config.tools_enabled:
            tools = build_default_tools(api_key=config.api_key, model=model_name)
        else:
            tools = ToolRegistry()

        return AgentBackend(
            model_name,
            memory=self.context.memory,
            tools=tools.handlers(),
            api_key=config.api_key,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )
