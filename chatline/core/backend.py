"""Model backends behind a single capability interface.

A backend is built for one query and answers it with :meth:`generate`.
``DirectChatBackend`` sends the utterance as the only message of a
``generate_content`` call. ``AgentBackend`` hands it to an ADK ``LlmAgent``
that may call tools and sees the whole conversation through
:class:`~chatline.core.memory.ConversationMemory`.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol, Sequence, runtime_checkable

from google import genai
from google.adk.agents import LlmAgent
from google.adk.runners import Runner
from google.genai import types

from chatline.config.models import ModelRegistry
from chatline.config.settings import resolve_api_key
from chatline.core.errors import AgentError, BackendError, QueryError
from chatline.core.memory import ConversationMemory

LOGGER = logging.getLogger(__name__)

AGENT_NAME = "chat_assistant"

DEFAULT_INSTRUCTION = """You are a helpful assistant chatting with a user in a terminal.

Answer directly and concisely in plain text.

TOOL USAGE GUIDELINES:
- Use calculator for any arithmetic instead of computing it yourself
- Use web_search for current events or facts you are unsure about
- When a tool returns an error, say so and answer as well as you can without it
- When the answer is a single number, reply with just that number"""


@runtime_checkable
class ChatBackend(Protocol):
    """Anything that can answer one user message."""

    def generate(self, message: str) -> str:
        """Return the model's reply to ``message``."""
        ...


def resolve_backend_model(model_id: Optional[str], api_key: Optional[str]) -> str:
    """Validate the model identifier and credential for a backend.

    Returns:
        The identifier to send to the API

    Raises:
        BackendError: If the model is unknown or no API key is configured
    """
    valid, error = ModelRegistry.validate_model_id(model_id)
    if not valid:
        raise BackendError(error)

    if not resolve_api_key(api_key):
        raise BackendError(
            "API key not provided. "
            "Set GOOGLE_API_KEY or GEMINI_API_KEY environment variable."
        )

    return ModelRegistry.get_by_id(model_id).api_id


def _generation_config(temperature: float, max_tokens: int) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        temperature=temperature,
        max_output_tokens=max_tokens,
    )


class DirectChatBackend:
    """Single-turn chat: the utterance is the only message sent."""

    def __init__(
        self,
        model_id: str,
        api_key: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ):
        """Initialize the backend.

        Raises:
            BackendError: If the model, credential or client is invalid
        """
        self.model_name = resolve_backend_model(model_id, api_key)
        self.temperature = temperature
        self.max_tokens = max_tokens

        try:
            self._client = genai.Client(api_key=resolve_api_key(api_key))
        except Exception as e:
            raise BackendError(f"cannot create Gemini client: {e}") from e

    def generate(self, message: str) -> str:
        try:
            response = self._client.models.generate_content(
                model=self.model_name,
                contents=message,
                config=_generation_config(self.temperature, self.max_tokens),
            )
        except Exception as e:
            raise QueryError(f"{type(e).__name__}: {e}") from e

        if response is None:
            raise QueryError("no response received from the model")

        text = getattr(response, "text", None)
        if not text:
            raise QueryError("empty response from the model")
        return text


class AgentBackend:
    """ADK LlmAgent run over the session's conversation memory."""

    def __init__(
        self,
        model_id: str,
        memory: ConversationMemory,
        tools: Sequence[Callable[..., Any]] = (),
        api_key: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        instruction: str = DEFAULT_INSTRUCTION,
    ):
        """Initialize the agent and its runner.

        Args:
            model_id: Gemini model identifier
            memory: Conversation memory shared across queries
            tools: Tool handlers exposed to the agent
            api_key: Optional explicit API key
            temperature: Model temperature
            max_tokens: Max output tokens
            instruction: System instruction for the agent

        Raises:
            BackendError: If the model or credential is invalid
            AgentError: If the agent or runner cannot be created
        """
        self.model_name = resolve_backend_model(model_id, api_key)
        self.memory = memory
        self.tools = list(tools)

        # Only pass tools if we have some (don't pass an empty list)
        llm_agent_kwargs = {
            "model": self.model_name,
            "name": AGENT_NAME,
            "description": "Terminal chat assistant",
            "instruction": instruction,
            "generate_content_config": _generation_config(temperature, max_tokens),
        }
        if self.tools:
            llm_agent_kwargs["tools"] = self.tools

        try:
            self.llm_agent = LlmAgent(**llm_agent_kwargs)
            self.runner = Runner(
                agent=self.llm_agent,
                app_name=memory.app_name,
                session_service=memory.session_service,
            )
        except Exception as e:
            raise AgentError(f"{type(e).__name__}: {e}") from e

    def generate(self, message: str) -> str:
        return asyncio.run(self.generate_async(message))

    async def generate_async(self, message: str) -> str:
        """Run the agent on ``message`` and return its final answer.

        Raises:
            QueryError: If the run fails or ends without text
        """
        await self.memory.ensure_session()

        user_content = types.Content(role="user", parts=[types.Part(text=message)])
        response_text = ""

        try:
            async for event in self.runner.run_async(
                user_id=self.memory.user_id,
                session_id=self.memory.session_id,
                new_message=user_content,
            ):
                error_message = getattr(event, "error_message", None)
                if error_message:
                    code = getattr(event, "error_code", None)
                    raise QueryError(f"{code}: {error_message}" if code else error_message)

                if event.is_final_response() and event.content and event.content.parts:
                    for part in event.content.parts:
                        if getattr(part, "text", None):
                            response_text += part.text
        except QueryError:
            raise
        except Exception as e:
            raise QueryError(f"{type(e).__name__}: {e}") from e

        if not response_text:
            raise QueryError("agent finished without a final answer")

        if LOGGER.isEnabledFor(logging.DEBUG):
            history = await self.memory.history()
            LOGGER.debug("Conversation holds %d messages", len(history))
        return response_text
