"""Conversation memory shared by every agent run in a session."""

import logging
from typing import Dict, List, Optional

from google.adk.sessions import InMemorySessionService

LOGGER = logging.getLogger(__name__)

APP_NAME = "chatline"


class ConversationMemory:
    """Ordered message history backed by an ADK in-memory session.

    The agent runner appends events to the ADK session on every run, so the
    model sees all earlier exchanges. A single session id is used for the
    whole process.
    """

    def __init__(
        self,
        session_service: Optional[InMemorySessionService] = None,
        user_id: str = "default_user",
        session_id: str = "default_session",
    ):
        self.session_service = session_service or InMemorySessionService()
        self.app_name = APP_NAME
        self.user_id = user_id
        self.session_id = session_id

    async def ensure_session(self) -> None:
        """Create the ADK session if it does not exist yet."""
        existing = await self.session_service.get_session(
            app_name=self.app_name, user_id=self.user_id, session_id=self.session_id
        )
        if existing is None:
            await self.session_service.create_session(
                app_name=self.app_name,
                user_id=self.user_id,
                session_id=self.session_id,
            )
            LOGGER.debug("Created conversation session %s", self.session_id)

    async def history(self) -> List[Dict[str, str]]:
        """Return the text messages recorded so far, oldest first.

        Returns:
            List of ``{"role": ..., "content": ...}`` dicts where role is
            "user" or "model". Events without text (tool calls) are skipped.
        """
        session = await self.session_service.get_session(
            app_name=self.app_name, user_id=self.user_id, session_id=self.session_id
        )
        if session is None:
            return []

        messages = []
        for event in session.events:
            content = getattr(event, "content", None)
            if not content or not content.parts:
                continue
            text = "".join(
                part.text for part in content.parts if getattr(part, "text", None)
            )
            if not text:
                continue
            role = content.role or ("user" if event.author == "user" else "model")
            messages.append({"role": role, "content": text})
        return messages
