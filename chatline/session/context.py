"""State owned by one run of the chat program."""

from dataclasses import dataclass, field

from chatline.config.settings import ChatConfig
from chatline.core.memory import ConversationMemory
from chatline.session.transcript import Transcript


@dataclass
class SessionContext:
    """Configuration, transcript and conversation memory for one session.

    Built once at startup and passed explicitly to the session loop and the
    query dispatcher.
    """

    config: ChatConfig
    transcript: Transcript
    memory: ConversationMemory = field(default_factory=ConversationMemory)

    @classmethod
    def open(cls, config: ChatConfig) -> "SessionContext":
        """Create the transcript file and an empty conversation memory.

        Raises:
            TranscriptError: If the transcript cannot be created
        """
        return cls(config=config, transcript=Transcript(config.chat_file))

    def close(self) -> None:
        self.transcript.close()

    def __enter__(self) -> "SessionContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
