"""Plain-text transcript of a chat session."""

import logging
from pathlib import Path
from typing import Optional, TextIO, Union

from chatline.core.errors import TranscriptError

LOGGER = logging.getLogger(__name__)

# Every block starts with this separator line followed by a blank line.
BLOCK_SEPARATOR = "---"


def format_block(text: str) -> str:
    """Wrap ``text`` in the transcript block delimiter."""
    return f"{BLOCK_SEPARATOR}\n\n{text}\n\n"


class Transcript:
    """Append-only transcript file.

    The file is truncated when the transcript is opened, then every call to
    :meth:`append` writes one block and flushes it, so the file always holds
    the conversation up to the last completed write. Blocks are never
    rewritten.
    """

    def __init__(self, path: Union[str, Path], encoding: str = "utf-8"):
        """Open (and truncate) the transcript file.

        Args:
            path: Location of the transcript file
            encoding: Text encoding for the file

        Raises:
            TranscriptError: If the file cannot be created
        """
        self.path = Path(path)
        self.blocks_written = 0
        self._file: Optional[TextIO] = None

        try:
            self._file = open(self.path, "w", encoding=encoding)
        except OSError as e:
            raise TranscriptError(f"cannot create {self.path}: {e}") from e

        LOGGER.debug("Transcript opened at %s", self.path)

    @property
    def closed(self) -> bool:
        return self._file is None or self._file.closed

    def append(self, text: str) -> None:
        """Write one block to the transcript.

        Args:
            text: Block content, written as-is without escaping

        Raises:
            TranscriptError: If the transcript is closed or the write fails
        """
        if self.closed:
            raise TranscriptError(f"cannot write to closed transcript {self.path}")

        try:
            self._file.write(format_block(text))
            self._file.flush()
        except (OSError, ValueError) as e:
            raise TranscriptError(f"cannot write to {self.path}: {e}") from e

        self.blocks_written += 1

    def close(self) -> None:
        """Close the transcript file. Safe to call more than once."""
        if self.closed:
            return

        try:
            self._file.close()
        except OSError as e:
            raise TranscriptError(f"cannot close {self.path}: {e}") from e
        finally:
            LOGGER.debug(
                "Transcript closed at %s (%d blocks)", self.path, self.blocks_written
            )

    def __enter__(self) -> "Transcript":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
