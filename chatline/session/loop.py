"""The interactive read, query, print cycle."""

import logging
import os
import signal
from typing import Callable, Optional

import click

from chatline.core.dispatcher import QueryDispatcher
from chatline.core.errors import InputError
from chatline.session.context import SessionContext

LOGGER = logging.getLogger(__name__)

BANNER = "Interactive Chat with Gemini (Type '{keyword}' to quit)"
PROMPT = "\nYou: "
FAREWELL = "Goodbye!"
SHUTDOWN_NOTICE = "Received termination signal. Shutting down..."


class ChatSession:
    """Runs exchanges until the exit keyword or end of input.

    Each exchange writes the user block to the transcript before the query
    and the response block after it, so a failed query still leaves a record
    of what was asked.
    """

    def __init__(
        self,
        context: SessionContext,
        dispatcher: Optional[QueryDispatcher] = None,
        input_func: Callable[[str], str] = input,
    ):
        self.context = context
        self.dispatcher = dispatcher or QueryDispatcher(context)
        self.input_func = input_func

    def run(self) -> int:
        """Run the loop.

        Returns:
            Exit code (0) after the user leaves

        Raises:
            ChatlineError: On the first transcript or query failure
        """
        keyword = self.context.config.exit_keyword
        click.echo(BANNER.format(keyword=keyword))

        while True:
            try:
                user_input = self.input_func(PROMPT).strip()
            except EOFError:
                LOGGER.debug("End of input, leaving session")
                user_input = keyword
            except UnicodeDecodeError as e:
                raise InputError(f"cannot decode terminal input: {e}") from e

            if user_input == keyword:
                click.echo(f"\n{FAREWELL}\n")
                return 0

            self.context.transcript.append(user_input)

            result = self.dispatcher.dispatch(user_input)
            if not result.success:
                LOGGER.debug("Query to %s failed", result.model)
                raise result.error

            click.echo(f"\nAI: {result.response}")
            self.context.transcript.append(result.response)


class SignalShutdown:
    """SIGINT/SIGTERM handler that ends the process immediately.

    The handler runs on the main thread, possibly inside an interrupted
    transcript write, so closing the transcript may fail. The process exits
    with 0 whatever happens while printing the notice or closing.
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self, exit_func: Callable[[int], None] = os._exit):
        self.context: Optional[SessionContext] = None
        self._exit = exit_func

    def install(self) -> None:
        for signum in self.SIGNALS:
            signal.signal(signum, self)

    def __call__(self, signum, frame) -> None:
        try:
            click.echo(f"\n{SHUTDOWN_NOTICE}\n")
            if self.context is not None:
                try:
                    self.context.close()
                except Exception as e:  # noqa: BLE001
                    LOGGER.warning("Transcript not closed cleanly: %s", e)
        finally:
            self._exit(0)
