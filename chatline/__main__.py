"""Main entry point for the chatline application."""

import logging
from pathlib import Path

import click

from chatline.config.models import MODEL_ENV_VAR
from chatline.config.settings import ChatConfig, ChatMode

LOGGER = logging.getLogger("chatline")


def _configure_logging(debug: bool) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    LOGGER.handlers[:] = [handler]
    LOGGER.setLevel(logging.DEBUG if debug else logging.WARNING)
    LOGGER.propagate = False


@click.command()
@click.option(
    '--chat-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Transcript file (overrides CHAT_FILE, default chat.txt)'
)
@click.option(
    '--model',
    default=None,
    help='Gemini model id (overrides CHAT_MODEL)'
)
@click.option(
    '--mode',
    type=click.Choice([mode.value for mode in ChatMode]),
    default=None,
    help='agent: tools and memory; chat: single-turn calls (overrides CHAT_MODE)'
)
@click.option(
    '--no-tools',
    is_flag=True,
    help='Run the agent without web search and calculator'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug logging'
)
def main(chat_file: Path, model: str, mode: str, no_tools: bool, debug: bool) -> None:
    """Chat with a Gemini model in the terminal, saving the transcript to a file."""
    import os
    import sys

    from chatline.core.errors import ChatlineError
    from chatline.session import ChatSession, SessionContext, SignalShutdown

    _configure_logging(debug)

    shutdown = SignalShutdown()
    shutdown.install()

    # The model is re-resolved from the environment on every query
    if model:
        os.environ[MODEL_ENV_VAR] = model

    config = ChatConfig.from_env()
    if chat_file:
        config.chat_file = str(chat_file)
    if mode:
        config.mode = ChatMode(mode)
    if no_tools:
        config.tools_enabled = False

    try:
        context = SessionContext.open(config)
        shutdown.context = context
        with context:
            exit_code = ChatSession(context).run()
    except ChatlineError as e:
        if debug:
            LOGGER.exception("Session aborted")
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
