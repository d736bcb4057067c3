"""Tests for the chat loop and signal shutdown."""

import logging
import os
import selectors
import signal
import subprocess
import sys
import time
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from chatline.config.settings import ChatConfig
from chatline.core.dispatcher import QueryResult
from chatline.core.errors import BackendError, InputError, QueryError, TranscriptError
from chatline.session import ChatSession, SessionContext, SignalShutdown
from chatline.session.loop import FAREWELL, SHUTDOWN_NOTICE


def scripted_input(*lines):
    """Return an input function that replays ``lines`` then hits end of input."""
    remaining = list(lines)
    prompts = []

    def _input(prompt):
        prompts.append(prompt)
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    _input.prompts = prompts
    return _input


class TestChatSession:
    """Test ChatSession.run."""

    @pytest.fixture
    def context(self, tmp_path):
        config = ChatConfig(chat_file=str(tmp_path / "chat.txt"))
        context = SessionContext.open(config)
        yield context
        context.close()

    @pytest.fixture
    def dispatcher(self):
        dispatcher = Mock()
        dispatcher.dispatch.side_effect = lambda text: QueryResult.ok(f"echo {text}")
        return dispatcher

    def read_transcript(self, context):
        return context.transcript.path.read_text()

    def test_exit_keyword_ends_session(self, context, dispatcher, capsys):
        session = ChatSession(context, dispatcher, scripted_input("exit"))

        assert session.run() == 0

        out = capsys.readouterr().out
        assert "Interactive Chat with Gemini (Type 'exit' to quit)" in out
        assert FAREWELL in out
        dispatcher.dispatch.assert_not_called()
        assert self.read_transcript(context) == ""

    def test_exit_keyword_is_trimmed(self, context, dispatcher):
        session = ChatSession(context, dispatcher, scripted_input("   exit \n"))

        assert session.run() == 0
        dispatcher.dispatch.assert_not_called()

    def test_exit_keyword_is_case_sensitive(self, context, dispatcher):
        session = ChatSession(context, dispatcher, scripted_input("EXIT", "exit"))

        assert session.run() == 0
        dispatcher.dispatch.assert_called_once_with("EXIT")

    def test_exchange_writes_two_blocks(self, context, capsys):
        dispatcher = Mock()
        dispatcher.dispatch.return_value = QueryResult.ok("4")
        session = ChatSession(context, dispatcher, scripted_input("  2+2  ", "exit"))

        session.run()

        assert self.read_transcript(context) == "---\n\n2+2\n\n---\n\n4\n\n"
        dispatcher.dispatch.assert_called_once_with("2+2")
        assert "\nAI: 4\n" in capsys.readouterr().out

    def test_exchanges_keep_conversation_order(self, context, dispatcher):
        session = ChatSession(context, dispatcher, scripted_input("one", "two", "exit"))

        session.run()

        assert self.read_transcript(context) == (
            "---\n\none\n\n"
            "---\n\necho one\n\n"
            "---\n\ntwo\n\n"
            "---\n\necho two\n\n"
        )

    def test_empty_input_is_forwarded(self, context, dispatcher):
        session = ChatSession(context, dispatcher, scripted_input("   ", "exit"))

        session.run()

        dispatcher.dispatch.assert_called_once_with("")
        assert self.read_transcript(context) == "---\n\n\n\n---\n\necho \n\n"

    def test_end_of_input_exits_cleanly(self, context, dispatcher, capsys):
        session = ChatSession(context, dispatcher, scripted_input())

        assert session.run() == 0
        assert FAREWELL in capsys.readouterr().out
        dispatcher.dispatch.assert_not_called()

    def test_user_block_written_before_query(self, context):
        seen = {}

        def dispatch(text):
            seen["transcript"] = context.transcript.path.read_text()
            return QueryResult.ok("answer")

        dispatcher = Mock()
        dispatcher.dispatch.side_effect = dispatch
        ChatSession(context, dispatcher, scripted_input("question", "exit")).run()

        assert seen["transcript"] == "---\n\nquestion\n\n"

    def test_query_failure_aborts_session(self, context):
        error = QueryError("rate limited")
        dispatcher = Mock()
        dispatcher.dispatch.return_value = QueryResult.failure(error)
        input_func = scripted_input("hello", "never read")
        session = ChatSession(context, dispatcher, input_func)

        with pytest.raises(QueryError) as exc_info:
            session.run()

        assert exc_info.value is error
        # The question was recorded, the response was not
        assert self.read_transcript(context) == "---\n\nhello\n\n"
        assert len(input_func.prompts) == 1

    def test_backend_failure_aborts_before_response(self, context):
        dispatcher = Mock()
        dispatcher.dispatch.return_value = QueryResult.failure(
            BackendError("Unknown model or alias: bogus")
        )
        session = ChatSession(context, dispatcher, scripted_input("hi"))

        with pytest.raises(BackendError, match="llm error"):
            session.run()

    def test_failed_query_logs_model(self, context, caplog):
        dispatcher = Mock()
        dispatcher.dispatch.return_value = QueryResult.failure(
            QueryError("rate limited"), model="gemini-2.5-pro"
        )
        session = ChatSession(context, dispatcher, scripted_input("hi"))

        with caplog.at_level(logging.DEBUG, logger="chatline.session.loop"):
            with pytest.raises(QueryError):
                session.run()

        assert "Query to gemini-2.5-pro failed" in caplog.text

    def test_undecodable_input_is_an_input_error(self, context, dispatcher):
        def bad_input(prompt):
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        session = ChatSession(context, dispatcher, bad_input)

        with pytest.raises(InputError, match="input error: cannot decode") as exc_info:
            session.run()

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
        dispatcher.dispatch.assert_not_called()
        assert self.read_transcript(context) == ""

    def test_transcript_failure_aborts_before_query(self, context, dispatcher):
        context.transcript.close()
        session = ChatSession(context, dispatcher, scripted_input("hi"))

        with pytest.raises(TranscriptError):
            session.run()
        dispatcher.dispatch.assert_not_called()

    def test_default_dispatcher_uses_context(self, context):
        session = ChatSession(context)
        assert session.dispatcher.context is context


class TestSignalShutdown:
    """Test the SIGINT/SIGTERM handler."""

    def test_handler_prints_notice_and_exits_zero(self, capsys):
        exit_func = Mock()
        shutdown = SignalShutdown(exit_func=exit_func)

        shutdown(signal.SIGINT, None)

        assert SHUTDOWN_NOTICE in capsys.readouterr().out
        exit_func.assert_called_once_with(0)

    def test_handler_closes_transcript(self, tmp_path):
        context = SessionContext.open(ChatConfig(chat_file=str(tmp_path / "chat.txt")))
        context.transcript.append("asked before the signal")
        shutdown = SignalShutdown(exit_func=Mock())
        shutdown.context = context

        shutdown(signal.SIGTERM, None)

        assert context.transcript.closed
        assert (tmp_path / "chat.txt").read_text() == "---\n\nasked before the signal\n\n"

    def test_handler_exits_even_if_close_fails(self):
        exit_func = Mock()
        shutdown = SignalShutdown(exit_func=exit_func)
        shutdown.context = Mock()
        shutdown.context.close.side_effect = TranscriptError("disk gone")

        shutdown(signal.SIGINT, None)

        exit_func.assert_called_once_with(0)

    def test_handler_exits_if_close_is_reentrant(self):
        exit_func = Mock()
        shutdown = SignalShutdown(exit_func=exit_func)
        shutdown.context = Mock()
        shutdown.context.close.side_effect = RuntimeError("reentrant call")

        shutdown(signal.SIGINT, None)

        exit_func.assert_called_once_with(0)

    def test_handler_exits_if_notice_cannot_be_printed(self):
        exit_func = Mock()
        shutdown = SignalShutdown(exit_func=exit_func)

        with patch("chatline.session.loop.click.echo", side_effect=BrokenPipeError):
            with pytest.raises(BrokenPipeError):
                shutdown(signal.SIGTERM, None)

        exit_func.assert_called_once_with(0)

    def test_install_registers_interrupt_and_terminate(self):
        shutdown = SignalShutdown(exit_func=Mock())

        with patch("chatline.session.loop.signal.signal") as mock_signal:
            shutdown.install()

        registered = {call.args[0] for call in mock_signal.call_args_list}
        assert registered == {signal.SIGINT, signal.SIGTERM}
        for call in mock_signal.call_args_list:
            assert call.args[1] is shutdown


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def read_until(stream, marker, timeout):
    """Read from a pipe until ``marker`` appears or ``timeout`` seconds pass."""
    selector = selectors.DefaultSelector()
    selector.register(stream, selectors.EVENT_READ)
    deadline = time.monotonic() + timeout
    data = b""
    try:
        while marker not in data:
            remaining = deadline - time.monotonic()
            if remaining <= 0 or not selector.select(remaining):
                break
            chunk = os.read(stream.fileno(), 4096)
            if not chunk:
                break
            data += chunk
    finally:
        selector.close()
    return data


@pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signals")
def test_interrupt_at_prompt_exits_zero(tmp_path):
    env = dict(os.environ)
    env["CHAT_FILE"] = str(tmp_path / "chat.txt")
    env["PYTHONPATH"] = os.pathsep.join(
        filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")])
    )
    process = subprocess.Popen(
        [sys.executable, "-m", "chatline"],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=tmp_path,
        env=env,
    )
    try:
        before = read_until(process.stdout, b"You: ", timeout=60)
        assert b"You: " in before

        process.send_signal(signal.SIGINT)
        after, _ = process.communicate(timeout=30)
    finally:
        if process.poll() is None:
            process.kill()
            process.wait()

    assert process.returncode == 0
    assert SHUTDOWN_NOTICE.encode() in after
    assert b"You: " not in after
    assert (tmp_path / "chat.txt").read_text() == ""
