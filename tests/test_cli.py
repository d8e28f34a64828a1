"""
Tests for argument parsing and REPL command handling.
"""

import asyncio
import io

from rich.console import Console

from tutorchat.client.chat_client import ChatClient
from tutorchat.client.cli import Repl, build_parser
from tutorchat.client.config import ChatConfig
from tutorchat.rendering.block_renderer import TitleCleanup
from tutorchat.rendering.segmenter import SeparatorPolicy

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class RecordingSession:
    def __init__(self):
        self.sent = []

    async def send_message_stream(self, text, attachment=None):
        self.sent.append((text, attachment))
        yield "Thầy đã nhận."


def _repl():
    session = RecordingSession()
    console = Console(record=True, width=100, file=io.StringIO(), color_system=None)
    client = ChatClient(ChatConfig(), console=console,
                        session_factory=lambda config, history: session)
    return Repl(client), session


def test_parser_options():
    args = build_parser().parse_args([
        "--model", "m", "--temperature", "0.2", "--title-cleanup", "numbering",
        "--separator-policy", "exact", "--api-key-env", "MY_KEY", "--debug",
    ])
    config = ChatConfig.from_args(args)
    assert config.model == "m"
    assert config.temperature == 0.2
    assert config.title_cleanup == TitleCleanup.NUMBERING
    assert config.separator_policy == SeparatorPolicy.EXACT
    assert config.api_key_env == "MY_KEY"
    assert config.debug


def test_parser_defaults_leave_config_defaults():
    config = ChatConfig.from_args(build_parser().parse_args([]))
    assert config == ChatConfig()


def test_quit_commands():
    repl, _ = _repl()
    for command in ("/quit", "/exit", "/q", "/QUIT"):
        assert asyncio.run(repl.handle(command)) is False


def test_empty_input_without_image_is_ignored():
    repl, session = _repl()
    assert asyncio.run(repl.handle(""))
    assert session.sent == []


def test_image_is_sent_with_next_message(tmp_path):
    image = tmp_path / "de_bai.png"
    image.write_bytes(PNG_BYTES)
    repl, session = _repl()

    asyncio.run(repl.handle(f"/image {image}"))
    assert repl.pending_image is not None

    # An attached image may be sent with no text
    asyncio.run(repl.handle(""))
    text, attachment = session.sent[0]
    assert text == ""
    assert attachment.mime_type == "image/png"
    assert repl.pending_image is None


def test_image_errors_are_reported(tmp_path):
    repl, _ = _repl()
    asyncio.run(repl.handle(f"/image {tmp_path / 'missing.png'}"))
    asyncio.run(repl.handle("/image"))
    output = repl.client.console.export_text()
    assert "Image not found" in output
    assert "Usage: /image <path>" in output
    assert repl.pending_image is None


def test_clear_and_unknown_commands():
    repl, _ = _repl()
    asyncio.run(repl.handle("Chào thầy"))
    assert len(repl.client.history_manager.get_history()) == 2

    asyncio.run(repl.handle("/clear"))
    asyncio.run(repl.handle("/nope"))

    assert repl.client.history_manager.get_history() == []
    assert "Unknown command: /nope" in repl.client.console.export_text()
