"""
CLI interface for the tutoring chat client.

A REPL (Read-Eval-Print Loop) over prompt_toolkit: plain input is sent to
the model, slash commands manage the conversation.

Commands:
    /help            Show the command list
    /clear           Start a new conversation
    /history         Show conversation history
    /image <path>    Attach an image to the next message
    /quit            Exit (also /exit, /q, Ctrl+C, Ctrl+D)
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style

from ..rendering.block_renderer import TitleCleanup
from ..rendering.segmenter import SeparatorPolicy
from .attachments import Attachment, load_attachment
from .chat_client import ChatClient
from .config import ChatConfig

logger = logging.getLogger(__name__)

DEBUG_LOG_FILE = 'llm_debug.log'


def setup_logging(debug: bool = False) -> None:
    """Configure the root logger.

    With debug enabled, every prompt and response is logged to llm_debug.log
    (overwritten each run). Otherwise only warnings reach stderr.
    """
    if debug:
        logging.basicConfig(
            filename=DEBUG_LOG_FILE,
            level=logging.DEBUG,
            format='%(asctime)s - %(levelname)s - %(message)s',
            filemode='w'
        )
    else:
        logging.basicConfig(level=logging.WARNING, format='%(levelname)s - %(message)s')
    # Silence noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def create_prompt_session() -> PromptSession:
    """Create a prompt session with in-memory history (↑/↓) and a styled prompt."""
    style = Style.from_dict({
        'prompt': 'bold cyan',
    })
    return PromptSession(
        history=InMemoryHistory(),
        style=style,
        message="Em: "
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Terminal tutoring chat for Grade 8 mathematics",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        '--config',
        help='YAML configuration file'
    )

    parser.add_argument(
        '--base-url',
        help='OpenAI-compatible base URL (default: Gemini endpoint)'
    )

    parser.add_argument(
        '--model',
        help='Model name'
    )

    parser.add_argument(
        '--api-key-env',
        help='Environment variable holding the API key (default: API_KEY, then GEMINI_API_KEY)'
    )

    parser.add_argument(
        '--temperature',
        type=float,
        help='Sampling temperature'
    )

    parser.add_argument(
        '--max-tokens',
        type=int,
        help='Maximum tokens to generate'
    )

    parser.add_argument(
        '--system-prompt',
        dest='system_prompt_path',
        help='Text file replacing the built-in system prompt'
    )

    parser.add_argument(
        '--title-cleanup',
        choices=[policy.value for policy in TitleCleanup],
        help='How section titles are displayed'
    )

    parser.add_argument(
        '--separator-policy',
        choices=[policy.value for policy in SeparatorPolicy],
        help='Whether a separator line must consist of the separator run only'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help=f'Log prompts and responses to {DEBUG_LOG_FILE}'
    )

    return parser


class Repl:
    """Read-eval-print loop driving a ChatClient."""

    QUIT_COMMANDS = ('quit', 'exit', 'q')

    def __init__(self, client: ChatClient, session: Optional[PromptSession] = None):
        self.client = client
        self.session = session
        self.pending_image: Optional[Attachment] = None

    async def read(self) -> str:
        if self.session is not None:
            return (await self.session.prompt_async()).strip()
        return input("Em: ").strip()

    async def handle(self, user_input: str) -> bool:
        """Process one line of input.

        Returns:
            False when the user asked to quit
        """
        ui = self.client.ui_manager

        if user_input.startswith('/'):
            cmd, _, argument = user_input[1:].partition(' ')
            cmd = cmd.lower()
            argument = argument.strip()

            if cmd in self.QUIT_COMMANDS:
                ui.console.print("[yellow]👋 Goodbye![/yellow]")
                return False
            elif cmd == 'help':
                ui.show_help()
            elif cmd == 'clear':
                self.pending_image = None
                self.client.clear_history()
            elif cmd == 'history':
                self.client.show_history()
            elif cmd == 'image':
                self.attach_image(argument)
            else:
                ui.show_error(f"Unknown command: {user_input}")
            return True

        # An attached image may be sent without any text
        if not user_input and self.pending_image is None:
            return True

        attachment, self.pending_image = self.pending_image, None
        await self.client.chat(user_input, attachment)
        return True

    def attach_image(self, path: str) -> None:
        ui = self.client.ui_manager
        if not path:
            if self.pending_image is not None:
                self.pending_image = None
                ui.show_success("Image removed")
            else:
                ui.show_error("Usage: /image <path>")
            return
        try:
            self.pending_image = load_attachment(path)
        except (FileNotFoundError, ValueError) as e:
            ui.show_error(str(e))
            return
        ui.show_success(f"Image attached ({self.pending_image.mime_type}, "
                        f"{self.pending_image.size_bytes // 1024} KB); it is sent with your next message")

    async def run(self) -> None:
        ui = self.client.ui_manager
        while True:
            try:
                user_input = await self.read()
                if not await self.handle(user_input):
                    break
            except KeyboardInterrupt:
                ui.console.print("\n[yellow]👋 Goodbye![/yellow]")
                break
            except EOFError:
                break
            except Exception as e:
                logger.exception("Turn failed")
                ui.show_error(f"Error: {e}")


def main():
    """Parse arguments, build the client and run the REPL.

    Exit Codes:
        0: Normal exit
        1: Invalid configuration or startup failure
    """
    args = build_parser().parse_args()

    try:
        config = ChatConfig.from_args(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

    setup_logging(config.debug)

    try:
        client = ChatClient(config)
        client.ui_manager.show_welcome()
        if config.resolve_api_key() is None:
            client.ui_manager.show_error(
                f"No API key found in {' or '.join(config.api_key_envs)}; messages will fail until it is set"
            )
        asyncio.run(Repl(client, create_prompt_session()).run())
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
