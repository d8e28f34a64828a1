"""
Main chat client that orchestrates all components.
"""

from typing import Optional

from rich.console import Console

from .attachments import Attachment
from .chat_engine import ChatEngine
from .config import ChatConfig
from .history_manager import HistoryManager, Message
from .response_handler import ResponseHandler
from .ui_manager import UIManager


class ChatClient:
    """Terminal tutoring chat client for an OpenAI-compatible model endpoint."""

    def __init__(self, config: ChatConfig, console: Optional[Console] = None, **engine_options):
        self.config = config
        self.console = console or Console()

        # Initialize components
        self.response_handler = ResponseHandler(config, self.console)
        self.history_manager = HistoryManager(config, self.console)
        self.ui_manager = UIManager(config, self.console)
        self.chat_engine = ChatEngine(config, self.response_handler, self.history_manager,
                                      **engine_options)

    async def chat(self, message: str, attachment: Optional[Attachment] = None) -> Optional[Message]:
        """Send a chat message and stream the response."""
        return await self.chat_engine.send(message, attachment)

    def clear_history(self) -> None:
        """Start a new conversation."""
        self.chat_engine.new_conversation()

    def show_history(self) -> None:
        """Show conversation history."""
        self.history_manager.show_history()
