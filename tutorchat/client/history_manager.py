"""
Conversation history management.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .attachments import Attachment
from .config import ChatConfig


class Role(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class Message:
    """One conversation message; error notices are shown but never sent to the model."""
    role: Role
    text: str
    attachment: Optional[Attachment] = None
    is_error: bool = False
    timestamp: datetime = field(default_factory=datetime.now)


class HistoryManager:
    """Manages conversation history."""

    def __init__(self, config: ChatConfig, console: Optional[Console] = None):
        self.config = config
        self.console = console or Console()
        self.conversation_history: List[Message] = []

    def add_message(self, message: Message) -> None:
        """Add a message to the conversation history."""
        self.conversation_history.append(message)

    def clear_history(self) -> None:
        """Clear conversation history."""
        self.conversation_history = []
        self.console.print("[green]🧹 Conversation history cleared[/green]")

    def show_history(self) -> None:
        """Show conversation history."""
        if not self.conversation_history:
            self.console.print("[dim]📝 No conversation history[/dim]")
            return

        table = Table(title="📝 Conversation History", show_header=True, header_style="bold magenta")
        table.add_column("Turn", style="cyan", no_wrap=True, width=4)
        table.add_column("Role", style="bold", width=10)
        table.add_column("Content", style="white", overflow="fold")

        for i, msg in enumerate(self.conversation_history, 1):
            role = msg.role.value.title()
            content = msg.text
            # Truncate long content for display
            if len(content) > 100:
                content = content[:97] + "..."
            if msg.attachment is not None:
                content = f"🖼  ({msg.attachment.mime_type}) {content}"
            style = "red" if msg.is_error else None
            table.add_row(str(i), role, Text(content), style=style)

        self.console.print(table)

    def get_history(self) -> List[Message]:
        """Get the current conversation history."""
        return self.conversation_history.copy()

    def seed_history(self) -> List[Message]:
        """Messages used to rebuild a model session.

        Error notices are left out, and so is every user message that never
        got a reply, so the session never sees two user turns in a row.
        """
        seed: List[Message] = []
        for msg in self.conversation_history:
            if msg.is_error:
                continue
            if msg.role == Role.USER and seed and seed[-1].role == Role.USER:
                seed.pop()
            seed.append(msg)
        if seed and seed[-1].role == Role.USER:
            seed.pop()
        return seed
