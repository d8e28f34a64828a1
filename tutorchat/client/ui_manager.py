"""
UI management for displaying messages and status.
"""

from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..rendering.block_renderer import BlockRenderer
from .config import ChatConfig
from .prompts import WELCOME_MESSAGE


class UIManager:
    """Manages user interface elements."""

    def __init__(self, config: ChatConfig, console: Optional[Console] = None):
        self.config = config
        self.console = console or Console()
        self.renderer = BlockRenderer(config.title_cleanup, config.separator_policy)

    def show_welcome(self):
        """Show welcome message with the configuration summary."""
        welcome_text = Text()
        welcome_text.append("📐 Trợ lý học tập Toán 8", style="bold blue")
        welcome_text.append("\n\n", style="")
        welcome_text.append("Configuration:\n", style="bold")
        welcome_text.append(f"• Endpoint: {self.config.base_url}\n", style="")
        welcome_text.append(f"• Model: {self.config.model}\n", style="")
        welcome_text.append(f"• Temperature: {self.config.temperature}\n", style="")
        welcome_text.append(f"• Max Tokens: {self.config.max_tokens}\n", style="")
        welcome_text.append(f"• Titles: {self.config.title_cleanup.value}\n", style="")
        if self.config.debug:
            welcome_text.append("• Debug log: llm_debug.log\n", style="yellow")

        welcome_text.append("\nCommands: /help, /clear, /history, /image, /quit\n", style="dim")

        body = Group(welcome_text, self.renderer.render_text(WELCOME_MESSAGE))
        self.console.print(Panel(body, title=":rocket: Welcome", border_style="blue"))

    def show_help(self):
        """Show help message."""
        help_table = Table(title="Available Commands")
        help_table.add_column("Command", style="cyan", no_wrap=True)
        help_table.add_column("Description", style="white")
        help_table.add_row("/help", "Show this help message")
        help_table.add_row("/clear", "Start a new conversation")
        help_table.add_row("/history", "Show conversation history")
        help_table.add_row("/image <path>", "Attach an image to the next message")
        help_table.add_row("/quit", "Exit the chat")
        self.console.print(help_table)

    def show_error(self, message: str):
        """Show error message."""
        self.console.print(Text(f"❌ {message}", style="red"))

    def show_success(self, message: str):
        """Show success message."""
        self.console.print(Text(f"✓ {message}", style="green"))
