"""
Response display: live rendering of a streaming answer and printing of
complete messages.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner

from ..rendering.block_renderer import BlockRenderer
from .config import ChatConfig
from .stream_driver import RenderSnapshot

THINKING_TEXT = "Đang suy nghĩ..."


class ResponseHandler:
    """Shows render snapshots while a response streams in."""

    def __init__(self, config: ChatConfig, console: Optional[Console] = None):
        self.config = config
        self.console = console or Console()
        self.renderer = BlockRenderer(config.title_cleanup, config.separator_policy)
        self.live: Optional[Live] = None
        self.last_snapshot: Optional[RenderSnapshot] = None

    @contextmanager
    def live_display(self) -> Iterator[Live]:
        """Keep a rich Live region open for the duration of one turn.

        The last published snapshot stays on screen when the region closes.
        """
        with Live(console=self.console, refresh_per_second=self.config.refresh_per_second,
                  transient=False) as live:
            self.live = live
            try:
                yield live
            finally:
                self.live = None

    def publish(self, snapshot: RenderSnapshot) -> None:
        """Stream driver callback: redraw the current turn."""
        self.last_snapshot = snapshot
        if self.live is None:
            return
        if snapshot.streaming and not snapshot.text:
            self.live.update(Spinner("dots", text=THINKING_TEXT, style="cyan"))
        else:
            self.live.update(self.renderer.render_blocks(snapshot.blocks, snapshot.streaming),
                             refresh=not snapshot.streaming)

    def display_message(self, content: str, is_error: bool = False) -> None:
        """Display a complete message (welcome text, error notices)."""
        rendered = self.renderer.render_text(content)
        if is_error:
            self.console.print(Panel(rendered, title="[bold red]❌ Lỗi[/bold red]",
                                     title_align="left", border_style="red"))
        else:
            self.console.print(rendered)
