"""
Terminal rendering of composed blocks with rich.

Each section kind gets its own framed panel (colour, icon, cleaned title),
tables become rich tables with the first row as header, and formulas are
converted to Unicode text. Rendering is isolated per block and per formula:
a failure falls back to literal text and never blanks the rest of the
message.
"""

import logging
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Sequence

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table as RichTable
from rich.text import Text

from ..errors import MathRenderError
from .composer import compose_blocks
from .inline import format_line
from .math_text import latex_to_unicode
from .models import (
    BlockKind, Bold, BulletItem, Math, Paragraph, PlainText,
    RenderedBlock, RenderNode, Spacer, Span, Table,
)
from .segmenter import SeparatorPolicy, segment

logger = logging.getLogger(__name__)

STREAMING_SUBTITLE = "đang trả lời…"


@dataclass(frozen=True)
class BlockStyle:
    border: str
    icon: str
    title: str


BLOCK_STYLES: Dict[BlockKind, BlockStyle] = {
    BlockKind.WARNING: BlockStyle(border="dark_orange", icon="⚠️", title="bold dark_orange"),
    BlockKind.KNOWLEDGE: BlockStyle(border="blue", icon="📖", title="bold blue"),
    BlockKind.HINT: BlockStyle(border="yellow", icon="🧠", title="bold yellow"),
    BlockKind.SOLUTION: BlockStyle(border="medium_purple", icon="✏️", title="bold medium_purple"),
    BlockKind.SUMMARY: BlockStyle(border="green", icon="✅", title="bold green"),
    BlockKind.SIMILAR: BlockStyle(border="magenta", icon="📋", title="bold magenta"),
    BlockKind.GEOGEBRA: BlockStyle(border="grey50", icon="🧮", title="bold grey70"),
}

# Rendered inline, without a frame
UNFRAMED_KINDS = (BlockKind.PREAMBLE, BlockKind.UNKNOWN)


class TitleCleanup(str, Enum):
    """How a matched header phrase is turned into a displayed title."""
    NONE = "none"            # show the phrase as matched
    SYMBOLS = "symbols"      # drop emoji and other symbols, keep letters and digits
    NUMBERING = "numbering"  # as SYMBOLS, and drop the leading section number


_NON_WORD = re.compile(r"[^\w\s\u00C0-\u1EF9]")
_LEADING_NUMBER = re.compile(r"^\d+\s*")


def clean_title(title: str, policy: TitleCleanup = TitleCleanup.SYMBOLS) -> str:
    """Apply a title cleanup policy.

    >>> clean_title("1️⃣ KIẾN THỨC SỬ DỤNG")
    '1 KIẾN THỨC SỬ DỤNG'
    >>> clean_title("1️⃣ KIẾN THỨC SỬ DỤNG", TitleCleanup.NUMBERING)
    'KIẾN THỨC SỬ DỤNG'
    """
    if policy == TitleCleanup.NONE:
        return title.strip()
    cleaned = _NON_WORD.sub("", unicodedata.normalize("NFC", title)).strip()
    if policy == TitleCleanup.NUMBERING:
        cleaned = _LEADING_NUMBER.sub("", cleaned)
    return re.sub(r"\s+", " ", cleaned)


class BlockRenderer:
    """Builds rich renderables from blocks and their render nodes."""

    def __init__(self, title_cleanup: TitleCleanup = TitleCleanup.SYMBOLS,
                 separator_policy: SeparatorPolicy = SeparatorPolicy.CONTAINS):
        self.title_cleanup = title_cleanup
        self.separator_policy = separator_policy

    # ========================================================================
    # Inline spans
    # ========================================================================

    def render_spans(self, spans: Iterable[Span], style: str = "") -> Text:
        text = Text(style=style)
        for span in spans:
            if isinstance(span, Bold):
                text.append(span.text, style="bold")
            elif isinstance(span, Math):
                try:
                    text.append(latex_to_unicode(span.latex), style="italic cyan")
                except MathRenderError as e:
                    logger.debug("Math fallback: %s", e)
                    text.append(span.literal, style="bold red")
            elif isinstance(span, PlainText):
                text.append(span.text)
        return text

    # ========================================================================
    # Nodes
    # ========================================================================

    def render_table(self, table: Table, border_style: str = "blue") -> RichTable:
        grid = RichTable(show_header=False, box=box.ROUNDED, border_style=border_style,
                         padding=(0, 1))
        for _ in range(max(len(row) for row in table.rows)):
            grid.add_column(justify="center")

        for index, row in enumerate(table.rows):
            cells = [self.render_spans(format_line(cell)) for cell in row]
            if index == 0:
                grid.add_row(*cells, style="bold", end_section=len(table.rows) > 1)
            else:
                grid.add_row(*cells)
        return grid

    def render_node(self, node: RenderNode, border_style: str = "blue") -> RenderableType:
        if isinstance(node, Paragraph):
            return self.render_spans(node.spans)
        if isinstance(node, BulletItem):
            bullet = Text("  • ", style="dim")
            bullet.append_text(self.render_spans(node.spans))
            return bullet
        if isinstance(node, Table):
            return self.render_table(node, border_style)
        if isinstance(node, Spacer):
            return Text("")
        raise TypeError(f"Unknown render node: {node!r}")

    # ========================================================================
    # Blocks
    # ========================================================================

    def render_block(self, rendered: RenderedBlock, streaming: bool = False) -> RenderableType:
        block = rendered.block
        style = BLOCK_STYLES.get(block.kind)
        border = style.border if style else "blue"
        body = Group(*[self.render_node(node, border) for node in rendered.nodes])

        if block.kind in UNFRAMED_KINDS or style is None:
            return body

        title = Text(f"{style.icon} {clean_title(block.title, self.title_cleanup)}",
                     style=style.title)
        return Panel(
            body,
            title=title,
            title_align="left",
            subtitle=Text(STREAMING_SUBTITLE, style="dim italic") if streaming else None,
            subtitle_align="right",
            border_style=border,
            padding=(0, 1),
        )

    def render_blocks(self, blocks: Sequence[RenderedBlock], streaming: bool = False) -> Group:
        """Render all blocks; only the last one is marked as streaming."""
        renderables: List[RenderableType] = []
        for index, rendered in enumerate(blocks):
            is_last = index == len(blocks) - 1
            try:
                renderables.append(self.render_block(rendered, streaming and is_last))
            except Exception as e:
                logger.warning("Failed to render %s block, showing raw text: %s",
                               rendered.kind.value, e, exc_info=True)
                renderables.append(Text(rendered.block.raw_content))
        return Group(*renderables)

    def render_text(self, text: str, streaming: bool = False) -> Group:
        """Segment, compose and render a complete response text."""
        blocks = segment(text, final=not streaming, separator_policy=self.separator_policy)
        return self.render_blocks(compose_blocks(blocks), streaming)

