"""
Content composition: a block's raw text into ordered render nodes.

Lines are classified in priority order: table line, blank line, bullet,
paragraph. Consecutive table lines are collected into one run and handed
to the table extractor when the run ends.
"""

from typing import Iterable, List

from .inline import format_line
from .models import (
    BulletItem, ContentBlock, Paragraph, RenderedBlock, RenderNode, Spacer, Table,
)
from .tables import extract_table, is_table_line


def content_lines(text: str) -> List[str]:
    """Split on LF; a trailing terminator does not produce an extra empty line."""
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


def _flush_table(run: List[str], nodes: List[RenderNode]) -> None:
    grid = extract_table(run)
    if grid is not None:
        nodes.append(Table(tuple(tuple(row) for row in grid)))
    run.clear()


def compose(raw_content: str) -> List[RenderNode]:
    """Build the render nodes for one block's raw content."""
    nodes: List[RenderNode] = []
    table_run: List[str] = []

    for line in content_lines(raw_content):
        if is_table_line(line):
            table_run.append(line)
            continue
        if table_run:
            _flush_table(table_run, nodes)

        trimmed = line.strip()
        if not trimmed:
            nodes.append(Spacer())
        elif trimmed.startswith("-"):
            nodes.append(BulletItem(tuple(format_line(trimmed[1:].strip()))))
        else:
            # Paragraphs keep the line's own indentation
            nodes.append(Paragraph(tuple(format_line(line))))

    if table_run:
        _flush_table(table_run, nodes)
    return nodes


def compose_blocks(blocks: Iterable[ContentBlock]) -> List[RenderedBlock]:
    """Pair every block with the nodes composed from its raw content."""
    return [RenderedBlock(block, tuple(compose(block.raw_content))) for block in blocks]
