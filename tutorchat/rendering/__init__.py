"""
Parsing and layout of tutoring responses.

    segment()  - full response text  -> ordered ContentBlocks
    compose()  - one block's content -> Paragraph / BulletItem / Spacer / Table nodes
    BlockRenderer - nodes -> rich renderables for the terminal
"""

from .block_renderer import BlockRenderer, TitleCleanup, clean_title
from .composer import compose, compose_blocks
from .inline import format_line
from .models import (
    BlockKind, Bold, BulletItem, ContentBlock, Math, Paragraph, PlainText,
    RenderedBlock, Spacer, Table,
)
from .segmenter import HEADER_RULES, SEPARATOR, SeparatorPolicy, segment
from .tables import extract_table

__all__ = [
    'BlockKind', 'BlockRenderer', 'Bold', 'BulletItem', 'ContentBlock',
    'HEADER_RULES', 'Math', 'Paragraph', 'PlainText', 'RenderedBlock',
    'SEPARATOR', 'SeparatorPolicy', 'Spacer', 'Table', 'TitleCleanup',
    'clean_title', 'compose', 'compose_blocks', 'extract_table',
    'format_line', 'segment',
]
