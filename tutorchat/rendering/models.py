"""
Value objects produced by the segmentation and composition passes.

Everything here is immutable: a new block list and new render nodes are
built from the text buffer on every pass, nothing is patched in place.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union


class BlockKind(str, Enum):
    """Kind of a section in a model response."""
    PREAMBLE = "preamble"
    KNOWLEDGE = "knowledge"
    HINT = "hint"
    SOLUTION = "solution"
    SUMMARY = "summary"
    SIMILAR = "similar"
    GEOGEBRA = "geogebra"
    WARNING = "warning"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ContentBlock:
    """One titled section of a model response."""
    kind: BlockKind
    title: str
    raw_content: str


# ============================================================================
# Inline spans
# ============================================================================

@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class Bold:
    text: str


@dataclass(frozen=True)
class Math:
    latex: str

    @property
    def literal(self) -> str:
        """The span as it appeared in the source, delimiters included."""
        return f"${self.latex}$"


Span = Union[PlainText, Bold, Math]


# ============================================================================
# Render nodes
# ============================================================================

@dataclass(frozen=True)
class Paragraph:
    spans: Tuple[Span, ...]


@dataclass(frozen=True)
class BulletItem:
    spans: Tuple[Span, ...]


@dataclass(frozen=True)
class Spacer:
    pass


@dataclass(frozen=True)
class Table:
    # Rows are not forced to the same length (ragged source is kept as-is)
    rows: Tuple[Tuple[str, ...], ...]

    @property
    def header(self) -> Tuple[str, ...]:
        return self.rows[0]

    @property
    def body(self) -> Tuple[Tuple[str, ...], ...]:
        return self.rows[1:]


RenderNode = Union[Paragraph, BulletItem, Spacer, Table]


@dataclass(frozen=True)
class RenderedBlock:
    """A block together with the nodes composed from its raw content."""
    block: ContentBlock
    nodes: Tuple[RenderNode, ...] = field(default_factory=tuple)

    @property
    def kind(self) -> BlockKind:
        return self.block.kind
