"""
Block segmentation of a (possibly still growing) model response.

The response follows the tutoring layout requested by the system prompt:

    ━━━━━━━━━━━━━━━━━━━━
    📘 1️⃣ KIẾN THỨC SỬ DỤNG
    ━━━━━━━━━━━━━━━━━━━━
    - Định lý Pythagore

Separator lines are pure delimiters. A line containing one of the known
header phrases closes the open block and opens a new one. Text before the
first header becomes a preamble block; a reply without any header is kept
whole as a single unknown block.

The whole buffer is re-scanned on every call, so blocks ahead of an
unchanged prefix always classify the same way while a stream grows.
"""

from enum import Enum
from typing import List, Optional, Tuple

from .composer import content_lines
from .models import BlockKind, ContentBlock

SEPARATOR = "━" * 20
SEPARATOR_GLYPH = SEPARATOR[0]

# Checked in this order; the first phrase contained in a line wins
HEADER_RULES: Tuple[Tuple[str, BlockKind], ...] = (
    ("1️⃣ KIẾN THỨC SỬ DỤNG", BlockKind.KNOWLEDGE),
    ("2️⃣ GỢI Ý BƯỚC GIẢI", BlockKind.HINT),
    ("3️⃣ LỜI GIẢI CHI TIẾT", BlockKind.SOLUTION),
    ("4️⃣ CHỐT PHƯƠNG PHÁP GIẢI", BlockKind.SUMMARY),
    ("5️⃣ BÀI TOÁN TƯƠNG TỰ", BlockKind.SIMILAR),
    ("VẼ HÌNH TRÊN GEOGEBRA", BlockKind.GEOGEBRA),
    ("⚠️ CẢNH BÁO VƯỢT CẤP", BlockKind.WARNING),
)

PREAMBLE_TITLE = "Mở đầu"


class SeparatorPolicy(str, Enum):
    """How a separator line is recognized."""
    CONTAINS = "contains"  # any line containing the glyph run
    EXACT = "exact"        # only a line that is the glyph run alone


def is_separator(trimmed: str, policy: SeparatorPolicy = SeparatorPolicy.CONTAINS) -> bool:
    if policy == SeparatorPolicy.EXACT:
        return trimmed == SEPARATOR
    return SEPARATOR in trimmed


def match_header(trimmed: str) -> Optional[Tuple[str, BlockKind]]:
    """Return the first (phrase, kind) rule whose phrase the line contains."""
    for phrase, kind in HEADER_RULES:
        if phrase in trimmed:
            return phrase, kind
    return None


def could_become_marker(partial: str) -> bool:
    """Whether an unterminated last line may still grow into a separator or header.

    Covers a run of separator glyphs, pure decoration (an icon not yet
    followed by letters or digits) and a line ending in the beginning of a
    header phrase, e.g. '🧠 2️⃣ GỢI'.
    """
    trimmed = partial.strip()
    if not trimmed:
        return False
    if set(trimmed) == {SEPARATOR_GLYPH}:
        return True
    if not any(ch.isalnum() for ch in trimmed):
        return True

    starts = [0] + [i + 1 for i, ch in enumerate(trimmed) if ch.isspace()]
    for start in starts:
        tail = trimmed[start:]
        if tail and any(phrase.startswith(tail) for phrase, _ in HEADER_RULES):
            return True
    return False


def segment(text: str, final: bool = True,
            separator_policy: SeparatorPolicy = SeparatorPolicy.CONTAINS) -> List[ContentBlock]:
    """Split a response into ordered, typed blocks.

    Args:
        text: The full accumulated response text
        final: False while the stream is still running; an unterminated last
            line that could still become a separator or header is then held
            back instead of being shown as content
        separator_policy: How separator lines are recognized

    Returns:
        List of ContentBlock, at most one PREAMBLE and always first. A text
        without any header gives a single UNKNOWN block holding the original
        text verbatim.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = content_lines(normalized)
    visible = text
    if not final and lines and not normalized.endswith("\n") and could_become_marker(lines[-1]):
        lines.pop()
        visible = normalized[:normalized.rfind("\n") + 1]

    blocks: List[ContentBlock] = []
    current_kind: Optional[BlockKind] = None
    current_title = ""
    current_lines: List[str] = []
    intro_lines: List[str] = []

    for line in lines:
        trimmed = line.strip()

        # Separator detection takes precedence over header matching
        if is_separator(trimmed, separator_policy):
            continue

        header = match_header(trimmed)
        if header is not None:
            if current_kind is not None:
                blocks.append(ContentBlock(current_kind, current_title, "".join(current_lines)))
            current_title, current_kind = header
            current_lines = []
            continue

        if current_kind is not None:
            current_lines.append(line + "\n")
        else:
            intro_lines.append(line + "\n")

    if current_kind is not None:
        blocks.append(ContentBlock(current_kind, current_title, "".join(current_lines)))

    if not blocks:
        return [ContentBlock(BlockKind.UNKNOWN, "", visible)]

    intro = "".join(intro_lines)
    if intro.strip():
        blocks.insert(0, ContentBlock(BlockKind.PREAMBLE, PREAMBLE_TITLE, intro))
    return blocks
