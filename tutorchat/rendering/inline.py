"""
Inline formatting: one line of raw text into plain, bold and math spans.
"""

import re
from typing import List

from .models import Bold, Math, PlainText, Span

# Math is split out first, so a '**' inside a formula never opens a bold run
MATH_PATTERN = re.compile(r"(\$[^$]+\$)")
BOLD_PATTERN = re.compile(r"(\*\*.+?\*\*)")


def _bold_spans(segment: str) -> List[Span]:
    spans: List[Span] = []
    for part in BOLD_PATTERN.split(segment):
        if not part:
            continue
        if BOLD_PATTERN.fullmatch(part):
            spans.append(Bold(part[2:-2]))
        else:
            spans.append(PlainText(part))
    return spans


def format_line(line: str) -> List[Span]:
    """Split a line into ordered spans.

    Unterminated delimiters ('$x^2', '**note') are kept as literal text;
    this never raises.

    >>> format_line("**Lưu ý:** xem lại")
    [Bold(text='Lưu ý:'), PlainText(text=' xem lại')]
    """
    spans: List[Span] = []
    for part in MATH_PATTERN.split(line):
        if not part:
            continue
        if MATH_PATTERN.fullmatch(part):
            spans.append(Math(part[1:-1]))
        else:
            spans.extend(_bold_spans(part))
    return spans
