"""
LaTeX to Unicode conversion for inline formulas.

Terminals cannot typeset LaTeX, so each `$...$` span is validated and
turned into readable Unicode text with pylatexenc, then caret/underscore
scripts are mapped onto Unicode superscript and subscript characters:

    "S = a^2"          -> "S = a²"
    "\\Delta = b^2-4ac" -> "Δ = b²-4ac"
    "x_1 + x_2"        -> "x₁ + x₂"

A formula that does not parse raises MathRenderError; callers fall back
to the literal text.
"""

import re
from functools import lru_cache

from pylatexenc.latex2text import LatexNodes2Text
from pylatexenc.latexwalker import LatexWalker, LatexWalkerError

from ..errors import MathRenderError

SUPERSCRIPTS = {
    '0': '⁰', '1': '¹', '2': '²', '3': '³', '4': '⁴', '5': '⁵',
    '6': '⁶', '7': '⁷', '8': '⁸', '9': '⁹', '-': '⁻', '+': '⁺',
    '(': '⁽', ')': '⁾', '=': '⁼', 'n': 'ⁿ', 'i': 'ⁱ', 'x': 'ˣ',
    'y': 'ʸ', 'z': 'ᶻ', 'a': 'ᵃ', 'b': 'ᵇ', 'c': 'ᶜ', 'd': 'ᵈ',
    'e': 'ᵉ', 'k': 'ᵏ', 'm': 'ᵐ', 'o': 'ᵒ', 'p': 'ᵖ', 't': 'ᵗ',
}

SUBSCRIPTS = {
    '0': '₀', '1': '₁', '2': '₂', '3': '₃', '4': '₄', '5': '₅',
    '6': '₆', '7': '₇', '8': '₈', '9': '₉', '-': '₋', '+': '₊',
    '(': '₍', ')': '₎', '=': '₌', 'a': 'ₐ', 'e': 'ₑ', 'i': 'ᵢ',
    'k': 'ₖ', 'm': 'ₘ', 'n': 'ₙ', 'o': 'ₒ', 'x': 'ₓ',
}

# 90^\circ, 90^{\circ}
DEGREE_PATTERN = re.compile(r"\^\s*(?:\{\s*\\circ\s*\}|\\circ(?![a-zA-Z]))")

# \dfrac and \tfrac are display variants of \frac; the default macro table
# does not know them and would glue their arguments together
FRAC_ALIAS_PATTERN = re.compile(r"\\[dt]frac(?![a-zA-Z])")

# ^2, ^{n+1}, _1, _{AB}
SCRIPT_PATTERN = re.compile(r'([\^_])(\{([^{}]*)\}|[0-9a-zA-Z+\-])')


def _convert_scripts(text: str) -> str:
    def replace(match):
        table = SUPERSCRIPTS if match.group(1) == '^' else SUBSCRIPTS
        body = match.group(3) if match.group(3) is not None else match.group(2)
        if body and all(ch in table for ch in body):
            return ''.join(table[ch] for ch in body)
        # Not representable: keep a readable caret form
        return match.group(1) + body

    text = DEGREE_PATTERN.sub("°", text)
    return SCRIPT_PATTERN.sub(replace, text)


def _check_braces(latex: str) -> None:
    depth = 0
    escaped = False
    for ch in latex:
        if escaped:
            escaped = False
        elif ch == '\\':
            escaped = True
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth < 0:
                raise MathRenderError(f"Unbalanced '}}' in formula: {latex}")
    if depth:
        raise MathRenderError(f"Unclosed '{{' in formula: {latex}")


@lru_cache(maxsize=1)
def _converter() -> LatexNodes2Text:
    return LatexNodes2Text(
        keep_comments=False,
        strict_latex_spaces=False,
    )


@lru_cache(maxsize=1024)
def latex_to_unicode(latex: str) -> str:
    """Convert an inline formula (without its '$' delimiters) to Unicode text.

    Raises:
        MathRenderError: If the formula is empty or does not parse
    """
    if not latex.strip():
        raise MathRenderError("Empty formula")
    _check_braces(latex)

    try:
        LatexWalker(latex, tolerant_parsing=False).get_latex_nodes()
        # Scripts are mapped on the source: pylatexenc drops the braces of
        # 'a^{n+1}' and would leave 'a^n+1'
        source = FRAC_ALIAS_PATTERN.sub(r"\\frac", latex)
        text = _converter().latex_to_text(_convert_scripts(source))
    except LatexWalkerError as e:
        raise MathRenderError(f"Invalid formula {latex!r}: {e}") from e

    return re.sub(r'\s+', ' ', text).strip()
