"""
Tests for block segmentation, including segmentation of a growing stream.
"""

import re

from tutorchat.rendering.composer import compose_blocks
from tutorchat.rendering.models import BlockKind, BulletItem, ContentBlock, PlainText
from tutorchat.rendering.segmenter import (
    PREAMBLE_TITLE, SEPARATOR, SeparatorPolicy, could_become_marker, segment,
)

RESPONSE = (
    "📐 Bài toán: Tam giác vuông\n"
    f"{SEPARATOR}\n"
    "1️⃣ KIẾN THỨC SỬ DỤNG\n"
    f"{SEPARATOR}\n"
    "- Định lý Pythagore: $a^2 + b^2 = c^2$\n"
    "\n"
    f"{SEPARATOR}\n"
    "2️⃣ GỢI Ý BƯỚC GIẢI\n"
    f"{SEPARATOR}\n"
    "- **Bước 1:** Xác định cạnh huyền\n"
    f"{SEPARATOR}\n"
    "3️⃣ LỜI GIẢI CHI TIẾT\n"
    f"{SEPARATOR}\n"
    "| Cạnh | Độ dài |\n"
    "|---|---|\n"
    "| a | 3 |\n"
    "| b | 4 |\n"
    "Vậy $c = 5$.\n"
)


def _squash(text):
    return re.sub(r"\s+", "", text)


def test_end_to_end_single_knowledge_block():
    text = f"{SEPARATOR}\n1️⃣ KIẾN THỨC SỬ DỤNG\n{SEPARATOR}\n- Định lý Pythagore\n"
    blocks = segment(text)
    assert blocks == [ContentBlock(BlockKind.KNOWLEDGE, "1️⃣ KIẾN THỨC SỬ DỤNG", "- Định lý Pythagore\n")]

    rendered = compose_blocks(blocks)
    assert rendered[0].nodes == (BulletItem((PlainText("Định lý Pythagore"),)),)


def test_blocks_in_order_with_preamble():
    blocks = segment(RESPONSE)
    assert [b.kind for b in blocks] == [
        BlockKind.PREAMBLE, BlockKind.KNOWLEDGE, BlockKind.HINT, BlockKind.SOLUTION,
    ]
    assert blocks[0].title == PREAMBLE_TITLE
    assert blocks[0].raw_content == "📐 Bài toán: Tam giác vuông\n"
    assert blocks[2].raw_content == "- **Bước 1:** Xác định cạnh huyền\n"


def test_titles_come_from_header_phrases():
    titles = [b.title for b in segment(RESPONSE)[1:]]
    assert titles == ["1️⃣ KIẾN THỨC SỬ DỤNG", "2️⃣ GỢI Ý BƯỚC GIẢI", "3️⃣ LỜI GIẢI CHI TIẾT"]


def test_reconstruction_modulo_separators_and_whitespace():
    blocks = segment(RESPONSE)
    rebuilt = "".join(
        b.raw_content if b.kind == BlockKind.PREAMBLE else b.title + b.raw_content
        for b in blocks
    )
    without_separators = "\n".join(
        line for line in RESPONSE.split("\n") if SEPARATOR not in line
    )
    assert _squash(rebuilt) == _squash(without_separators)


def test_text_without_headers_is_one_unknown_block():
    text = "Chào em!\n\nHôm nay em muốn ôn phần nào?"
    assert segment(text) == [ContentBlock(BlockKind.UNKNOWN, "", text)]


def test_unknown_fallback_keeps_text_verbatim():
    text = "Dòng 1\r\nDòng 2\r\n"
    assert segment(text)[0].raw_content == text


def test_whitespace_only_intro_gives_no_preamble():
    blocks = segment("\n  \n3️⃣ LỜI GIẢI CHI TIẾT\nTa có $x = 2$\n")
    assert blocks == [ContentBlock(BlockKind.SOLUTION, "3️⃣ LỜI GIẢI CHI TIẾT", "Ta có $x = 2$\n")]


def test_decorated_header_line():
    blocks = segment("📘 **1️⃣ KIẾN THỨC SỬ DỤNG** 📘\nnội dung\n")
    assert blocks[0].kind == BlockKind.KNOWLEDGE
    assert blocks[0].title == "1️⃣ KIẾN THỨC SỬ DỤNG"


def test_every_header_kind_is_recognized():
    text = (
        "⚠️ CẢNH BÁO VƯỢT CẤP\nw\n"
        "4️⃣ CHỐT PHƯƠNG PHÁP GIẢI\ns\n"
        "5️⃣ BÀI TOÁN TƯƠNG TỰ\nb\n"
        "🧮 VẼ HÌNH TRÊN GEOGEBRA\ng\n"
    )
    assert [b.kind for b in segment(text)] == [
        BlockKind.WARNING, BlockKind.SUMMARY, BlockKind.SIMILAR, BlockKind.GEOGEBRA,
    ]


def test_first_rule_wins_on_ambiguous_line():
    blocks = segment("2️⃣ GỢI Ý BƯỚC GIẢI / 1️⃣ KIẾN THỨC SỬ DỤNG\nx\n")
    assert blocks[0].kind == BlockKind.KNOWLEDGE


def test_separator_takes_precedence_over_header():
    text = f"{SEPARATOR} 1️⃣ KIẾN THỨC SỬ DỤNG\nnội dung\n"
    assert segment(text) == [ContentBlock(BlockKind.UNKNOWN, "", text)]


def test_exact_separator_policy():
    text = f"{SEPARATOR} 1️⃣ KIẾN THỨC SỬ DỤNG\nnội dung\n"
    blocks = segment(text, separator_policy=SeparatorPolicy.EXACT)
    assert blocks == [ContentBlock(BlockKind.KNOWLEDGE, "1️⃣ KIẾN THỨC SỬ DỤNG", "nội dung\n")]


def test_separators_never_become_content():
    for block in segment(RESPONSE):
        assert "━" not in block.raw_content


def test_crlf_line_endings():
    blocks = segment("1️⃣ KIẾN THỨC SỬ DỤNG\r\n- a\r\n")
    assert blocks == [ContentBlock(BlockKind.KNOWLEDGE, "1️⃣ KIẾN THỨC SỬ DỤNG", "- a\n")]


# ============================================================================
# Growing buffers
# ============================================================================

def test_streaming_prefixes_keep_completed_blocks_stable():
    full = segment(RESPONSE)
    for end in range(len(RESPONSE) + 1):
        partial = segment(RESPONSE[:end], final=False)
        completed = partial[:-1]
        assert completed == full[:len(completed)], RESPONSE[:end]


def test_partial_header_is_held_back_while_streaming():
    prefix = "1️⃣ KIẾN THỨC SỬ DỤNG\n- Định lý Pythagore\n3️⃣ LỜI GI"
    blocks = segment(prefix, final=False)
    assert blocks == [
        ContentBlock(BlockKind.KNOWLEDGE, "1️⃣ KIẾN THỨC SỬ DỤNG", "- Định lý Pythagore\n"),
    ]


def test_partial_separator_is_held_back_while_streaming():
    blocks = segment("1️⃣ KIẾN THỨC SỬ DỤNG\n- a\n━━━━━", final=False)
    assert blocks[-1].raw_content == "- a\n"


def test_unknown_fallback_while_streaming_hides_partial_header():
    blocks = segment(f"{SEPARATOR}\n1️⃣ KIẾN TH", final=False)
    assert len(blocks) == 1
    assert "KIẾN" not in blocks[0].raw_content


def test_final_segmentation_shows_unfinished_line():
    text = "Ta có\n1️⃣ KIẾN TH"
    assert segment(text, final=True) == [ContentBlock(BlockKind.UNKNOWN, "", text)]


def test_ordinary_content_is_shown_while_streaming():
    blocks = segment("1️⃣ KIẾN THỨC SỬ DỤNG\n- Định lý", final=False)
    assert blocks[0].raw_content == "- Định lý\n"


def test_could_become_marker():
    assert could_become_marker("━━━")
    assert could_become_marker("📘 ")
    assert could_become_marker("📘 2️⃣ GỢI")
    assert could_become_marker("VẼ HÌNH")
    assert not could_become_marker("Ta có")
    assert not could_become_marker("")
