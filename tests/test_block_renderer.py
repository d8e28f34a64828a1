"""
Tests for terminal rendering of blocks.
"""

import io

from rich.console import Console

from tutorchat.rendering.block_renderer import (
    STREAMING_SUBTITLE, BlockRenderer, TitleCleanup, clean_title,
)
from tutorchat.rendering.models import Table
from tutorchat.rendering.segmenter import SEPARATOR

RESPONSE = (
    f"{SEPARATOR}\n"
    "1️⃣ KIẾN THỨC SỬ DỤNG\n"
    f"{SEPARATOR}\n"
    "- Định lý Pythagore: $a^2 + b^2 = c^2$\n"
    f"{SEPARATOR}\n"
    "3️⃣ LỜI GIẢI CHI TIẾT\n"
    f"{SEPARATOR}\n"
    "| Cạnh | Độ dài |\n"
    "|---|---|\n"
    "| a | 3 |\n"
    "**Vậy** cạnh huyền bằng 5.\n"
)


def _render(renderable):
    console = Console(record=True, width=100, file=io.StringIO(), color_system=None)
    console.print(renderable)
    return console.export_text()


def test_clean_title_policies():
    assert clean_title("1️⃣ KIẾN THỨC SỬ DỤNG") == "1 KIẾN THỨC SỬ DỤNG"
    assert clean_title("1️⃣ KIẾN THỨC SỬ DỤNG", TitleCleanup.NUMBERING) == "KIẾN THỨC SỬ DỤNG"
    assert clean_title("⚠️ CẢNH BÁO VƯỢT CẤP") == "CẢNH BÁO VƯỢT CẤP"
    assert clean_title(" 1️⃣ KIẾN THỨC SỬ DỤNG ", TitleCleanup.NONE) == "1️⃣ KIẾN THỨC SỬ DỤNG"


def test_blocks_render_as_titled_panels():
    output = _render(BlockRenderer().render_text(RESPONSE))
    assert "1 KIẾN THỨC SỬ DỤNG" in output
    assert "3 LỜI GIẢI CHI TIẾT" in output
    assert "•" in output
    assert "a² + b² = c²" in output
    assert "Vậy cạnh huyền bằng 5." in output
    assert "━" not in output


def test_table_cells_are_rendered():
    output = _render(BlockRenderer().render_text(RESPONSE))
    for cell in ("Cạnh", "Độ dài", "a", "3"):
        assert cell in output
    assert "---" not in output


def test_numbering_cleanup_in_panel_title():
    output = _render(BlockRenderer(title_cleanup=TitleCleanup.NUMBERING).render_text(RESPONSE))
    assert "1 KIẾN THỨC" not in output
    assert "KIẾN THỨC SỬ DỤNG" in output


def test_invalid_formula_falls_back_to_literal():
    text = "3️⃣ LỜI GIẢI CHI TIẾT\nTa có $\\frac{a}{b$ và $x^2$\n"
    output = _render(BlockRenderer().render_text(text))
    assert "$\\frac{a}{b$" in output
    assert "x²" in output


def test_unknown_reply_is_rendered_without_frame():
    output = _render(BlockRenderer().render_text("Chào em! [bold]không phải markup[/bold]"))
    assert "Chào em! [bold]không phải markup[/bold]" in output
    assert "╭" not in output


def test_streaming_subtitle_only_on_last_block():
    output = _render(BlockRenderer().render_text(RESPONSE, streaming=True))
    assert output.count(STREAMING_SUBTITLE) == 1
    finished = _render(BlockRenderer().render_text(RESPONSE))
    assert STREAMING_SUBTITLE not in finished


def test_failing_block_does_not_blank_siblings(monkeypatch):
    renderer = BlockRenderer()
    original = renderer.render_node

    def flaky(node, border_style="blue"):
        if isinstance(node, Table):
            raise RuntimeError("boom")
        return original(node, border_style)

    monkeypatch.setattr(renderer, "render_node", flaky)
    output = _render(renderer.render_text(RESPONSE))

    # The knowledge block renders normally, the solution block shows its raw text
    assert "1 KIẾN THỨC SỬ DỤNG" in output
    assert "a² + b² = c²" in output
    assert "| Cạnh | Độ dài |" in output
    assert "**Vậy**" in output
