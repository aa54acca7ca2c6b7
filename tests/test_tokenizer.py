"""Tests for core.locator.tokenizer: word mode vs. fragment-aware mode."""

from __future__ import annotations

from models.schemas import BBox, Glyph, PageData, TextBlock
from core.locator.lines import compute_page_metrics
from core.locator.tokenizer import tokenize_fragments, tokenize_words


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _glyph(text: str, x0: float, y0: float = 700.0, word_index: int | None = None) -> Glyph:
    return Glyph(text=text, bbox=BBox(x0=x0, y0=y0, x1=x0 + 5, y1=y0 + 10), word_index=word_index)


def _page(glyphs: list[Glyph], words: list[TextBlock] | None = None) -> PageData:
    return PageData(page_number=1, width=612, height=792, glyphs=glyphs, words=words)


def _form_line(y0: float = 700.0) -> list[Glyph]:
    """'Hi' followed by four boxed digits 15pt apart."""
    return (
        [_glyph("H", 20, y0), _glyph("i", 26, y0)]
        + [_glyph(d, 100 + i * 15, y0) for i, d in enumerate("1234")]
    )


def _texts(tokens) -> list[str]:
    return [t.text for t in tokens]


# ---------------------------------------------------------------------------
# Word mode
# ---------------------------------------------------------------------------

class TestTokenizeWords:
    def test_boxed_digits_not_bridged(self):
        page = _page(_form_line())
        assert _texts(tokenize_words(page, compute_page_metrics(page.glyphs))) == [
            "Hi", "1", "2", "3", "4",
        ]

    def test_uses_pre_grouped_words(self):
        words = [
            TextBlock(text="second", bbox=BBox(x0=20, y0=680, x1=50, y1=690)),
            TextBlock(text="line", bbox=BBox(x0=60, y0=700, x1=80, y1=710)),
            TextBlock(text="first", bbox=BBox(x0=20, y0=700, x1=50, y1=710)),
        ]
        page = _page(_form_line(), words=words)
        tokens = tokenize_words(page, compute_page_metrics(page.glyphs))
        assert _texts(tokens) == ["first", "line", "second"]
        assert tokens[0].bbox == words[2].bbox

    def test_blank_words_ignored(self):
        words = [
            TextBlock(text=" ", bbox=BBox(x0=10, y0=700, x1=12, y1=710)),
            TextBlock(text="x", bbox=BBox(x0=20, y0=700, x1=25, y1=710)),
        ]
        page = _page([_glyph("x", 20)], words=words)
        assert _texts(tokenize_words(page, compute_page_metrics(page.glyphs))) == ["x"]

    def test_space_glyph_separates_tight_words(self):
        glyphs = [_glyph("a", 20), _glyph("b", 26), _glyph(" ", 31.5), _glyph("c", 33), _glyph("d", 39)]
        page = _page(glyphs)
        assert _texts(tokenize_words(page, compute_page_metrics(glyphs))) == ["ab", "cd"]

    def test_lines_top_to_bottom(self):
        glyphs = [_glyph("b", 20, y0=600), _glyph("a", 20, y0=700)]
        page = _page(glyphs)
        assert _texts(tokenize_words(page, compute_page_metrics(glyphs))) == ["a", "b"]

    def test_empty_page(self):
        page = _page([])
        assert tokenize_words(page, compute_page_metrics([])) == []

    def test_whitespace_only_page(self):
        page = _page([_glyph(" ", 20)])
        assert tokenize_words(page, compute_page_metrics(page.glyphs)) == []


# ---------------------------------------------------------------------------
# Fragment-aware mode
# ---------------------------------------------------------------------------

class TestTokenizeFragments:
    def test_boxed_digits_bridged(self):
        page = _page(_form_line())
        tokens = tokenize_fragments(page, compute_page_metrics(page.glyphs))
        assert _texts(tokens) == ["Hi", "1234"]
        assert tokens[1].bbox == BBox(x0=100, y0=700, x1=150, y1=710)

    def test_ignores_pre_grouped_words(self):
        words = [TextBlock(text="1 2 3 4", bbox=BBox(x0=100, y0=700, x1=150, y1=710))]
        page = _page(_form_line(), words=words)
        assert _texts(tokenize_fragments(page, compute_page_metrics(page.glyphs))) == ["Hi", "1234"]

    def test_digit_runs_do_not_cross_lines(self):
        glyphs = _form_line(700) + _form_line(650)
        page = _page(glyphs)
        tokens = tokenize_fragments(page, compute_page_metrics(glyphs))
        assert _texts(tokens) == ["Hi", "1234", "Hi", "1234"]

    def test_empty_page(self):
        page = _page([])
        assert tokenize_fragments(page, compute_page_metrics([])) == []
