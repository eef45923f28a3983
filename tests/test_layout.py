import unicodedata

import pytest

from skribidi.layout import Layout
from skribidi.model import (
    Affinity,
    Align,
    AttribsSpan,
    Direction,
    Font,
    FontMetrics,
    Glyph,
    LayoutParams,
    Range,
    TextAttribs,
    TextPosition,
    TextProperty,
)

ADVANCE = 10.0


def _font():
    return Font("test", upem=1000, metrics=FontMetrics(ascender=-0.8, descender=0.2, line_gap=0.0))


def _props(text, rtl=False):
    props = []
    for i, ch in enumerate(text):
        nxt = text[i + 1] if i + 1 < len(text) else None
        cat = unicodedata.category(ch)
        is_ws = cat in ("Zs", "Zl", "Zp")
        is_ctrl = cat == "Cc"
        grapheme_break = nxt is None or not unicodedata.combining(nxt)
        word_break = nxt is None or (ch.isalnum() != nxt.isalnum())
        props.append(
            TextProperty(
                is_grapheme_break=grapheme_break,
                is_word_break=word_break,
                is_must_line_break=ch == "\n",
                is_allow_line_break=is_ws,
                is_rtl=rtl,
                is_control=is_ctrl,
                is_whitespace=is_ws,
                script="Latn",
            )
        )
    return props


def _make(text, width=0.0, align=Align.START, rtl=False, ignore=False, missing=False):
    props = _props(text, rtl)
    clusters = []
    start = 0
    for i, p in enumerate(props):
        if p.is_grapheme_break:
            clusters.append(Range(start, i + 1))
            start = i + 1
    count = len(clusters)
    glyphs = [
        Glyph(
            gid=0 if missing else ord(text[r.start]),
            advance_x=ADVANCE,
            visual_idx=(count - 1 - i) if rtl else i,
            is_rtl=rtl,
            text_range=r,
        )
        for i, r in enumerate(clusters)
    ]
    if rtl:
        glyphs.reverse()
    params = LayoutParams(
        line_break_width=width,
        align=align,
        base_direction=Direction.RTL if rtl else Direction.AUTO,
        ignore_must_line_breaks=ignore,
    )
    spans = [AttribsSpan(Range(0, len(text)), TextAttribs(font_size=10.0))]
    return Layout(params, text, props, glyphs, spans, [_font()])


def test_init_without_text():
    layout = Layout(LayoutParams(font_collection=None), "", [], [], [], [])
    assert len(layout.lines) == 1
    assert layout.lines[0].text_range == Range(0, 0)
    assert layout.bounds.width == 0.0
    assert layout.bounds.height == 0.0


def test_missing_glyphs_are_kept():
    layout = _make("今天天气晴朗", missing=True)
    assert len(layout.glyphs) == 6
    assert layout.glyphs[0].gid == 0


def test_text_props_length_mismatch():
    with pytest.raises(ValueError):
        Layout(LayoutParams(), "ab", [TextProperty()], [], [], [])


def test_single_line_positions():
    layout = _make("hello world")
    assert len(layout.lines) == 1
    line = layout.lines[0]
    assert line.bounds.width == pytest.approx(110.0)
    assert line.bounds.height == pytest.approx(10.0)
    assert [g.offset_x for g in layout.glyphs] == pytest.approx([10.0 * i for i in range(11)])
    assert layout.glyphs[0].offset_y == pytest.approx(8.0)
    assert layout.bounds.width == pytest.approx(110.0)
    assert layout.bounds.height == pytest.approx(10.0)


def test_word_wrap():
    layout = _make("hello world", width=70.0)
    assert len(layout.lines) == 2
    first, second = layout.lines
    assert first.text_range == Range(0, 6)
    assert first.last_grapheme_offset == 5
    assert first.bounds.width == pytest.approx(50.0)
    assert second.text_range == Range(6, 11)
    assert second.bounds.y == pytest.approx(10.0)
    assert layout.glyphs[6].offset_x == pytest.approx(0.0)
    assert layout.glyphs[6].offset_y == pytest.approx(18.0)
    assert layout.bounds.width == pytest.approx(70.0)
    assert layout.bounds.height == pytest.approx(sum(l.bounds.height for l in layout.lines))


@pytest.mark.parametrize("align, expected_x", [(Align.START, 0.0), (Align.END, 20.0), (Align.CENTER, 10.0)])
def test_alignment(align, expected_x):
    layout = _make("hello world", width=70.0, align=align)
    assert layout.lines[1].bounds.x == pytest.approx(expected_x)


def test_must_break():
    layout = _make("ab\ncd")
    assert len(layout.lines) == 2
    assert layout.lines[0].text_range == Range(0, 3)
    assert layout.lines[0].bounds.width == pytest.approx(20.0)
    assert layout.lines[1].text_range == Range(3, 5)


def test_ignore_must_break():
    layout = _make("ab\ncd", ignore=True)
    assert len(layout.lines) == 1


def test_trailing_newline_creates_empty_line():
    layout = _make("ab\n")
    assert len(layout.lines) == 2
    last = layout.lines[1]
    assert last.text_range == Range(3, 3)
    assert last.last_grapheme_offset == 3
    assert last.bounds.height == pytest.approx(10.0)
    assert layout.bounds.height == pytest.approx(20.0)


def test_overlong_word_is_split():
    layout = _make("abcdefghij", width=35.0)
    assert [l.glyph_range for l in layout.lines] == [Range(0, 3), Range(3, 6), Range(6, 9), Range(9, 10)]


def test_rtl_visual_order():
    layout = _make("ab", rtl=True)
    assert layout.resolved_is_rtl is True
    assert layout.glyphs[0].text_range.start == 1
    assert layout.glyphs[0].offset_x == pytest.approx(0.0)
    assert layout.glyphs[1].offset_x == pytest.approx(10.0)
    assert layout.is_character_rtl_at(TextPosition(0)) is True
    assert layout.is_character_rtl_at(TextPosition(5)) is True


def test_is_character_rtl_ltr():
    layout = _make("ab")
    assert layout.is_character_rtl_at(TextPosition(1)) is False


def test_grapheme_navigation():
    layout = _make("e\u0301x")
    assert layout.next_grapheme_offset(0) == 2
    assert layout.next_grapheme_offset(2) == 3
    assert layout.next_grapheme_offset(3) == 3
    assert layout.prev_grapheme_offset(3) == 2
    assert layout.prev_grapheme_offset(2) == 0
    assert layout.prev_grapheme_offset(0) == 0
    assert layout.align_grapheme_offset(1) == 0
    assert layout.align_grapheme_offset(2) == 2


def test_combining_cluster_single_glyph():
    layout = _make("e\u0301x")
    assert len(layout.glyphs) == 2
    assert layout.lines[0].last_grapheme_offset == 2


def test_line_index():
    layout = _make("hello world", width=70.0)
    assert layout.line_index(TextPosition(2)) == 0
    assert layout.line_index(TextPosition(7)) == 1
    assert layout.line_index(TextPosition(11)) == 1
    assert layout.line_index(TextPosition(-5)) == 0


def test_text_offset():
    layout = _make("hello world")
    assert layout.text_offset(TextPosition(3, Affinity.LEADING)) == 4
    assert layout.text_offset(TextPosition(3, Affinity.TRAILING)) == 3
    assert layout.text_offset(TextPosition(100, Affinity.TRAILING)) == 11


def test_line_start_and_end():
    layout = _make("hello world", width=70.0)
    assert layout.line_start_at(TextPosition(7)) == TextPosition(6, Affinity.SOL)
    assert layout.line_end_at(TextPosition(2)) == TextPosition(5, Affinity.EOL)


def test_line_end_before_control_is_trailing():
    layout = _make("ab\ncd")
    assert layout.line_end_at(TextPosition(0)) == TextPosition(2, Affinity.TRAILING)


def test_word_start_and_end():
    layout = _make("hello world", width=70.0)
    assert layout.word_start_at(TextPosition(8)) == TextPosition(6, Affinity.TRAILING)
    assert layout.word_end_at(TextPosition(8)) == TextPosition(10, Affinity.LEADING)
    assert layout.word_start_at(TextPosition(2)) == TextPosition(0, Affinity.TRAILING)
    assert layout.word_end_at(TextPosition(2)) == TextPosition(4, Affinity.LEADING)


def test_input_glyphs_not_mutated():
    props = _props("ab")
    glyphs = [
        Glyph(gid=1, advance_x=5.0, visual_idx=0, text_range=Range(0, 1)),
        Glyph(gid=2, advance_x=5.0, visual_idx=1, text_range=Range(1, 2)),
    ]
    spans = [AttribsSpan(Range(0, 2), TextAttribs(font_size=10.0))]
    layout = Layout(LayoutParams(), "ab", props, glyphs, spans, [_font()])
    assert glyphs[1].offset_x == 0.0
    assert layout.glyphs[1].offset_x == pytest.approx(5.0)