import pytest

from skribidi.model import (
    Affinity,
    Font,
    FontFeature,
    FontMetrics,
    Range,
    TextAttribs,
    TextPosition,
    TextSelection,
    attribs_equal,
)


def test_attribs_equal_identical():
    attribs = TextAttribs(font_size=15.0, font_weight=400)
    assert attribs_equal(attribs, TextAttribs(font_size=15.0, font_weight=400))


def test_attribs_equal_tolerates_small_float_difference():
    lhs = TextAttribs(font_size=15.0)
    rhs = TextAttribs(font_size=15.005)
    assert attribs_equal(lhs, rhs)
    assert not attribs_equal(lhs, TextAttribs(font_size=15.5))


def test_attribs_equal_detects_weight_and_color():
    base = TextAttribs()
    assert not attribs_equal(base, TextAttribs(font_weight=700))
    assert not attribs_equal(base, TextAttribs(color=(255, 0, 0, 255)))


def test_attribs_equal_lang_canonical():
    assert attribs_equal(TextAttribs(lang="zh_Hans"), TextAttribs(lang="zh-hans"))
    assert not attribs_equal(TextAttribs(lang="ja"), TextAttribs(lang=None))
    assert attribs_equal(TextAttribs(lang=None), TextAttribs(lang=None))
    assert not attribs_equal(TextAttribs(lang="ja"), TextAttribs(lang="th"))


def test_attribs_equal_font_features():
    feat = FontFeature(tag=0x6C696761, value=0)
    assert attribs_equal(TextAttribs(font_features=(feat,)), TextAttribs(font_features=(feat,)))
    assert not attribs_equal(TextAttribs(font_features=(feat,)), TextAttribs())
    other = FontFeature(tag=0x6C696761, value=1)
    assert not attribs_equal(TextAttribs(font_features=(feat,)), TextAttribs(font_features=(other,)))


def test_attribs_equal_is_symmetric():
    lhs = TextAttribs(letter_spacing=2.0, lang="ja")
    rhs = TextAttribs(letter_spacing=2.0, lang="JA")
    assert attribs_equal(lhs, rhs) == attribs_equal(rhs, lhs)
    assert attribs_equal(lhs, rhs)


def test_font_upem_scale_inverts_upem():
    font = Font(name="a.ttf", upem=2048)
    assert font.upem_scale * font.upem == pytest.approx(1.0)


def test_font_rejects_non_positive_upem():
    with pytest.raises(ValueError):
        Font(name="a.ttf", upem=0)


def test_font_keeps_metrics():
    metrics = FontMetrics(ascender=-0.8, descender=0.2, line_gap=0.1)
    font = Font(name="b.ttf", metrics=metrics)
    assert font.metrics.ascender == -0.8


def test_text_selection_holds_positions():
    start = TextPosition(offset=2, affinity=Affinity.TRAILING)
    end = TextPosition(offset=5, affinity=Affinity.LEADING)
    selection = TextSelection(start, end)
    assert selection.start_pos == start
    assert selection.end_pos.offset == 5
    assert TextPosition() == TextPosition(0, Affinity.NONE)