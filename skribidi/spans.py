"""Attribute spans, shaping spans and the run iterators used during itemization."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Sequence, Tuple

from .model import (
    AttribsSpan,
    Direction,
    FontFeature,
    Glyph,
    Range,
    TextAttribs,
    TextProperty,
    attribs_equal,
)

_SPACING_THRESHOLD = 0.01
_SIZE_EPSILON = 0.01

# Scripts with cursive connection that cannot take letter spacing.
_NO_LETTER_SPACING_SCRIPTS = frozenset(
    {
        "Arab",  # Arabic
        "Nkoo",  # Nko
        "Phlp",  # Psalter Pahlavi
        "Mand",  # Mandaic
        "Mong",  # Mongolian
        "Phag",  # Phags-pa
        "Deva",  # Devanagari
        "Beng",  # Bengali
        "Guru",  # Gurmukhi
        "Modi",  # Modi
        "Shrd",  # Sharada
        "Sylo",  # Syloti Nagri
        "Tirh",  # Tirhuta
        "Ogam",  # Ogham
    }
)


def _canonical_lang(lang: Optional[str]) -> Optional[str]:
    if lang is None:
        return None
    return lang.strip().lower().replace("_", "-")


def _normalize_script(script: str) -> str:
    return script[:1].upper() + script[1:].lower()


def _has_spacing(attribs: TextAttribs) -> bool:
    return attribs.letter_spacing > _SPACING_THRESHOLD


@dataclass
class ShapingSpan:
    """Consecutive attribute spans that share everything affecting shaping."""

    range: Range
    source_spans: Range
    font_features: Tuple[FontFeature, ...] = ()
    lang: Optional[str] = None
    font_size: float = 16.0
    font_weight: int = 400
    font_stretch: float = 1.0
    font_family: int = 0
    style: int = 0
    direction: Direction = Direction.AUTO
    has_spacing: bool = False

    @classmethod
    def from_span(cls, span: AttribsSpan, index: int) -> "ShapingSpan":
        """Start a shaping span from the attribute span at ``index``."""
        attribs = span.attribs
        return cls(
            range=Range(span.text_range.start, span.text_range.end),
            source_spans=Range(index, index + 1),
            font_features=tuple(attribs.font_features),
            lang=_canonical_lang(attribs.lang),
            font_size=attribs.font_size,
            font_weight=attribs.font_weight,
            font_stretch=attribs.font_stretch,
            font_family=attribs.font_family,
            style=attribs.style,
            direction=attribs.direction,
            has_spacing=_has_spacing(attribs),
        )

    def matches(self, span: AttribsSpan) -> bool:
        """True if ``span`` can be shaped together with this shaping span."""
        attribs = span.attribs
        return (
            self.direction == attribs.direction
            and self.font_family == attribs.font_family
            and self.style == attribs.style
            and self.font_weight == attribs.font_weight
            and self.has_spacing == _has_spacing(attribs)
            and abs(self.font_size - attribs.font_size) < _SIZE_EPSILON
            and self.font_features == tuple(attribs.font_features)
            and self.lang == _canonical_lang(attribs.lang)
        )


def append_attribs_span(
    spans: List[AttribsSpan], attribs: TextAttribs, start: int, end: int
) -> AttribsSpan:
    """Append attributes for text [start, end), merging with the previous span if equal.

    Returns the span that now covers the text.
    """
    if spans and attribs_equal(spans[-1].attribs, attribs):
        last = spans[-1]
        last.text_range.end = end
        return last
    stored = replace(
        attribs,
        lang=_canonical_lang(attribs.lang),
        font_features=tuple(attribs.font_features),
    )
    span = AttribsSpan(text_range=Range(start, end), attribs=stored)
    spans.append(span)
    return span


def create_shaping_spans(spans: Sequence[AttribsSpan]) -> List[ShapingSpan]:
    """Merge attribute spans into spans that differ in something affecting shaping."""
    result: List[ShapingSpan] = []
    for index, span in enumerate(spans):
        if result and result[-1].matches(span):
            current = result[-1]
            current.range.end = span.text_range.end
            current.source_spans.end = index + 1
        else:
            result.append(ShapingSpan.from_span(span, index))
    return result


def script_runs(
    text_props: Sequence[TextProperty], text_range: Range
) -> Iterator[Tuple[Range, str]]:
    """Yield (range, script) for each run of equal script inside ``text_range``."""
    pos = text_range.start
    end = text_range.end
    while pos < end:
        start = pos
        script = text_props[pos].script
        pos += 1
        while pos < end and text_props[pos].script == script:
            pos += 1
        yield Range(start, pos), script


def style_runs(
    text_range: Range, is_rtl: bool, shaping_spans: Sequence[ShapingSpan]
) -> Iterator[Tuple[Range, int]]:
    """Split ``text_range`` at shaping span boundaries.

    Yields (range, shaping span index), in reverse span order when ``is_rtl``.
    """
    if is_rtl:
        indexed = reversed(list(enumerate(shaping_spans)))
    else:
        indexed = enumerate(shaping_spans)
    for index, span in indexed:
        if is_rtl and span.range.end <= text_range.start:
            return
        if not is_rtl and span.range.start > text_range.end:
            return
        start = max(text_range.start, span.range.start)
        end = min(text_range.end, span.range.end)
        if start < end:
            yield Range(start, end), index


def allows_letter_spacing(script: str) -> bool:
    """False for scripts with cursive connection, which cannot be letter spaced."""
    return _normalize_script(script) not in _NO_LETTER_SPACING_SCRIPTS


def apply_spacing(
    glyphs: Sequence[Glyph],
    text_props: Sequence[TextProperty],
    spans: Sequence[AttribsSpan],
) -> None:
    """Add letter and word spacing to the last glyph of each glyph cluster, in place."""
    following: List[Optional[Glyph]] = list(glyphs[1:]) + [None]
    for glyph, next_glyph in zip(glyphs, following):
        if next_glyph is not None and next_glyph.text_range.start == glyph.text_range.start:
            continue
        attribs = spans[glyph.span_idx].attribs
        props = text_props[glyph.text_range.end - 1]
        if props.is_grapheme_break and (
            props.is_whitespace or allows_letter_spacing(props.script)
        ):
            glyph.advance_x += attribs.letter_spacing
        if props.is_whitespace:
            glyph.advance_x += attribs.word_spacing