"""Core value types shared by layout, caret handling and rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional, Tuple

_EPSILON = 0.01


class Direction(IntEnum):
    """Text direction of a paragraph or attribute span."""

    AUTO = 0
    LTR = 1
    RTL = 2


class Align(IntEnum):
    """Horizontal alignment of lines inside the layout box."""

    START = 0
    END = 1
    CENTER = 2


class Affinity(IntEnum):
    """Which side of a grapheme a text position refers to."""

    NONE = 0
    TRAILING = 1
    LEADING = 2
    SOL = 3
    EOL = 4


class MovementType(IntEnum):
    """Whether a hit test places a caret or extends a selection."""

    CARET = 0
    SELECTION = 1


@dataclass
class Range:
    """Half-open range [start, end) of indices."""

    start: int = 0
    end: int = 0

    def overlaps(self, other: "Range") -> bool:
        """True if the two half-open ranges share at least one index."""
        return self.start < other.end and other.start < self.end


@dataclass
class Vec2:
    """2D point or vector."""

    x: float = 0.0
    y: float = 0.0


@dataclass
class Rect2:
    """Axis aligned rectangle given by its origin and size."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass
class TextProperty:
    """Per-codepoint properties computed while building a layout."""

    is_grapheme_break: bool = False
    is_word_break: bool = False
    is_must_line_break: bool = False
    is_allow_line_break: bool = False
    is_emoji: bool = False
    is_rtl: bool = False
    is_control: bool = False
    is_whitespace: bool = False
    script: str = ""


@dataclass
class Glyph:
    """A positioned glyph and the text it came from."""

    gid: int = 0
    offset_x: float = 0.0
    offset_y: float = 0.0
    advance_x: float = 0.0
    font_idx: int = 0
    span_idx: int = 0
    visual_idx: int = 0
    is_rtl: bool = False
    text_range: Range = field(default_factory=Range)


@dataclass
class LayoutLine:
    """A line of laid out text."""

    text_range: Range = field(default_factory=Range)
    glyph_range: Range = field(default_factory=Range)
    last_grapheme_offset: int = 0
    bounds: Rect2 = field(default_factory=Rect2)
    ascender: float = 0.0
    descender: float = 0.0
    is_rtl: bool = False


@dataclass(frozen=True)
class TextPosition:
    """A location in the text: codepoint offset plus affinity."""

    offset: int = 0
    affinity: Affinity = Affinity.NONE


@dataclass(frozen=True)
class TextSelection:
    """A selection between two text positions, in the order it was made."""

    start_pos: TextPosition = field(default_factory=TextPosition)
    end_pos: TextPosition = field(default_factory=TextPosition)


@dataclass
class VisualCaret:
    """Geometry of a caret drawn on screen."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    is_rtl: bool = False


@dataclass(frozen=True)
class FontFeature:
    """OpenType feature tag and its value."""

    tag: int
    value: int


@dataclass(frozen=True)
class TextAttribs:
    """Styling attributes applied to a run of text."""

    font_size: float = 16.0
    font_weight: int = 400
    font_stretch: float = 1.0
    font_family: int = 0
    style: int = 0
    direction: Direction = Direction.AUTO
    letter_spacing: float = 0.0
    word_spacing: float = 0.0
    line_spacing_multiplier: float = 1.0
    color: Tuple[int, int, int, int] = (0, 0, 0, 255)
    lang: Optional[str] = None
    font_features: Tuple[FontFeature, ...] = ()


@dataclass
class AttribsSpan:
    """Attributes that apply to a range of the layout text."""

    text_range: Range
    attribs: TextAttribs


@dataclass
class LayoutParams:
    """Parameters that control how a whole layout is built."""

    font_collection: Any = None
    lang: Optional[str] = None
    line_break_width: float = 0.0
    origin: Vec2 = field(default_factory=Vec2)
    ignore_must_line_breaks: bool = False
    base_direction: Direction = Direction.AUTO
    align: Align = Align.START
    baseline: int = 0


@dataclass(frozen=True)
class FontMetrics:
    """Vertical font metrics in em units (ascender is negative, y down)."""

    ascender: float = 0.0
    descender: float = 0.0
    line_gap: float = 0.0


@dataclass(frozen=True)
class CaretMetrics:
    """Caret offset and slope of a font."""

    offset: float = 0.0
    slope: float = 0.0


@dataclass
class Font:
    """A font as seen by the layout and renderer."""

    name: str
    upem: int = 1000
    name_hash: int = 0
    metrics: FontMetrics = field(default_factory=FontMetrics)
    caret_metrics: CaretMetrics = field(default_factory=CaretMetrics)
    scripts: Tuple[str, ...] = ()
    font_family: int = 0
    is_color: bool = False
    style: int = 0
    stretch: float = 1.0
    weight: int = 400
    idx: int = 0

    def __post_init__(self) -> None:
        if self.upem <= 0:
            raise ValueError(f"units per em must be positive, got {self.upem}")

    @property
    def upem_scale(self) -> float:
        """Scale that converts font units to em units."""
        return 1.0 / self.upem


def _canonical_lang(lang: str) -> str:
    return lang.strip().lower().replace("_", "-")


def _lang_equal(lhs: Optional[str], rhs: Optional[str]) -> bool:
    if lhs is None and rhs is None:
        return True
    if lhs is None or rhs is None:
        return False
    return _canonical_lang(lhs) == _canonical_lang(rhs)


def _close(a: float, b: float) -> bool:
    return abs(a - b) < _EPSILON


def attribs_equal(lhs: TextAttribs, rhs: TextAttribs) -> bool:
    """True if two attribute sets style text identically, so their spans can merge."""
    return (
        lhs.direction == rhs.direction
        and lhs.style == rhs.style
        and lhs.font_weight == rhs.font_weight
        and _close(lhs.font_size, rhs.font_size)
        and _close(lhs.letter_spacing, rhs.letter_spacing)
        and _close(lhs.word_spacing, rhs.word_spacing)
        and _close(lhs.line_spacing_multiplier, rhs.line_spacing_multiplier)
        and tuple(lhs.color) == tuple(rhs.color)
        and tuple(lhs.font_features) == tuple(rhs.font_features)
        and _lang_equal(lhs.lang, rhs.lang)
    )