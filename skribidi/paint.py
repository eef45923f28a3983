"""Colours, gradients and icon shapes, and the geometry used when rasterizing them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

from .model import Rect2, Vec2

MAX_COLOR_STOPS = 64
SPREAD_PAD = 0

_DEGENERATE_AXIS = 0.000001

# Affine transform as (xx, yx, xy, yy, dx, dy).
Mat2 = Tuple[float, float, float, float, float, float]
IDENTITY: Mat2 = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def _channel(value: int) -> int:
    if not 0 <= value <= 255:
        raise ValueError(f"colour channel out of range: {value}")
    return value


@dataclass(frozen=True)
class Color:
    """8-bit RGBA colour."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255

    def __post_init__(self) -> None:
        for value in (self.r, self.g, self.b, self.a):
            _channel(value)

    def premultiplied(self) -> "Color":
        """The colour with its RGB channels multiplied by its alpha."""
        a = self.a
        return Color(self.r * a // 255, self.g * a // 255, self.b * a // 255, a)

    def with_alpha_scaled(self, alpha: int) -> "Color":
        """The colour with its alpha multiplied by ``alpha`` / 255."""
        return Color(self.r, self.g, self.b, self.a * _channel(alpha) // 255)


@dataclass(frozen=True)
class ColorStop:
    """A gradient colour at an offset along the gradient."""

    offset: float
    color: Color


class PathCommandType(IntEnum):
    """Kind of a path command in an icon shape."""

    MOVE_TO = 0
    LINE_TO = 1
    QUAD_TO = 2
    CUBIC_TO = 3
    CLOSE_PATH = 4


@dataclass(frozen=True)
class PathCommand:
    """One path command; control points are used by curve commands only."""

    type: PathCommandType
    pt: Vec2 = field(default_factory=Vec2)
    cp0: Vec2 = field(default_factory=Vec2)
    cp1: Vec2 = field(default_factory=Vec2)


class GradientType(IntEnum):
    """Kind of an icon gradient."""

    LINEAR = 0
    RADIAL = 1


@dataclass
class Gradient:
    """A gradient paint stored in an icon."""

    type: GradientType = GradientType.LINEAR
    stops: List[ColorStop] = field(default_factory=list)
    p0: Vec2 = field(default_factory=Vec2)
    p1: Vec2 = field(default_factory=Vec2)
    radius: float = 0.0
    spread: int = SPREAD_PAD
    xform: Mat2 = IDENTITY


@dataclass
class IconShape:
    """A shape of an icon: a path filled with a colour or a gradient, plus children."""

    path: List[PathCommand] = field(default_factory=list)
    children: List["IconShape"] = field(default_factory=list)
    opacity: float = 1.0
    color: Color = field(default_factory=Color)
    gradient_idx: Optional[int] = None


@dataclass
class Icon:
    """A vector icon; ``view`` gives its size and origin offset."""

    name: str = ""
    root: IconShape = field(default_factory=IconShape)
    gradients: List[Gradient] = field(default_factory=list)
    view: Rect2 = field(default_factory=Rect2)
    hash: int = 0


def prepare_color_stops(
    stops: Sequence[ColorStop],
) -> Tuple[List[ColorStop], float, float]:
    """Sort stops, normalize their offsets to 0..1 and premultiply their colours.

    At most ``MAX_COLOR_STOPS`` stops are used. Returns the prepared stops and the
    minimum and maximum of the original offsets; an empty input gives ([], 0, 0).
    """
    used = sorted(stops[:MAX_COLOR_STOPS], key=lambda s: s.offset)
    if not used:
        return [], 0.0, 0.0
    offset_min = used[0].offset
    offset_max = used[-1].offset
    span = offset_max - offset_min
    scale = 1.0 / span if span > 0.0 else 0.0
    prepared = [
        ColorStop((s.offset - offset_min) * scale, s.color.premultiplied()) for s in used
    ]
    return prepared, offset_min, offset_max


def _lerp(orig: Vec2, delta: Vec2, t: float) -> Vec2:
    return Vec2(orig.x + delta.x * t, orig.y + delta.y * t)


def linear_gradient_points(
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    offset_min: float,
    offset_max: float,
) -> Tuple[Vec2, Vec2]:
    """Reduce a three point linear gradient to two points spanning the stop range.

    The gradient axis from (x0, y0) towards (x1, y1) is projected perpendicular to
    the rotation vector (x2 - x0, y2 - y0).
    """
    orig = Vec2(x0, y0)
    q2x, q2y = x2 - x0, y2 - y0
    q1x, q1y = x1 - x0, y1 - y0
    s = q2x * q2x + q2y * q2y
    if s < _DEGENERATE_AXIS:
        target = Vec2(x1, y1)
    else:
        k = (q2x * q1x + q2y * q1y) / s
        target = Vec2(x1 - k * q2x, y1 - k * q2y)
    delta = Vec2(target.x - orig.x, target.y - orig.y)
    return _lerp(orig, delta, offset_min), _lerp(orig, delta, offset_max)


def radial_gradient_points(
    x0: float,
    y0: float,
    r0: float,
    x1: float,
    y1: float,
    r1: float,
    offset_min: float,
    offset_max: float,
) -> Tuple[Vec2, float, Vec2, float]:
    """Move the circles of a radial gradient to the ends of the stop range.

    Returns (start centre, start radius, end centre, end radius).
    """
    orig = Vec2(x0, y0)
    delta = Vec2(x1 - x0, y1 - y0)
    delta_r = r1 - r0
    return (
        _lerp(orig, delta, offset_min),
        r0 + delta_r * offset_min,
        _lerp(orig, delta, offset_max),
        r0 + delta_r * offset_max,
    )


def glyph_dimensions(
    x_bearing: float,
    y_bearing: float,
    width: float,
    height: float,
    scale: float,
    padding: int,
) -> Rect2:
    """Integer pixel rectangle of glyph extents (font units, y up) at ``scale``.

    The result is in y-down pixels; empty rectangles are not padded.
    """
    x = math.floor(x_bearing * scale)
    y = math.floor(-y_bearing * scale)
    w = math.ceil((x_bearing + width) * scale) - x
    h = math.ceil(-(y_bearing + height) * scale) - y
    if w == 0 or h == 0:
        return Rect2(x, y, w, h)
    return Rect2(x - padding, y - padding, w + padding * 2, h + padding * 2)


def proportional_icon_scale(icon: Optional[Icon], width: float, height: float) -> Vec2:
    """Scale that fits ``icon`` to the requested size; a size <= 0 keeps proportions."""
    if icon is None:
        return Vec2(0.0, 0.0)
    view = icon.view
    if width <= 0 and height <= 0:
        return Vec2(1.0, 1.0)
    if width <= 0:
        scale = height / view.height if view.height > 0.0 else 0.0
        return Vec2(scale, scale)
    if height <= 0:
        scale = width / view.width if view.width > 0.0 else 0.0
        return Vec2(scale, scale)
    return Vec2(
        width / view.width if view.width > 0.0 else 0.0,
        height / view.height if view.height > 0.0 else 0.0,
    )


def icon_dimensions(icon: Icon, icon_scale: Vec2, padding: int) -> Rect2:
    """Integer pixel rectangle needed to rasterize ``icon`` at ``icon_scale``."""
    if icon is None:
        raise ValueError("icon is required")
    width = math.ceil(icon.view.width * icon_scale.x)
    height = math.ceil(icon.view.height * icon_scale.y)
    return Rect2(-padding, -padding, width + padding * 2, height + padding * 2)