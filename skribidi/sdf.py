"""Signed distance fields from coverage masks, and colour dilation for SDF images."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

Pixel = Tuple[int, int, int, int]

_SQRT2 = math.sqrt(2.0)
_HALF = 0.5
_FAR = 0xFFFF


@dataclass(frozen=True)
class RendererConfig:
    """Settings for turning coverage into signed distance values."""

    on_edge_value: int = 128
    pixel_dist_scale: float = 32.0


def edge_distance(gx: float, gy: float, a: float) -> float:
    """Distance from a pixel centre to the edge, given gradient (gx, gy) and coverage ``a``."""
    if gx == 0.0 or gy == 0.0:
        # Linear approximation is exact on axis aligned edges, a fair guess otherwise.
        return 0.5 - a
    # Symmetric in sign and transposition: move to the first octant.
    gx = abs(gx)
    gy = abs(gy)
    if gx < gy:
        gx, gy = gy, gx
    a1 = 0.5 * gy / gx
    if a < a1:
        return 0.5 * (gx + gy) - math.sqrt(2.0 * gx * gy * a)
    if a < 1.0 - a1:
        return (0.5 - a) * gx
    return -0.5 * (gx + gy) + math.sqrt(2.0 * gx * gy * (1.0 - a))


def _check_size(count: int, width: int, height: int) -> None:
    if width < 2 or height < 2:
        raise ValueError(f"image must be at least 2x2, got {width}x{height}")
    if count != width * height:
        raise ValueError(f"expected {width * height} pixels, got {count}")


def _dist_sqr(ax: float, ay: float, b: Tuple[float, float]) -> float:
    dx = ax - b[0]
    dy = ay - b[1]
    return dx * dx + dy * dy


def mask_to_sdf(
    mask: Sequence[int],
    width: int,
    height: int,
    on_edge_value: int = 128,
    pixel_dist_scale: float = 32.0,
) -> bytearray:
    """Convert an 8-bit coverage mask (row-major, no padding) into a signed distance field.

    Values inside the shape fall below ``on_edge_value`` and values outside rise
    above it, ``pixel_dist_scale`` steps per pixel of distance.
    """
    _check_size(len(mask), width, height)
    w = width
    max_dist = (max(width, height) * 2.0) ** 2
    dist: List[float] = [max_dist] * (width * height)
    pts: List[Tuple[float, float]] = [(0.0, 0.0)] * (width * height)

    # Locate the contour near anti-aliased pixels.
    for y in range(1, height - 1):
        cy = y + _HALF
        for x in range(1, width - 1):
            i = y * w + x
            img4 = mask[i]
            if img4 == 0:
                continue
            cx = x + _HALF
            img1 = mask[i - w]
            img3 = mask[i - 1]
            img5 = mask[i + 1]
            img7 = mask[i + w]
            if img4 == 255:
                # Sharp edge between full and empty coverage.
                igx = (img5 == 0) - (img3 == 0)
                igy = (img7 == 0) - (img1 == 0)
                if igx or igy:
                    cpt = (cx + igx * 0.5, cy + igy * 0.5)
                    pts[i] = cpt
                    dist[i] = _dist_sqr(cx, cy, cpt)
            else:
                img0 = mask[i - w - 1]
                img2 = mask[i - w + 1]
                img6 = mask[i + w - 1]
                img8 = mask[i + w + 1]
                igx = (img2 + img8 - img0 - img6) * 32 + (img5 - img3) * 45
                igy = (img6 + img8 - img0 - img2) * 32 + (img7 - img1) * 45
                ig_len = igx * igx + igy * igy
                if ig_len > 0:
                    s = 1.0 / math.sqrt(ig_len)
                    gx = igx * s
                    gy = igy * s
                    d = edge_distance(gx, gy, img4 / 255.0)
                    cpt = (cx + gx * d, cy + gy * d)
                    pts[i] = cpt
                    dist[i] = _dist_sqr(cx, cy, cpt)

    def relax(i: int, neighbours: Tuple[int, ...], cx: float, cy: float) -> None:
        for k in neighbours:
            j = i + k
            if dist[j] < dist[i]:
                cpt = pts[j]
                d = _dist_sqr(cx, cy, cpt)
                if d < dist[i]:
                    pts[i] = cpt
                    dist[i] = d

    # Dead-reckoning distance transform: top-left to bottom-right, then back.
    forward = (-1 - w, -w, 1 - w, -1)
    for y in range(1, height - 1):
        cy = y + _HALF
        for x in range(1, width - 1):
            relax(y * w + x, forward, x + _HALF, cy)

    backward = (1, w - 1, w, w + 1)
    for y in range(height - 2, 0, -1):
        cy = y + _HALF
        for x in range(width - 2, 0, -1):
            relax(y * w + x, backward, x + _HALF, cy)

    # Cheap approximation for the border pixels.
    bottom = (height - 1) * w
    right = width - 1
    for x in range(1, width - 1):
        dist[x] = (math.sqrt(dist[x + w]) + 1.0) ** 2
        dist[bottom + x] = (math.sqrt(dist[bottom + x - w]) + 1.0) ** 2
    for y in range(1, height - 1):
        dist[y * w] = (math.sqrt(dist[y * w + 1]) + 1.0) ** 2
        dist[y * w + right] = (math.sqrt(dist[y * w + right - 1]) + 1.0) ** 2
    dist[0] = (math.sqrt(dist[1 + w]) + _SQRT2) ** 2
    dist[right] = (math.sqrt(dist[right - 1 + w]) + _SQRT2) ** 2
    dist[bottom] = (math.sqrt(dist[bottom + 1 - w]) + _SQRT2) ** 2
    dist[bottom + right] = (math.sqrt(dist[bottom + right - 1 - w]) + _SQRT2) ** 2

    # Sign the distance and map it to the output range.
    out = bytearray(width * height)
    for i, (coverage, d_sqr) in enumerate(zip(mask, dist)):
        d = math.sqrt(d_sqr)
        if coverage > 127:
            d = -d
        val = on_edge_value + d * pixel_dist_scale
        out[i] = int(min(max(val, 0.0), 255.0))
    return out


def unpremultiply_and_dilate(
    pixels: Sequence[Pixel], width: int, height: int
) -> List[Pixel]:
    """Un-premultiply opaque RGBA pixels and spread their colour into transparent ones.

    Pixels with alpha above 128 become fully opaque; every other pixel takes the
    colour of its nearest such pixel, so an SDF alpha channel can be applied later.
    """
    _check_size(len(pixels), width, height)
    w = width
    image: List[Pixel] = []
    dist: List[int] = []
    for r, g, b, a in pixels:
        if a > 128:
            image.append(
                ((r * 255 // a) & 0xFF, (g * 255 // a) & 0xFF, (b * 255 // a) & 0xFF, 255)
            )
            dist.append(0)
        else:
            image.append((0, 0, 0, 0))
            dist.append(_FAR)

    def relax(i: int, neighbours: Tuple[Tuple[int, int], ...]) -> None:
        cur = dist[i]
        if cur == 0:
            return
        for k, cost in neighbours:
            d = dist[i + k] + cost
            if d < cur:
                image[i] = image[i + k]
                dist[i] = d
                cur = d

    forward = ((-w - 1, 3), (-w, 2), (-1, 2))
    for y in range(1, height):
        for x in range(1, width):
            relax(y * w + x, forward)

    backward = ((w + 1, 3), (w, 2), (1, 2))
    for y in range(height - 2, -1, -1):
        for x in range(width - 2, -1, -1):
            relax(y * w + x, backward)

    # Border pixels copy their inner neighbour.
    bottom = (height - 1) * w
    right = width - 1
    for x in range(1, width - 1):
        image[x] = image[x + w]
        image[bottom + x] = image[bottom + x - w]
    for y in range(1, height - 1):
        image[y * w] = image[y * w + 1]
        image[y * w + right] = image[y * w + right - 1]
    image[0] = image[1 + w]
    image[right] = image[right - 1 + w]
    image[bottom] = image[bottom + 1 - w]
    image[bottom + right] = image[bottom + right - 1 - w]
    return image