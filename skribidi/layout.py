"""A laid out paragraph: line breaking, alignment and text position queries."""

from __future__ import annotations

import math
from dataclasses import replace
from typing import List, Optional, Sequence, Union

from .model import (
    Affinity,
    Align,
    AttribsSpan,
    Direction,
    Font,
    Glyph,
    LayoutLine,
    LayoutParams,
    Range,
    Rect2,
    TextPosition,
    TextProperty,
    Vec2,
)

_MIN_LINE_BREAK_WIDTH = 0.001
_FULL_LINE_RATIO = 0.75


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _is_blank(props: TextProperty) -> bool:
    return props.is_whitespace or props.is_control


class Layout:
    """Shaped glyphs of a text broken into lines and positioned in the layout box.

    The glyphs are given in shaping (visual run) order, each with its
    ``visual_idx``; ``fonts`` is indexed by ``Glyph.font_idx``. Glyphs sit on
    the alphabetic baseline of their font.
    """

    def __init__(
        self,
        params: LayoutParams,
        text: Union[str, Sequence[int]],
        text_props: Sequence[TextProperty],
        glyphs: Sequence[Glyph],
        attribute_spans: Sequence[AttribsSpan],
        fonts: Sequence[Font],
    ) -> None:
        self.params = params
        self.text: str = text if isinstance(text, str) else "".join(map(chr, text))
        if len(text_props) != len(self.text):
            raise ValueError(
                f"expected {len(self.text)} text properties, got {len(text_props)}"
            )
        self.text_props: List[TextProperty] = list(text_props)
        self.glyphs: List[Glyph] = [
            replace(g, text_range=Range(g.text_range.start, g.text_range.end))
            for g in glyphs
        ]
        self.attribute_spans: List[AttribsSpan] = list(attribute_spans)
        self.fonts: List[Font] = list(fonts)
        self.lines: List[LayoutLine] = []
        self.bounds = Rect2()
        self.resolved_is_rtl = self._resolve_direction()
        self._break_lines()

    @property
    def text_count(self) -> int:
        """Number of codepoints in the layout text."""
        return len(self.text)

    def _resolve_direction(self) -> bool:
        if self.params.base_direction == Direction.RTL:
            return True
        if self.params.base_direction == Direction.LTR:
            return False
        for props in self.text_props:
            if not _is_blank(props):
                return props.is_rtl
        return bool(self.text_props) and self.text_props[0].is_rtl

    def _default_font(self, font_family: int) -> Optional[Font]:
        return next((f for f in self.fonts if f.font_family == font_family), None)

    # Line breaking

    def _new_line(self, glyph_start: int) -> LayoutLine:
        line = LayoutLine(glyph_range=Range(glyph_start, glyph_start))
        self.lines.append(line)
        return line

    def _break_lines(self) -> None:
        glyphs = self.glyphs
        props = self.text_props
        origin: Vec2 = self.params.origin
        ignore_hard_breaks = self.params.ignore_must_line_breaks

        # Line breaking works on logical order.
        glyphs.sort(key=lambda g: g.text_range.start)

        width_limit = self.params.line_break_width
        if width_limit < _MIN_LINE_BREAK_WIDTH:
            width_limit = math.inf

        self.lines = []
        cur_line = self._new_line(0)
        count = len(glyphs)

        glyph_idx = 0
        while glyph_idx < count:
            run_start = glyph_idx
            run_end = glyph_idx
            trailing_ws = 0.0
            run_width = 0.0
            must_break = False

            while run_end < count:
                # A glyph cluster is never split.
                cluster_width = glyphs[run_end].advance_x
                cluster_start = glyphs[run_end].text_range.start
                while run_end + 1 < count and glyphs[run_end + 1].text_range.start == cluster_start:
                    run_end += 1
                    cluster_width += glyphs[run_end].advance_x
                cp = props[glyphs[run_end].text_range.end - 1]
                run_end += 1

                # Trailing white space does not count for breaking, unless its
                # direction puts it inside the line.
                if cp.is_rtl == self.resolved_is_rtl and _is_blank(cp):
                    trailing_ws += cluster_width
                else:
                    if trailing_ws > 0.0:
                        run_width += trailing_ws
                        trailing_ws = 0.0
                    run_width += cluster_width

                if cp.is_must_line_break:
                    must_break = True
                    break
                if cp.is_allow_line_break:
                    break

            if run_width > width_limit:
                # The run is longer than a whole line: split it.
                if cur_line.bounds.width > width_limit * _FULL_LINE_RATIO:
                    cur_line = self._new_line(run_start)
                run_width = 0.0
                for i in range(run_start, run_end):
                    if cur_line.bounds.width + run_width + glyphs[i].advance_x > width_limit:
                        run_end = i
                        break
                    run_width += glyphs[i].advance_x
                if run_start == run_end:
                    run_width = glyphs[run_start].advance_x
                    run_end = run_start + 1
                cur_line.bounds.width += run_width
                cur_line.glyph_range.end = run_end
            else:
                if cur_line.bounds.width + run_width > width_limit:
                    cur_line = self._new_line(run_start)
                cur_line.bounds.width += run_width + trailing_ws
                cur_line.glyph_range.end = run_end
                if must_break and not ignore_hard_breaks:
                    cur_line = self._new_line(run_end)

            glyph_idx = run_end

        max_line_width = 0.0
        for line in self.lines:
            line_gap = self._measure_line(line)
            line.bounds.height = -line.ascender + line.descender + line_gap
            max_line_width = max(max_line_width, line.bounds.width)

        if width_limit < math.inf:
            max_line_width = max(max_line_width, width_limit)

        top_y = 0.0
        for line in self.lines:
            self._place_line(line, origin, max_line_width, top_y)
            top_y += line.bounds.height

        self.bounds = Rect2(origin.x, origin.y, max_line_width, top_y)

    def _measure_line(self, line: LayoutLine) -> float:
        """Fill in text range and vertical metrics of a line, returning its line gap."""
        glyphs = self.glyphs
        line_gap = 0.0
        start, end = line.glyph_range.start, line.glyph_range.end

        if start != end:
            line.text_range = Range(glyphs[start].text_range.start, glyphs[end - 1].text_range.end)
            line.last_grapheme_offset = self.align_grapheme_offset(line.text_range.end - 1)
            line.is_rtl = self.resolved_is_rtl

            glyphs[start:end] = sorted(glyphs[start:end], key=lambda g: g.visual_idx)

            prev_key = None
            for glyph in glyphs[start:end]:
                key = (glyph.font_idx, glyph.span_idx)
                if key == prev_key:
                    continue
                prev_key = key
                attribs = self.attribute_spans[glyph.span_idx].attribs
                font = self.fonts[glyph.font_idx]
                scale = attribs.font_size * attribs.line_spacing_multiplier
                line.ascender = min(line.ascender, font.metrics.ascender * scale)
                line.descender = max(line.descender, font.metrics.descender * scale)
                line_gap = max(line_gap, font.metrics.line_gap * scale)
        else:
            # Only the last line can be empty, after a trailing line break.
            count = self.text_count
            line.text_range = Range(count, count)
            line.glyph_range = Range(len(glyphs), len(glyphs))
            line.last_grapheme_offset = count
            if self.attribute_spans:
                attribs = self.attribute_spans[-1].attribs
                font = self._default_font(attribs.font_family)
                if font is not None:
                    scale = attribs.font_size * attribs.line_spacing_multiplier
                    line.ascender = min(line.ascender, font.metrics.ascender * scale)
                    line.descender = max(line.descender, font.metrics.descender * scale)
                    line_gap = max(line_gap, font.metrics.line_gap * scale)
        return line_gap

    def _place_line(self, line: LayoutLine, origin: Vec2, max_width: float, top_y: float) -> None:
        glyphs = self.glyphs[line.glyph_range.start:line.glyph_range.end]
        align = self.params.align

        # Space taken by white space at the visual end of the line is pruned.
        edge = glyphs if line.is_rtl else reversed(glyphs)
        whitespace_width = 0.0
        for glyph in edge:
            if not _is_blank(self.text_props[glyph.text_range.start]):
                break
            whitespace_width += glyph.advance_x
        line.bounds.width -= whitespace_width

        slack = max_width - line.bounds.width
        if align == Align.CENTER:
            line.bounds.x = origin.x + slack / 2.0
        elif (align == Align.START) == line.is_rtl:
            line.bounds.x = origin.x + slack
        else:
            line.bounds.x = origin.x

        start_x = line.bounds.x - whitespace_width if line.is_rtl else line.bounds.x
        line.bounds.y = origin.y + top_y
        baseline_y = line.bounds.y - line.ascender

        cur_x = start_x
        for glyph in glyphs:
            glyph.offset_x += cur_x
            glyph.offset_y += baseline_y
            cur_x += glyph.advance_x

    # Grapheme navigation

    def next_grapheme_offset(self, offset: int) -> int:
        """Offset of the start of the grapheme after the one at ``offset``."""
        count = self.text_count
        offset = _clamp(offset, 0, count)
        while offset < count and not self.text_props[offset].is_grapheme_break:
            offset += 1
        if offset >= count:
            return count
        return offset + 1

    def prev_grapheme_offset(self, offset: int) -> int:
        """Offset of the start of the grapheme before the one at ``offset``."""
        offset = _clamp(offset, 0, self.text_count)
        if not self.text_count:
            return offset
        props = self.text_props
        while offset - 1 >= 0 and not props[offset - 1].is_grapheme_break:
            offset -= 1
        if offset <= 0:
            return 0
        offset -= 1
        while offset - 1 >= 0 and not props[offset - 1].is_grapheme_break:
            offset -= 1
        return offset

    def align_grapheme_offset(self, offset: int) -> int:
        """Offset of the start of the grapheme containing ``offset``."""
        offset = _clamp(offset, 0, self.text_count)
        if not self.text_count:
            return offset
        while offset - 1 >= 0 and not self.text_props[offset - 1].is_grapheme_break:
            offset -= 1
        return max(offset, 0)

    # Positions

    def _prune_control_eol(self, line: LayoutLine, pos: TextPosition) -> TextPosition:
        """Move a caret off the leading edge of a line-ending control character."""
        if (
            self.text_count > 0
            and pos.affinity in (Affinity.LEADING, Affinity.EOL)
            and pos.offset == line.last_grapheme_offset
            and line.last_grapheme_offset < self.text_count
            and self.text_props[line.last_grapheme_offset].is_control
        ):
            return TextPosition(pos.offset, Affinity.TRAILING)
        return pos

    def _sanitize_offset(self, line: LayoutLine, pos: TextPosition) -> TextPosition:
        """Clamp a position to a line, align it to a grapheme and fix its affinity."""
        start_of_line = False
        end_of_line = False
        offset = pos.offset
        if offset < line.text_range.start:
            offset = line.text_range.start
            start_of_line = True
        if offset > line.last_grapheme_offset:
            offset = line.last_grapheme_offset
            end_of_line = True

        offset = self.align_grapheme_offset(offset)

        affinity = pos.affinity
        if affinity == Affinity.NONE:
            affinity = Affinity.TRAILING
        if affinity == Affinity.EOL and offset != line.last_grapheme_offset:
            affinity = Affinity.LEADING
        if affinity == Affinity.SOL and offset != line.text_range.start:
            affinity = Affinity.TRAILING
        if start_of_line and offset == line.text_range.start:
            affinity = Affinity.SOL
        if end_of_line and offset == line.last_grapheme_offset:
            affinity = Affinity.EOL
        return TextPosition(offset, affinity)

    def line_index(self, pos: TextPosition) -> int:
        """Index of the line that holds ``pos``; out of range offsets snap to the ends."""
        for index, line in enumerate(self.lines):
            if line.text_range.start <= pos.offset < line.text_range.end:
                return index
        if pos.offset < self.lines[0].text_range.start:
            return 0
        if pos.offset >= self.lines[-1].text_range.end:
            return len(self.lines) - 1
        raise ValueError(f"no line holds text offset {pos.offset}")

    def text_offset(self, pos: TextPosition) -> int:
        """Insertion offset in the text that ``pos`` refers to."""
        if pos.affinity in (Affinity.LEADING, Affinity.EOL):
            return self.next_grapheme_offset(pos.offset)
        return _clamp(pos.offset, 0, self.text_count)

    def is_character_rtl_at(self, pos: TextPosition) -> bool:
        """Direction of the character at ``pos``, or of the layout outside the text."""
        if 0 <= pos.offset < self.text_count:
            return self.text_props[pos.offset].is_rtl
        return self.resolved_is_rtl

    def line_start_at(self, pos: TextPosition) -> TextPosition:
        """Position at the start of the line holding ``pos``."""
        line = self.lines[self.line_index(pos)]
        return TextPosition(line.text_range.start, Affinity.SOL)

    def line_end_at(self, pos: TextPosition) -> TextPosition:
        """Position at the end of the line holding ``pos``."""
        line = self.lines[self.line_index(pos)]
        return self._prune_control_eol(line, TextPosition(line.last_grapheme_offset, Affinity.EOL))

    def word_start_at(self, pos: TextPosition) -> TextPosition:
        """Position at the start of the word under ``pos``."""
        line = self.lines[self.line_index(pos)]
        offset = self._sanitize_offset(line, pos).offset
        while offset > 0:
            if self.text_props[offset - 1].is_word_break:
                offset = self.align_grapheme_offset(offset)
                break
            offset -= 1
        return TextPosition(max(offset, 0), Affinity.TRAILING)

    def word_end_at(self, pos: TextPosition) -> TextPosition:
        """Position at the end of the word under ``pos``."""
        line = self.lines[self.line_index(pos)]
        offset = self._sanitize_offset(line, pos).offset
        while offset < self.text_count:
            if self.text_props[offset].is_word_break:
                offset = self.align_grapheme_offset(offset)
                break
            offset += 1
        if offset >= self.text_count:
            offset = self.align_grapheme_offset(self.text_count - 1)
        return TextPosition(offset, Affinity.LEADING)