"""Caret iteration, hit testing, visual carets and selection geometry of a layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .layout import Layout
from .model import (
    Affinity,
    AttribsSpan,
    Font,
    MovementType,
    Range,
    Rect2,
    TextPosition,
    TextSelection,
    VisualCaret,
)

_MIN_RECT_WIDTH = 0.01


@dataclass(frozen=True)
class CaretResult:
    """A caret location on one side of a caret stop."""

    text_position: TextPosition = field(default_factory=TextPosition)
    is_rtl: bool = False
    glyph_idx: int = 0


@dataclass(frozen=True)
class CaretStep:
    """One caret stop along a line, with the carets on its left and right side."""

    x: float
    advance: float
    left: CaretResult
    right: CaretResult


class CaretIterator:
    """Walks the caret stops of a line from left to right in visual order."""

    def __init__(self, layout: Layout, line_idx: int) -> None:
        if not 0 <= line_idx < len(layout.lines):
            raise IndexError(f"line index {line_idx} out of range")
        line = layout.lines[line_idx]
        self.layout = layout
        self.line_is_rtl = line.is_rtl
        self.line_first_grapheme_offset = line.text_range.start
        self.line_last_grapheme_offset = line.last_grapheme_offset
        self.end_of_line = False
        self.x = line.bounds.x
        self.advance = 0.0

        # The first caret is at the visual start of the line.
        if self.line_is_rtl:
            start = TextPosition(self.line_last_grapheme_offset, Affinity.EOL)
        else:
            start = TextPosition(self.line_first_grapheme_offset, Affinity.SOL)
        self.pending_left = CaretResult(start, self.line_is_rtl, line.glyph_range.start)

        self.glyph_pos = line.glyph_range.start
        self.glyph_end = line.glyph_range.end
        self.glyph_is_rtl = False
        self.grapheme_pos = 0
        self.grapheme_end = 0
        self.end_of_glyph = True

    def __iter__(self) -> "CaretIterator":
        return self

    def _start_glyph_run(self) -> None:
        layout = self.layout
        glyphs = layout.glyphs
        text_range = glyphs[self.glyph_pos].text_range
        self.glyph_is_rtl = glyphs[self.glyph_pos].is_rtl

        run_width = 0.0
        while (
            self.glyph_pos < self.glyph_end
            and glyphs[self.glyph_pos].text_range.start == text_range.start
        ):
            run_width += glyphs[self.glyph_pos].advance_x
            self.glyph_pos += 1

        grapheme_count = sum(
            1
            for props in layout.text_props[text_range.start:text_range.end]
            if props.is_grapheme_break
        )
        self.advance = run_width / grapheme_count if grapheme_count > 0 else 0.0

        if self.glyph_is_rtl:
            self.grapheme_pos, self.grapheme_end = text_range.end, text_range.start
        else:
            self.grapheme_pos, self.grapheme_end = text_range.start, text_range.end

    def __next__(self) -> CaretStep:
        if self.end_of_line:
            raise StopIteration

        props = self.layout.text_props
        self.x += self.advance
        left = self.pending_left

        if self.end_of_glyph:
            if self.glyph_pos == self.glyph_end:
                self.end_of_line = True
                self.advance = 0.0
            else:
                self._start_glyph_run()

        glyph_idx = min(self.glyph_pos, self.glyph_end - 1)
        if self.end_of_line:
            if self.line_is_rtl:
                end = TextPosition(self.line_first_grapheme_offset, Affinity.SOL)
            else:
                end = TextPosition(self.line_last_grapheme_offset, Affinity.EOL)
            right = CaretResult(end, self.line_is_rtl, glyph_idx)
        else:
            if self.glyph_is_rtl:
                self.grapheme_pos -= 1
                while (
                    self.grapheme_pos > self.grapheme_end
                    and not props[self.grapheme_pos - 1].is_grapheme_break
                ):
                    self.grapheme_pos -= 1
                offset = self.grapheme_pos
                self.end_of_glyph = self.grapheme_pos <= self.grapheme_end
            else:
                offset = self.grapheme_pos
                while (
                    self.grapheme_pos < self.grapheme_end - 1
                    and not props[self.grapheme_pos].is_grapheme_break
                ):
                    self.grapheme_pos += 1
                self.grapheme_pos += 1
                self.end_of_glyph = self.grapheme_pos >= self.grapheme_end

            glyph_idx = min(self.glyph_pos, self.glyph_end - 1)
            right_affinity = Affinity.LEADING if self.glyph_is_rtl else Affinity.TRAILING
            left_affinity = Affinity.TRAILING if self.glyph_is_rtl else Affinity.LEADING
            right = CaretResult(TextPosition(offset, right_affinity), self.glyph_is_rtl, glyph_idx)
            self.pending_left = CaretResult(
                TextPosition(offset, left_affinity), self.glyph_is_rtl, glyph_idx
            )

        return CaretStep(self.x, self.advance, left, right)


def hit_test_at_line(
    layout: Layout, movement: MovementType, line_idx: int, hit_x: float
) -> TextPosition:
    """Text position nearest to ``hit_x`` on the given line."""
    line = layout.lines[line_idx]
    result = TextPosition()

    if hit_x < line.bounds.x:
        if line.is_rtl:
            result = TextPosition(line.last_grapheme_offset, Affinity.EOL)
        else:
            result = TextPosition(line.text_range.start, Affinity.SOL)
    elif hit_x >= line.bounds.x + line.bounds.width:
        if line.is_rtl:
            result = TextPosition(line.text_range.start, Affinity.SOL)
        else:
            result = TextPosition(line.last_grapheme_offset, Affinity.EOL)
    else:
        for step in CaretIterator(layout, line_idx):
            if hit_x < step.x:
                result = step.left.text_position
                break
            if hit_x < step.x + step.advance * 0.5:
                result = step.right.text_position
                break

    if movement == MovementType.CARET:
        # A caret may not sit after a line-ending control character; a selection may.
        result = layout._prune_control_eol(line, result)
    return result


def hit_test(layout: Layout, movement: MovementType, hit_x: float, hit_y: float) -> TextPosition:
    """Text position nearest to the point (``hit_x``, ``hit_y``)."""
    if not layout.lines:
        return TextPosition()
    line_idx = len(layout.lines) - 1
    for index, line in enumerate(layout.lines):
        bottom_y = line.bounds.y - line.ascender + line.descender
        if hit_y < bottom_y:
            line_idx = index
            break
    return hit_test_at_line(layout, movement, line_idx, hit_x)


def visual_caret_at_line(layout: Layout, line_idx: int, pos: TextPosition) -> VisualCaret:
    """Caret geometry for ``pos`` placed on the given line."""
    if not layout.lines:
        raise ValueError("layout has no lines")
    line = layout.lines[line_idx]
    pos = layout._sanitize_offset(line, pos)

    caret = VisualCaret(
        x=line.bounds.x,
        y=line.bounds.y,
        width=0.0,
        height=-line.ascender + line.descender,
        is_rtl=line.is_rtl,
    )

    font: Optional[Font] = None
    span: Optional[AttribsSpan] = None
    iterator = CaretIterator(layout, line_idx)
    for step in iterator:
        for side in (step.left, step.right):
            if pos == side.text_position:
                glyph = layout.glyphs[step.left.glyph_idx]
                span = layout.attribute_spans[glyph.span_idx]
                font = layout.fonts[glyph.font_idx]
                caret.is_rtl = side.is_rtl
                caret.x = iterator.x
                caret.y = glyph.offset_y
                break
        if font is not None:
            break

    if font is not None and span is not None:
        metrics = font.metrics
        slope = font.caret_metrics.slope
        font_size = span.attribs.font_size
        caret.x -= slope * metrics.descender * font_size
        caret.y += metrics.ascender * font_size
        caret.height = (-metrics.ascender + metrics.descender) * font_size
        caret.width = caret.height * slope
    return caret


def visual_caret_at(layout: Layout, pos: TextPosition) -> VisualCaret:
    """Caret geometry for ``pos`` on the line that holds it."""
    if not layout.lines:
        return VisualCaret()
    return visual_caret_at_line(layout, layout.line_index(pos), pos)


def selection_ordered_start(layout: Layout, selection: TextSelection) -> TextPosition:
    """The selection end that comes first in the line's reading direction."""
    line_is_rtl = layout.lines[layout.line_index(selection.end_pos)].is_rtl
    start = layout.text_offset(selection.start_pos)
    end = layout.text_offset(selection.end_pos)
    if line_is_rtl:
        return selection.start_pos if start > end else selection.end_pos
    return selection.start_pos if start <= end else selection.end_pos


def selection_ordered_end(layout: Layout, selection: TextSelection) -> TextPosition:
    """The selection end that comes last in the line's reading direction."""
    line_is_rtl = layout.lines[layout.line_index(selection.end_pos)].is_rtl
    start = layout.text_offset(selection.start_pos)
    end = layout.text_offset(selection.end_pos)
    if line_is_rtl:
        return selection.start_pos if start <= end else selection.end_pos
    return selection.start_pos if start > end else selection.end_pos


def selection_range(layout: Layout, selection: TextSelection) -> Range:
    """Range of text offsets covered by the selection."""
    start = layout.text_offset(selection.start_pos)
    end = layout.text_offset(selection.end_pos)
    return Range(min(start, end), max(start, end))


def selection_count(layout: Layout, selection: TextSelection) -> int:
    """Number of codepoints covered by the selection."""
    selected = selection_range(layout, selection)
    return selected.end - selected.start


def selection_rects(
    layout: Layout, selection: TextSelection, offset_y: float = 0.0
) -> List[Rect2]:
    """Rectangles covering the selected text, merged where visually adjacent."""
    sel = selection_range(layout, selection)
    glyphs = layout.glyphs
    props = layout.text_props
    rects: List[Rect2] = []

    for line in layout.lines:
        if not line.text_range.overlaps(sel):
            continue
        height = -line.ascender + line.descender
        y = offset_y + line.bounds.y

        def emit(start_x: float, end_x: float) -> None:
            if abs(end_x - start_x) > _MIN_RECT_WIDTH:
                rects.append(Rect2(start_x, y, end_x - start_x, height))

        rect_start_x = line.bounds.x
        rect_end_x = line.bounds.x
        x = line.bounds.x
        prev_is_right_adjacent = False

        glyph_idx = line.glyph_range.start
        while glyph_idx < line.glyph_range.end:
            is_rtl = glyphs[glyph_idx].is_rtl
            run_width = glyphs[glyph_idx].advance_x
            run_start = glyphs[glyph_idx].text_range.start
            run_end = glyphs[glyph_idx].text_range.end
            while glyph_idx + 1 < len(glyphs) and glyphs[glyph_idx + 1].text_range.start == run_start:
                glyph_idx += 1
                run_width += glyphs[glyph_idx].advance_x
                run_end = glyphs[glyph_idx].text_range.end

            sel_start = max(run_start, sel.start)
            sel_end = min(run_end, sel.end)

            if sel_start < sel_end:
                grapheme_start_idx = 0
                grapheme_end_idx = 0
                grapheme_count = 0
                for cp in range(run_start, run_end):
                    if cp == sel_start:
                        grapheme_start_idx = grapheme_count
                    if cp == sel_end:
                        grapheme_end_idx = grapheme_count
                    if props[cp].is_grapheme_break:
                        grapheme_count += 1
                if sel_end == run_end:
                    grapheme_end_idx = grapheme_count

                divisor = max(grapheme_count, 1)
                start_u = grapheme_start_idx / divisor
                end_u = grapheme_end_idx / divisor
                if is_rtl:
                    start_u, end_u = 1.0 - end_u, 1.0 - start_u
                    is_left_adjacent = sel_end == run_end
                    is_right_adjacent = sel_start == run_start
                else:
                    is_left_adjacent = sel_start == run_start
                    is_right_adjacent = sel_end == run_end

                if prev_is_right_adjacent and is_left_adjacent:
                    rect_end_x = x + run_width * end_u
                else:
                    emit(rect_start_x, rect_end_x)
                    rect_start_x = x + run_width * start_u
                    rect_end_x = x + run_width * end_u
                prev_is_right_adjacent = is_right_adjacent
            else:
                prev_is_right_adjacent = False

            x += run_width
            glyph_idx += 1

        emit(rect_start_x, rect_end_x)

    return rects