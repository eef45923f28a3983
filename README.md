# skribidi

A pure-Python library for working with laid-out bidirectional text. It takes
text that has already been shaped and segmented, breaks it into lines, places
the glyphs, and answers the questions a text editor asks: where is the next
grapheme, which line holds this offset, where does the caret go for a mouse
click, and which rectangles cover a selection. A few raster helpers turn
coverage masks into signed distance fields and compute gradient and
glyph/icon geometry.

It has no dependencies outside the standard library.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## What you supply

`skribidi.layout.Layout` is built from:

- `params` – a `LayoutParams` (line break width, origin, alignment, base
  direction, whether hard line breaks are ignored). A `line_break_width`
  below 0.001 means lines are never wrapped.
- `text` – a `str` or a sequence of codepoints.
- `text_props` – one `TextProperty` per codepoint: grapheme, word and line
  break flags, `is_rtl`, `is_whitespace`, `is_control`, `script`. A
  `ValueError` is raised if the count does not match the text.
- `glyphs` – shaped `Glyph` records, each with its `text_range`,
  `advance_x`, `visual_idx`, `font_idx` and `span_idx`.
- `attribute_spans` – `AttribsSpan`s indexed by `Glyph.span_idx`.
- `fonts` – `Font`s indexed by `Glyph.font_idx`; their `FontMetrics`
  (em units, ascender negative) give each line its height.

The layout sorts glyphs into logical order for breaking, restores visual
order within each line, prunes trailing white space from line widths, and
aligns lines by `params.align`. The overall direction comes from
`params.base_direction`, or, when that is `AUTO`, from the first codepoint
that is neither white space nor a control character.

## Modules

- `skribidi.model` – plain data types: `Range` (with `overlaps`), `Vec2`,
  `Rect2`, the `Direction`, `Align`, `Affinity` and `MovementType` enums,
  `TextProperty`, `Glyph`, `LayoutLine`, `TextPosition`, `TextSelection`,
  `VisualCaret`, `FontFeature`, `TextAttribs`, `AttribsSpan`,
  `LayoutParams`, `FontMetrics`, `CaretMetrics` and `Font`.
  `attribs_equal()` tells whether two attribute sets style text identically.
- `skribidi.spans` – `append_attribs_span` (merges with the previous span
  when the attributes are equal), `create_shaping_spans` (merges spans into
  `ShapingSpan`s that differ in something affecting shaping), the run
  generators `script_runs` and `style_runs`, `allows_letter_spacing`
  (false for cursive scripts such as Arabic or Devanagari), and
  `apply_spacing`, which adds letter and word spacing to glyphs in place.
- `skribidi.layout` – `Layout`, with its `lines`, `glyphs` and `bounds`, and
  the queries `next_grapheme_offset`, `prev_grapheme_offset`,
  `align_grapheme_offset`, `line_index`, `text_offset`,
  `is_character_rtl_at`, `line_start_at`, `line_end_at`, `word_start_at`
  and `word_end_at`.
- `skribidi.caret` – `CaretIterator` yields a `CaretStep` (x, advance, left
  and right `CaretResult`) for each caret stop of a line in visual order;
  `hit_test`, `hit_test_at_line`, `visual_caret_at`, `visual_caret_at_line`,
  and the selection helpers `selection_ordered_start`,
  `selection_ordered_end`, `selection_range`, `selection_count` and
  `selection_rects`.
- `skribidi.sdf` – `edge_distance`, `mask_to_sdf` (a row-major 8-bit mask
  in, a `bytearray` of distance values out) and `unpremultiply_and_dilate`
  (a list of RGBA tuples in and out). Both need an image of at least 2×2
  pixels. `RendererConfig` holds the defaults: on-edge value 128, pixel
  distance scale 32.
- `skribidi.paint` – `Color` (with `premultiplied` and
  `with_alpha_scaled`), `ColorStop`, `Gradient`, `PathCommand`,
  `IconShape` and `Icon`; `prepare_color_stops` (sorts, normalises to 0..1,
  premultiplies, at most 64 stops), `linear_gradient_points`,
  `radial_gradient_points`, `glyph_dimensions`,
  `proportional_icon_scale` and `icon_dimensions`.

## Example

```python
from skribidi.caret import hit_test, selection_rects
from skribidi.layout import Layout
from skribidi.model import (
    Affinity, AttribsSpan, Font, FontMetrics, Glyph, LayoutParams,
    MovementType, Range, TextAttribs, TextPosition, TextProperty,
    TextSelection,
)

text = "hi there"
props = [TextProperty(is_grapheme_break=True, script="Latn") for _ in text]
props[2].is_whitespace = True
props[2].is_allow_line_break = True  # a line may break after the space

glyphs = [
    Glyph(gid=i + 1, advance_x=10.0, visual_idx=i, text_range=Range(i, i + 1))
    for i in range(len(text))
]
spans = [AttribsSpan(Range(0, len(text)), TextAttribs(font_size=16.0))]
fonts = [Font(name="Example", metrics=FontMetrics(ascender=-0.8, descender=0.2))]

layout = Layout(LayoutParams(line_break_width=50.0), text, props, glyphs, spans, fonts)
print(len(layout.lines))  # 2: "hi " and "there"

pos = hit_test(layout, MovementType.CARET, 25.0, 5.0)
selection = TextSelection(TextPosition(0, Affinity.TRAILING), pos)
for rect in selection_rects(layout, selection, 0.0):
    print(rect.x, rect.y, rect.width, rect.height)
```

## What it does not do

- No text shaping, bidi resolution or Unicode segmentation: glyphs and
  per-codepoint properties must come from elsewhere.
- No font file loading; a `Font` is only the metrics the layout needs.
- No rasterizer or canvas: nothing draws paths, glyph outlines or icons to
  pixels. `skribidi.sdf` and `skribidi.paint` only post-process masks and
  compute geometry.
- No caching of layouts or rendered glyphs, no text input or editing
  component, and no command-line program.