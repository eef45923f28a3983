"""Bidirectional text layout model, caret navigation, selection geometry and raster helpers."""

__version__ = "0.1.0"

__all__ = ["caret", "layout", "model", "paint", "sdf", "spans"]