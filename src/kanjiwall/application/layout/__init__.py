# Application Layout Package
from .grid import GlyphGridLayout, LayoutResult, Rect
from .styles import StylePair, StyleTable, parse_color

__all__ = [
    "GlyphGridLayout",
    "LayoutResult",
    "Rect",
    "StylePair",
    "StyleTable",
    "parse_color",
]
