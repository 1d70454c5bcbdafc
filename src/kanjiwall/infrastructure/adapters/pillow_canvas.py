"""
Pillow Canvas — Infrastructure adapter for painting onto a bitmap.

Implements Canvas by drawing tiles and glyphs onto two transparent overlays that
are alpha-composited over the background image in that order, so translucent
tiles blend with the background and translucent glyphs blend with their tile.
"""

import logging
import math
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from kanjiwall.domain.constants import FONT_SEARCH_PATHS
from kanjiwall.domain.study.ports import Canvas, Color, FontSpec, GlyphMetrics

logger = logging.getLogger(__name__)

FONT_EXTENSIONS = (".ttf", ".otf", ".ttc")


def _normalise(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch.isalnum())


def find_font_file(
    family: str,
    bold: bool = False,
    italic: bool = False,
    search_paths: list[str] | None = None,
) -> str | None:
    """
    Find a font file for a family name in the given search paths.

    `family` may also be a path to a font file. Among files whose name starts with
    the family name, the one whose bold/italic style matches best wins.
    """
    if Path(family).is_file():
        return family

    wanted = _normalise(family)
    if not wanted:
        return None

    candidates: list[Path] = []
    for search_path in FONT_SEARCH_PATHS if search_paths is None else search_paths:
        root = Path(search_path)
        if not root.is_dir():
            continue
        for ext in FONT_EXTENSIONS:
            for font_file in sorted(root.rglob(f"*{ext}")):
                if font_file.is_file() and _normalise(font_file.stem).startswith(wanted):
                    candidates.append(font_file)

    if not candidates:
        return None

    def _score(path: Path) -> tuple[int, int]:
        stem = path.stem.lower()
        is_bold = "bold" in stem
        is_italic = "italic" in stem or "oblique" in stem
        return (int(is_bold == bold) + int(is_italic == italic), -len(stem))

    return str(max(candidates, key=_score))


class PillowCanvas(Canvas):
    """
    Paints onto a copy of a Pillow image.

    Fonts are resolved once per (family, style, size) for the lifetime of the canvas.
    Unknown families fall back to Pillow's default font.
    """

    def __init__(self, image: Image.Image, search_paths: list[str] | None = None):
        self._base = image.convert("RGBA")
        self._tiles = Image.new("RGBA", self._base.size, (0, 0, 0, 0))
        self._glyphs = Image.new("RGBA", self._base.size, (0, 0, 0, 0))
        self._tile_draw = ImageDraw.Draw(self._tiles)
        self._glyph_draw = ImageDraw.Draw(self._glyphs)
        self._search_paths = search_paths
        self._font_files: dict[tuple[str, bool, bool], str | None] = {}
        self._fonts: dict[FontSpec, ImageFont.FreeTypeFont] = {}

    @classmethod
    def open(cls, path: Path, search_paths: list[str] | None = None) -> "PillowCanvas":
        with Image.open(path) as image:
            image.load()
            return cls(image, search_paths)

    @property
    def size(self) -> tuple[int, int]:
        return self._base.size

    def _font(self, font: FontSpec) -> ImageFont.FreeTypeFont:
        if font in self._fonts:
            return self._fonts[font]

        key = (font.family, font.bold, font.italic)
        if key not in self._font_files:
            path = find_font_file(font.family, font.bold, font.italic, self._search_paths)
            if path is None:
                logger.warning(f"Font '{font.family}' not found, using Pillow's default font")
            else:
                logger.debug(f"Font '{font.family}' resolved to {path}")
            self._font_files[key] = path

        path = self._font_files[key]
        if path is None:
            loaded = ImageFont.load_default(size=font.pixel_size)
        else:
            loaded = ImageFont.truetype(path, font.pixel_size)
        self._fonts[font] = loaded
        return loaded

    def measure(self, glyph: str, font: FontSpec) -> GlyphMetrics:
        loaded = self._font(font)
        ascent, descent = loaded.getmetrics()
        return GlyphMetrics(
            advance_width=max(1, math.ceil(loaded.getlength(glyph))),
            line_height=ascent + descent,
            descent=descent,
        )

    def fill_rounded_rect(
        self, box: tuple[int, int, int, int], radius: int, color: Color
    ) -> None:
        left, top, width, height = box
        self._tile_draw.rounded_rectangle(
            [(left, top), (left + width - 1, top + height - 1)],
            radius=radius,
            fill=color,
        )

    def draw_glyph(
        self, position: tuple[int, int], glyph: str, color: Color, font: FontSpec
    ) -> None:
        self._glyph_draw.text(position, glyph, fill=color, font=self._font(font), anchor="ls")

    def render(self) -> Image.Image:
        """The background with everything painted so far composited on top."""
        with_tiles = Image.alpha_composite(self._base, self._tiles)
        return Image.alpha_composite(with_tiles, self._glyphs)

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        image = self.render()
        # JPEG has no alpha channel
        if path.suffix.lower() in (".jpg", ".jpeg"):
            image = image.convert("RGB")
        image.save(path)
        logger.info(f"Wallpaper saved to {path}")
        return path
