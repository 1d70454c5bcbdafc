"""
Ports (interfaces) for the study domain.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace

from .models import StudySnapshot

Color = tuple[int, int, int, int]


@dataclass(frozen=True)
class FontSpec:
    """Font family and style at a given pixel size."""

    family: str
    bold: bool = False
    italic: bool = False
    pixel_size: int = 12

    def sized(self, pixel_size: int) -> "FontSpec":
        return replace(self, pixel_size=pixel_size)


@dataclass(frozen=True)
class GlyphMetrics:
    advance_width: int
    line_height: int
    descent: int


class Canvas(ABC):
    """
    Port for the paint surface the wallpaper is drawn on.

    Implementations:
        - PillowCanvas: Draws onto a Pillow image.
    """

    @abstractmethod
    def measure(self, glyph: str, font: FontSpec) -> GlyphMetrics:
        """
        Measure a glyph rendered with the given font.

        Returns:
            Advance width, line height and descent, in pixels.
        """
        pass

    @abstractmethod
    def fill_rounded_rect(
        self, box: tuple[int, int, int, int], radius: int, color: Color
    ) -> None:
        """
        Fill a rounded rectangle.

        Args:
            box: (left, top, width, height) in pixels.
            radius: Corner radius in pixels.
            color: RGBA fill color.
        """
        pass

    @abstractmethod
    def draw_glyph(
        self, position: tuple[int, int], glyph: str, color: Color, font: FontSpec
    ) -> None:
        """
        Draw a glyph with its left baseline at the given position.
        """
        pass


class StudySnapshotSource(ABC):
    """
    Port for obtaining the latest study progress.

    Implementations:
        - JsonSnapshotSource: Decodes an already-fetched JSON document.
    """

    @abstractmethod
    async def get_snapshot(self) -> StudySnapshot:
        """
        Fetch the user's level and items.

        Raises:
            SnapshotError: If the snapshot cannot be obtained or decoded.
        """
        pass


class SnapshotError(Exception):
    """Raised when a study snapshot cannot be obtained or decoded."""
