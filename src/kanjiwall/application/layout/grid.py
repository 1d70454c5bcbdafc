"""
Glyph-grid layout engine.

Finds the largest pixel size at which the active glyphs, laid out in the
canonical universe order, fit a target rectangle, then paints them as
colored tiles.

The size search is a linear forward scan rather than a binary search: cell
metrics are not reliably monotonic in pixel size at small sizes (font
hinting), so each size is checked and the scan stops at the first failure.
"""

import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from kanjiwall.domain.constants import KANJI_UNIVERSE, MINOR_GAP
from kanjiwall.domain.study.models import MasteryState
from kanjiwall.domain.study.ports import Canvas, FontSpec, GlyphMetrics

from .styles import StyleTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    left: int
    top: int
    width: int
    height: int

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Rectangle dimensions must not be negative: {self}")

    def inset(self, margin: int) -> "Rect":
        """Shrink by `margin` on every side, never below zero size."""
        return Rect(
            left=self.left + margin,
            top=self.top + margin,
            width=max(0, self.width - 2 * margin),
            height=max(0, self.height - 2 * margin),
        )


@dataclass(frozen=True)
class LayoutResult:
    """
    Chosen font size and grid geometry.

    Attributes:
        font_pixel_size: Largest fitting pixel size (0 if nothing fits).
        cell_width / cell_height: Tile size at that font size.
        columns / rows: Grid dimensions.
        descent: Font descent at that size.
        x_start / y_start: Top-left corner of the centered block of tiles.
        glyph_count: Number of active glyphs laid out.
    """

    font_pixel_size: int = 0
    cell_width: int = 0
    cell_height: int = 0
    columns: int = 0
    rows: int = 0
    descent: int = 0
    x_start: int = 0
    y_start: int = 0
    glyph_count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.rows == 0

    @property
    def corner_radius(self) -> int:
        return math.ceil(0.75 * (max(self.cell_width, self.cell_height) >> 3))


@dataclass(frozen=True)
class _Trial:
    metrics: GlyphMetrics
    columns: int
    rows: int


class GlyphGridLayout:
    """
    Lays out and paints active glyphs onto a canvas.

    The glyph universe fixes the paint order: two runs with the same active set
    produce the same paint calls in the same order.
    """

    def __init__(
        self,
        canvas: Canvas,
        glyph_universe: Iterable[str] = KANJI_UNIVERSE,
        minor_gap: int = MINOR_GAP,
        margin: int = 0,
    ):
        """
        Args:
            canvas: Paint surface, also used for font metrics.
            glyph_universe: Candidate glyphs in canonical order (duplicates ignored).
            minor_gap: Pixels between adjacent tiles.
            margin: Pixels trimmed from every side of the target rectangle.
        """
        if minor_gap < 0 or margin < 0:
            raise ValueError("Gap and margin must not be negative")
        self._canvas = canvas
        self._universe = tuple(dict.fromkeys(glyph_universe))
        self._gap = minor_gap
        self._margin = margin

    @property
    def universe(self) -> tuple[str, ...]:
        return self._universe

    def active_glyphs(self, active_states: Mapping[str, object]) -> list[str]:
        """Active glyphs in universe order. Glyphs outside the universe are ignored."""
        return [glyph for glyph in self._universe if glyph in active_states]

    def _trial(self, count: int, area: Rect, font: FontSpec) -> _Trial | None:
        metrics = self._canvas.measure(self._universe[0], font)
        step = metrics.advance_width + self._gap
        columns = area.width // step if step > 0 else 0
        if columns <= 0:
            return None
        rows = math.ceil(count / columns)
        height = rows * metrics.line_height + (rows - 1) * self._gap + metrics.descent
        if height > area.height:
            return None
        return _Trial(metrics=metrics, columns=columns, rows=rows)

    def find_font_size(self, count: int, area: Rect, font: FontSpec) -> int:
        """
        Largest pixel size at which `count` glyphs fit `area`, or 0 if none does.

        Sizes are bounded by the smaller side of the area.
        """
        if count == 0 or not self._universe:
            return 0
        accepted = 0
        for size in range(1, min(area.width, area.height) + 1):
            if self._trial(count, area, font.sized(size)) is None:
                break
            accepted = size
        return accepted

    def compute_layout(
        self, active_states: Mapping[str, object], rect: Rect, font: FontSpec
    ) -> LayoutResult:
        """
        Compute the grid geometry for the active glyphs within `rect`.

        Returns an empty layout when there is nothing to paint or nothing fits.
        """
        count = len(self.active_glyphs(active_states))
        area = rect.inset(self._margin)
        size = self.find_font_size(count, area, font)
        if size == 0:
            logger.debug(f"Nothing to lay out ({count} active glyphs, area {area})")
            return LayoutResult(glyph_count=count)

        trial = self._trial(count, area, font.sized(size))
        cell_width = trial.metrics.advance_width
        cell_height = trial.metrics.line_height
        block_width = trial.columns * cell_width + (trial.columns - 1) * self._gap
        block_height = trial.rows * cell_height + (trial.rows - 1) * self._gap

        layout = LayoutResult(
            font_pixel_size=size,
            cell_width=cell_width,
            cell_height=cell_height,
            columns=trial.columns,
            rows=trial.rows,
            descent=trial.metrics.descent,
            x_start=area.left + ((area.width - block_width) >> 1),
            y_start=area.top + ((area.height - block_height) >> 1),
            glyph_count=count,
        )
        logger.debug(f"Layout: {layout}")
        return layout

    def iter_placements(
        self, layout: LayoutResult, active_states: Mapping[str, object]
    ) -> Iterator[tuple[str, tuple[int, int]]]:
        """
        Yield (glyph, cell top-left) for each active glyph, in universe order.

        Columns advance left to right and rows top to bottom, wrapping after
        `layout.columns` glyphs.
        """
        if layout.is_empty:
            return
        step_x = layout.cell_width + self._gap
        step_y = layout.cell_height + self._gap
        for index, glyph in enumerate(self.active_glyphs(active_states)):
            row, column = divmod(index, layout.columns)
            yield glyph, (layout.x_start + column * step_x, layout.y_start + row * step_y)

    def paint(
        self,
        active_states: Mapping[str, MasteryState | str | None],
        rect: Rect,
        font: FontSpec,
        styles: StyleTable,
    ) -> LayoutResult:
        """
        Lay out the active glyphs and paint them onto the canvas.

        Each glyph gets a rounded background tile and is drawn on its baseline,
        both colored by its mastery state. An empty layout paints nothing.
        """
        layout = self.compute_layout(active_states, rect, font)
        if layout.is_empty:
            return layout

        sized = font.sized(layout.font_pixel_size)
        radius = layout.corner_radius
        baseline = layout.cell_height - layout.descent
        for glyph, (x, y) in self.iter_placements(layout, active_states):
            style = styles.resolve(active_states[glyph])
            self._canvas.fill_rounded_rect(
                (x, y, layout.cell_width, layout.cell_height), radius, style.background
            )
            self._canvas.draw_glyph((x, y + baseline), glyph, style.foreground, sized)
        return layout
