"""
Refresh Service — Application layer orchestrator.

Coordinates fetching a study snapshot, projecting reviews, estimating guru
times and deciding whether the wallpaper needs repainting.
"""

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from kanjiwall.application.layout import GlyphGridLayout, LayoutResult, Rect, StyleTable
from kanjiwall.application.reviews import (
    GuruTimeDistribution,
    GuruTimeEstimator,
    ReviewProjection,
    SrsDistribution,
    project_reviews,
    srs_distribution,
)
from kanjiwall.domain.constants import (
    DEFAULT_WINDOW_HOURS,
    FINISH_LEVEL_PERCENTILE,
    KANJI_UNIVERSE,
    MINOR_GAP,
)
from kanjiwall.domain.study.models import ItemKind, MasteryState, StudyItem, StudySnapshot
from kanjiwall.domain.study.ports import Canvas, FontSpec, StudySnapshotSource

logger = logging.getLogger(__name__)


def select_active_states(
    items: Iterable[StudyItem],
    level: int | None = None,
    kind: ItemKind = ItemKind.KANJI,
) -> dict[str, MasteryState]:
    """
    Map each glyph to paint onto its mastery state.

    Args:
        items: Snapshot items.
        level: Only keep items of this level; None keeps all levels.
        kind: Item class shown on the wallpaper.
    """
    return {
        item.glyph: item.state
        for item in items
        if item.kind == kind and (level is None or item.level == level)
    }


def wallpaper_rect(
    image_size: tuple[int, int],
    left_border: int = 0,
    top_border: int = 0,
    bottom_border: int = 0,
) -> Rect:
    """The part of the background image the glyph grid may use."""
    width, height = image_size
    return Rect(
        left=left_border,
        top=top_border,
        width=max(0, width - left_border),
        height=max(0, height - top_border - bottom_border),
    )


def paint_wallpaper(
    canvas: Canvas,
    active_states: Mapping[str, MasteryState],
    rect: Rect,
    font: FontSpec,
    styles: StyleTable,
    minor_gap: int = MINOR_GAP,
    margin: int = 0,
    glyph_universe: Iterable[str] = KANJI_UNIVERSE,
) -> LayoutResult:
    """Lay out and paint the active glyphs. Paints nothing if the set is empty."""
    engine = GlyphGridLayout(canvas, glyph_universe, minor_gap=minor_gap, margin=margin)
    layout = engine.paint(active_states, rect, font, styles)
    if layout.is_empty:
        logger.info(f"No glyphs painted ({layout.glyph_count} active)")
    else:
        logger.info(
            f"Painted {layout.glyph_count} glyphs at {layout.font_pixel_size}px "
            f"in {layout.columns}x{layout.rows} grid"
        )
    return layout


@dataclass
class RefreshResult:
    """Everything derived from one snapshot."""

    snapshot: StudySnapshot
    projection: ReviewProjection
    distribution: SrsDistribution
    guru_times: GuruTimeDistribution
    active_states: dict[str, MasteryState]
    repaint_needed: bool

    @property
    def finish_level_seconds(self) -> int | None:
        return self.guru_times.at(FINISH_LEVEL_PERCENTILE)


class RefreshService:
    """
    Application service run on every refresh.

    Follows Dependency Inversion: depends on the StudySnapshotSource
    abstraction, not a concrete adapter. Keeps the previous active-glyph
    states to tell whether the wallpaper changed.
    """

    def __init__(
        self,
        source: StudySnapshotSource,
        estimator: GuruTimeEstimator | None = None,
        window_hours: int = DEFAULT_WINDOW_HOURS,
        current_level_only: bool = True,
    ):
        """
        Args:
            source: Where snapshots come from.
            estimator: Optional custom estimator; uses default constants if not provided.
            window_hours: Forward window for the review histogram.
            current_level_only: Paint only the current level's kanji.
        """
        self._source = source
        self._estimator = estimator or GuruTimeEstimator()
        self._window_hours = window_hours
        self._current_level_only = current_level_only
        self._previous_states: dict[str, MasteryState] | None = None

    async def refresh(self, now: int | None = None, force: bool = False) -> RefreshResult:
        """
        Fetch a snapshot and derive statistics and the wallpaper's active set.

        Args:
            now: Reference instant (epoch seconds); defaults to the current time.
            force: Report a repaint even if the active set did not change.
        """
        now = int(time.time()) if now is None else now
        snapshot = await self._source.get_snapshot()

        projection = project_reviews(
            snapshot.items, now, self._window_hours, snapshot.user_level
        )
        guru_times = self._estimator.distribution(
            snapshot.of_kind(ItemKind.KANJI), now, snapshot.user_level
        )
        level = snapshot.user_level if self._current_level_only else None
        active_states = select_active_states(snapshot.items, level)

        repaint_needed = force or active_states != self._previous_states
        self._previous_states = active_states

        logger.debug(
            f"Refreshed {len(snapshot.items)} items (level {snapshot.user_level}), "
            f"repaint needed: {repaint_needed}"
        )

        return RefreshResult(
            snapshot=snapshot,
            projection=projection,
            distribution=srs_distribution(snapshot.items),
            guru_times=guru_times,
            active_states=active_states,
            repaint_needed=repaint_needed,
        )
