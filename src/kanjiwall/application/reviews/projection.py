"""
Review projection: when will outstanding reviews become due?

Aggregates per-item availability timestamps into timestamp-keyed histograms
and derives the "due now / next hour / next day" counters shown to the user.
This is a pure computation module with no I/O.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from kanjiwall.domain.constants import SECONDS_PER_DAY, SECONDS_PER_HOUR
from kanjiwall.domain.study.models import ItemKind, StudyItem

logger = logging.getLogger(__name__)


@dataclass
class ReviewHistogram:
    """
    Review counts keyed by exact availability timestamp.

    Tracked twice: for items of the user's current level only, and for all levels.
    """

    current_level: dict[int, int] = field(default_factory=dict)
    all_levels: dict[int, int] = field(default_factory=dict)

    def add(self, timestamp: int, is_current_level: bool) -> None:
        self.all_levels[timestamp] = self.all_levels.get(timestamp, 0) + 1
        if is_current_level:
            self.current_level[timestamp] = self.current_level.get(timestamp, 0) + 1

    def timestamps(self) -> list[int]:
        return sorted(self.all_levels)


@dataclass(frozen=True)
class DueCounts:
    current_level: int = 0
    all_levels: int = 0

    def __add__(self, other: "DueCounts") -> "DueCounts":
        return DueCounts(
            current_level=self.current_level + other.current_level,
            all_levels=self.all_levels + other.all_levels,
        )


@dataclass
class DueSummary:
    """Due counts per item class, plus the combined total."""

    by_kind: dict[ItemKind, DueCounts] = field(default_factory=dict)

    def __getitem__(self, kind: ItemKind) -> DueCounts:
        return self.by_kind.get(kind, DueCounts())

    @property
    def total(self) -> DueCounts:
        result = DueCounts()
        for counts in self.by_kind.values():
            result = result + counts
        return result


@dataclass
class ReviewProjection:
    """Result of projecting reviews over a forward window."""

    now: int
    window_hours: int
    histograms: dict[ItemKind, ReviewHistogram]
    windows: dict[ItemKind, ReviewHistogram]
    due_now: DueSummary
    due_next_hour: DueSummary
    due_next_day: DueSummary
    next_review_at: int | None = None
    next_review_in: int | None = None  # seconds from now

    @property
    def has_reviews(self) -> bool:
        return any(h.all_levels for h in self.histograms.values())


def build_histograms(
    items: Iterable[StudyItem], current_level: int
) -> dict[ItemKind, ReviewHistogram]:
    """
    Partition items by class and count them per availability timestamp.

    Items without an availability timestamp are not scheduled and are skipped.
    """
    histograms = {kind: ReviewHistogram() for kind in ItemKind}
    for item in items:
        if not item.is_scheduled:
            continue
        histograms[item.kind].add(item.available_at, item.level == current_level)
    return histograms


def fold_into_window(
    histogram: ReviewHistogram, now: int, window_hours: int
) -> ReviewHistogram:
    """
    Restrict a histogram to [now, now + window_hours) for display.

    Overdue buckets (timestamp < now) are folded into a bucket at `now`, but only
    when the all-levels histogram has overdue reviews. Buckets are returned in
    ascending timestamp order.
    """
    if window_hours < 0:
        raise ValueError(f"Window must not be negative, got {window_hours}h")

    end = now + window_hours * SECONDS_PER_HOUR
    fold = any(count for ts, count in histogram.all_levels.items() if ts < now)

    def _window(buckets: dict[int, int]) -> dict[int, int]:
        windowed = {ts: count for ts, count in sorted(buckets.items()) if now <= ts < end}
        if fold:
            overdue = sum(count for ts, count in buckets.items() if ts < now)
            if overdue:
                windowed[now] = windowed.get(now, 0) + overdue
        return dict(sorted(windowed.items()))

    return ReviewHistogram(
        current_level=_window(histogram.current_level),
        all_levels=_window(histogram.all_levels),
    )


def count_between(
    histogram: ReviewHistogram, start: int | None, end: int
) -> DueCounts:
    """
    Count reviews with start < timestamp <= end. A start of None means unbounded.
    """

    def _count(buckets: dict[int, int]) -> int:
        return sum(
            count
            for ts, count in buckets.items()
            if (start is None or ts > start) and ts <= end
        )

    return DueCounts(
        current_level=_count(histogram.current_level),
        all_levels=_count(histogram.all_levels),
    )


def find_next_review(
    histograms: Iterable[ReviewHistogram], now: int
) -> tuple[int | None, int | None]:
    """
    Find the nearest strictly-future bucket.

    Returns:
        (timestamp, seconds from now), or (None, None) if nothing is scheduled later.
    """
    best: int | None = None
    for histogram in histograms:
        for ts in histogram.all_levels:
            if ts > now and (best is None or ts < best):
                best = ts
    if best is None:
        return None, None
    return best, best - now


def project_reviews(
    items: Iterable[StudyItem],
    now: int,
    window_hours: int,
    current_level: int,
) -> ReviewProjection:
    """
    Project outstanding reviews from the given snapshot.

    Args:
        items: The study items (all classes, all levels).
        now: Reference instant, epoch seconds.
        window_hours: Length of the forward display window.
        current_level: The user's curriculum level.

    Returns:
        ReviewProjection with per-class histograms, windowed histograms, due counts
        and the next review time.
    """
    if window_hours < 0:
        raise ValueError(f"Window must not be negative, got {window_hours}h")

    histograms = build_histograms(items, current_level)
    windows = {
        kind: fold_into_window(histogram, now, window_hours)
        for kind, histogram in histograms.items()
    }

    due_now = DueSummary({k: count_between(h, None, now) for k, h in histograms.items()})
    due_next_hour = DueSummary(
        {k: count_between(h, now, now + SECONDS_PER_HOUR) for k, h in histograms.items()}
    )
    due_next_day = DueSummary(
        {k: count_between(h, now, now + SECONDS_PER_DAY) for k, h in histograms.items()}
    )
    next_at, next_in = find_next_review(histograms.values(), now)

    logger.debug(f"Projected reviews: {due_now.total.all_levels} due now, next at {next_at}")

    return ReviewProjection(
        now=now,
        window_hours=window_hours,
        histograms=histograms,
        windows=windows,
        due_now=due_now,
        due_next_hour=due_next_hour,
        due_next_day=due_next_day,
        next_review_at=next_at,
        next_review_in=next_in,
    )
