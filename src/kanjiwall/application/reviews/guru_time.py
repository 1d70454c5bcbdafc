"""
Guru-time estimation.

Projects how long an item needs to reach the Guru stage, assuming every
review from now on is answered correctly the first time.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from kanjiwall.domain.constants import GURU_STAGE, MAX_STAGE, SECONDS_PER_HOUR
from kanjiwall.domain.study.models import GuruTimeConstants, StudyItem

logger = logging.getLogger(__name__)

DEFAULT_CONSTANTS = GuruTimeConstants()


def estimate_guru_time(
    stage: int,
    next_review_seconds: int,
    level_above_threshold: bool,
    constants: GuruTimeConstants = DEFAULT_CONSTANTS,
) -> int:
    """
    Seconds until an item at `stage` reaches Guru.

    Args:
        stage: Current SRS stage (0-5).
        next_review_seconds: Seconds from now until the item's next review.
        level_above_threshold: Whether the slow (non-accelerated) timings apply.
        constants: Stage duration table.

    Raises:
        ValueError: If the stage is outside 0-5.
    """
    if not 0 <= stage <= MAX_STAGE:
        raise ValueError(f"SRS stage must be in 0..{MAX_STAGE}, got {stage}")
    if stage >= GURU_STAGE:
        return 0

    hours = constants.hours(level_above_threshold)
    result = next_review_seconds if stage > 0 else 0
    for i in range(stage, GURU_STAGE - 1):
        result += hours[i] * SECONDS_PER_HOUR
    return result


def percentile(values: list[int], fraction: float) -> int | None:
    """
    Nearest-rank percentile of an ascending list. None if the list is empty.
    """
    if not values:
        return None
    if not 0 < fraction <= 1:
        raise ValueError(f"Percentile fraction must be in (0, 1], got {fraction}")
    rank = max(1, math.ceil(round(fraction * len(values), 9)))
    return values[rank - 1]


@dataclass
class GuruTimeDistribution:
    """Sorted guru times (seconds) for the in-progress items of a level."""

    level: int
    seconds: list[int]

    def at(self, fraction: float) -> int | None:
        return percentile(self.seconds, fraction)

    @property
    def shortest(self) -> int | None:
        return self.seconds[0] if self.seconds else None

    @property
    def longest(self) -> int | None:
        return self.seconds[-1] if self.seconds else None


class GuruTimeEstimator:
    """
    Runs estimate_guru_time over the in-progress items of a level.

    Stateless apart from the injected constants table.
    """

    def __init__(self, constants: GuruTimeConstants | None = None):
        self._constants = constants or DEFAULT_CONSTANTS

    def estimate(self, item: StudyItem, now: int, user_level: int) -> int:
        next_review = max(0, item.available_at - now) if item.available_at else 0
        return estimate_guru_time(
            item.srs_stage,
            next_review,
            self._constants.is_slow_level(user_level),
            self._constants,
        )

    def distribution(
        self, items: Iterable[StudyItem], now: int, user_level: int
    ) -> GuruTimeDistribution:
        """
        Estimate every item of `user_level` still below Guru, sorted ascending.
        """
        seconds = sorted(
            self.estimate(item, now, user_level)
            for item in items
            if item.level == user_level and item.srs_stage < GURU_STAGE
        )
        logger.debug(f"Estimated guru time for {len(seconds)} items at level {user_level}")
        return GuruTimeDistribution(level=user_level, seconds=seconds)
