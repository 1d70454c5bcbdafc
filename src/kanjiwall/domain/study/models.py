"""
Domain models for study progress.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from enum import Enum

from kanjiwall.domain.constants import (
    FAST_GURU_HOURS,
    FAST_LEVEL_THRESHOLD,
    MAX_STAGE,
    SLOW_GURU_HOURS,
)


class ItemKind(str, Enum):
    RADICAL = "radical"
    KANJI = "kanji"
    VOCABULARY = "vocabulary"


class MasteryState(str, Enum):
    """Display state of an item, used to pick its wallpaper colors."""

    UNSEEN = "unseen"
    APPRENTICE = "apprentice"
    GURU = "guru"
    MASTER = "master"
    ENLIGHTENED = "enlightened"
    BURNED = "burned"

    @classmethod
    def from_label(cls, label: str | None) -> "MasteryState":
        """
        Map a remote SRS label to a state.

        The remote service spells "enlightened" as "enlighten". Unknown or
        empty labels map to UNSEEN.
        """
        if not label:
            return cls.UNSEEN
        label = label.strip().lower()
        if label == "enlighten":
            return cls.ENLIGHTENED
        try:
            return cls(label)
        except ValueError:
            return cls.UNSEEN


@dataclass(frozen=True)
class StudyItem:
    """
    One radical, kanji or vocabulary entry.

    Attributes:
        glyph: Display character(s) used as the layout and paint key.
        kind: Item class.
        level: Curriculum level the item belongs to (>= 1).
        srs_stage: 0 = not studied, 1-4 = apprentice, 5 = guru or beyond.
        state: Mastery state used for painting.
        available_at: Epoch seconds of the next review, None if not scheduled.
    """

    glyph: str
    kind: ItemKind
    level: int
    srs_stage: int = 0
    state: MasteryState = MasteryState.UNSEEN
    available_at: int | None = None

    def __post_init__(self):
        if self.level < 1:
            raise ValueError(f"Item level must be positive, got {self.level}")
        if not 0 <= self.srs_stage <= MAX_STAGE:
            raise ValueError(f"SRS stage must be in 0..{MAX_STAGE}, got {self.srs_stage}")

    @property
    def is_scheduled(self) -> bool:
        return bool(self.available_at)


@dataclass(frozen=True)
class GuruTimeConstants:
    """
    Hours spent in each apprentice stage before the next review.

    Columns are the durations for stages 1->2, 2->3, 3->4 and 4->5 (Guru).
    The fast row applies to the accelerated first levels.
    """

    fast: tuple[int, ...] = FAST_GURU_HOURS
    slow: tuple[int, ...] = SLOW_GURU_HOURS
    level_threshold: int = FAST_LEVEL_THRESHOLD

    def __post_init__(self):
        if len(self.fast) != 4 or len(self.slow) != 4:
            raise ValueError("Guru time tables need exactly 4 stage durations")

    def is_slow_level(self, level: int) -> bool:
        return level > self.level_threshold

    def hours(self, level_above_threshold: bool) -> tuple[int, ...]:
        return self.slow if level_above_threshold else self.fast


@dataclass
class StudySnapshot:
    """
    Everything a refresh needs: the user's level plus all of their items.
    """

    user_level: int
    items: list[StudyItem] = field(default_factory=list)
    user_name: str | None = None

    def of_kind(self, kind: ItemKind) -> list[StudyItem]:
        return [item for item in self.items if item.kind == kind]
