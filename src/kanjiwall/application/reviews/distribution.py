"""SRS distribution: how many items sit in each mastery state."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from kanjiwall.domain.study.models import ItemKind, MasteryState, StudyItem


@dataclass
class SrsDistribution:
    counts: dict[MasteryState, dict[ItemKind, int]] = field(default_factory=dict)

    def count(self, state: MasteryState, kind: ItemKind) -> int:
        return self.counts.get(state, {}).get(kind, 0)

    def total(self, state: MasteryState) -> int:
        return sum(self.counts.get(state, {}).values())


def srs_distribution(items: Iterable[StudyItem]) -> SrsDistribution:
    counts = {state: {kind: 0 for kind in ItemKind} for state in MasteryState}
    for item in items:
        counts[item.state][item.kind] += 1
    return SrsDistribution(counts=counts)
