"""
Style resolution: mastery state -> (foreground, background) colors.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from PIL import ImageColor

from kanjiwall.domain.constants import DEFAULT_COLORS
from kanjiwall.domain.study.models import MasteryState
from kanjiwall.domain.study.ports import Color


@dataclass(frozen=True)
class StylePair:
    foreground: Color
    background: Color


def parse_color(value: str) -> Color:
    """
    Parse a color string (#RGB, #RRGGBB, #RRGGBBAA, or a color name) into RGBA.

    Raises:
        ValueError: If Pillow does not recognise the color.
    """
    rgb = ImageColor.getrgb(value)
    if len(rgb) == 3:
        return (*rgb, 255)
    return rgb


@dataclass(frozen=True)
class StyleTable:
    """
    Immutable mapping from every mastery state to its colors.

    States missing from the table, and unknown or empty states, resolve to the
    UNSEEN pair.
    """

    styles: Mapping[MasteryState, StylePair] = field(default_factory=dict)

    def __post_init__(self):
        if MasteryState.UNSEEN not in self.styles:
            raise ValueError("A style table needs an entry for the 'unseen' state")
        object.__setattr__(self, "styles", MappingProxyType(dict(self.styles)))

    def resolve(self, state: MasteryState | str | None) -> StylePair:
        if not isinstance(state, MasteryState):
            state = MasteryState.from_label(state)
        return self.styles.get(state, self.styles[MasteryState.UNSEEN])

    @classmethod
    def from_hex(cls, colors: Mapping[str, tuple[str, str] | list[str]]) -> "StyleTable":
        """
        Build a table from state-name -> [foreground, background] color strings.

        Missing states fall back to the defaults.
        """
        merged = {**DEFAULT_COLORS, **colors}
        styles = {}
        for name, pair in merged.items():
            state = MasteryState.from_label(name)
            if state == MasteryState.UNSEEN and name != MasteryState.UNSEEN.value:
                raise ValueError(f"Unknown mastery state in color table: {name!r}")
            fg, bg = pair
            styles[state] = StylePair(foreground=parse_color(fg), background=parse_color(bg))
        return cls(styles)

    @classmethod
    def default(cls) -> "StyleTable":
        return cls.from_hex({})
