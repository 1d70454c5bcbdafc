# Domain Study Package
from .models import GuruTimeConstants, ItemKind, MasteryState, StudyItem, StudySnapshot
from .ports import (
    Canvas,
    Color,
    FontSpec,
    GlyphMetrics,
    SnapshotError,
    StudySnapshotSource,
)

__all__ = [
    "ItemKind",
    "MasteryState",
    "StudyItem",
    "StudySnapshot",
    "GuruTimeConstants",
    "Canvas",
    "Color",
    "FontSpec",
    "GlyphMetrics",
    "SnapshotError",
    "StudySnapshotSource",
]
