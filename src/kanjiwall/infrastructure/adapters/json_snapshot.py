"""
JSON Snapshot Source — Infrastructure adapter for already-fetched study data.

Implements StudySnapshotSource by decoding a JSON document shaped like the
remote service's responses: user information plus radical, kanji and
vocabulary lists, each item carrying optional user-specific SRS data.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from kanjiwall.domain.constants import MAX_STAGE
from kanjiwall.domain.study.models import ItemKind, MasteryState, StudyItem, StudySnapshot
from kanjiwall.domain.study.ports import SnapshotError, StudySnapshotSource

logger = logging.getLogger(__name__)


class _UserSpecific(BaseModel):
    srs: str | None = None
    srs_numeric: int = Field(default=0, ge=0)
    available_date: int | None = None


class _RawItem(BaseModel):
    character: str | None = None
    level: int = Field(ge=1)
    user_specific: _UserSpecific | None = None


class _RawUser(BaseModel):
    username: str | None = None
    level: int = Field(ge=1)


class _RawSnapshot(BaseModel):
    user_information: _RawUser
    radicals: list[_RawItem] = Field(default_factory=list)
    kanji: list[_RawItem] = Field(default_factory=list)
    vocabulary: list[_RawItem] = Field(default_factory=list)


def _to_item(raw: _RawItem, kind: ItemKind) -> StudyItem | None:
    if not raw.character:
        # Image-only radicals have no character to lay out.
        logger.debug(f"Skipping {kind.value} without a character at level {raw.level}")
        return None

    user = raw.user_specific
    if user is None:
        return StudyItem(glyph=raw.character, kind=kind, level=raw.level)

    return StudyItem(
        glyph=raw.character,
        kind=kind,
        level=raw.level,
        srs_stage=min(user.srs_numeric, MAX_STAGE),
        state=MasteryState.from_label(user.srs),
        available_at=user.available_date or None,
    )


def decode_snapshot(data: str | bytes | dict[str, Any]) -> StudySnapshot:
    """
    Decode a snapshot document.

    Raises:
        SnapshotError: If the document is not valid JSON or does not match the schema.
    """
    try:
        if isinstance(data, dict):
            raw = _RawSnapshot.model_validate(data)
        else:
            raw = _RawSnapshot.model_validate_json(data)
    except (ValidationError, UnicodeDecodeError) as e:
        raise SnapshotError(f"Invalid study snapshot: {e}") from e

    items: list[StudyItem] = []
    for kind, raw_items in (
        (ItemKind.RADICAL, raw.radicals),
        (ItemKind.KANJI, raw.kanji),
        (ItemKind.VOCABULARY, raw.vocabulary),
    ):
        for raw_item in raw_items:
            item = _to_item(raw_item, kind)
            if item is not None:
                items.append(item)

    return StudySnapshot(
        user_level=raw.user_information.level,
        items=items,
        user_name=raw.user_information.username,
    )


class JsonSnapshotSource(StudySnapshotSource):
    """Reads a snapshot from a JSON file on every call."""

    def __init__(self, path: Path):
        self.path = path

    async def get_snapshot(self) -> StudySnapshot:
        try:
            data = self.path.read_bytes()
        except OSError as e:
            raise SnapshotError(f"Cannot read snapshot {self.path}: {e}") from e

        snapshot = decode_snapshot(data)
        logger.debug(f"Loaded {len(snapshot.items)} items from {self.path}")
        return snapshot
