import json

import pytest

from kanjiwall.domain.study.models import ItemKind, MasteryState
from kanjiwall.domain.study.ports import SnapshotError
from kanjiwall.infrastructure.adapters import JsonSnapshotSource, decode_snapshot


@pytest.fixture
def document():
    return {
        "user_information": {"username": "koichi", "level": 4},
        "radicals": [
            {"character": "口", "level": 1, "user_specific": {"srs": "burned", "srs_numeric": 9}},
            {"character": None, "level": 1, "user_specific": {"srs": "guru", "srs_numeric": 5}},
        ],
        "kanji": [
            {
                "character": "一",
                "level": 1,
                "user_specific": {
                    "srs": "enlighten",
                    "srs_numeric": 8,
                    "available_date": 1700000000,
                },
            },
            {
                "character": "二",
                "level": 4,
                "user_specific": {"srs": "apprentice", "srs_numeric": 2, "available_date": 0},
            },
            {"character": "三", "level": 4, "user_specific": None},
        ],
    }


def test_decode_snapshot(document):
    snapshot = decode_snapshot(document)

    assert snapshot.user_level == 4
    assert snapshot.user_name == "koichi"
    assert [item.glyph for item in snapshot.items] == ["口", "一", "二", "三"]

    radical, ichi, ni, san = snapshot.items
    assert radical.kind == ItemKind.RADICAL
    assert radical.state == MasteryState.BURNED
    assert radical.srs_stage == 5
    assert ichi.state == MasteryState.ENLIGHTENED
    assert ichi.available_at == 1700000000
    assert ni.srs_stage == 2
    assert ni.available_at is None
    assert san.state == MasteryState.UNSEEN
    assert san.srs_stage == 0


def test_vocabulary_is_optional(document):
    snapshot = decode_snapshot(document)
    assert snapshot.of_kind(ItemKind.VOCABULARY) == []


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        json.dumps({"kanji": []}),
        json.dumps({"user_information": {"level": 0}}),
        json.dumps({"user_information": {"level": 1}, "kanji": [{"character": "一"}]}),
    ],
)
def test_decode_invalid(payload):
    with pytest.raises(SnapshotError):
        decode_snapshot(payload)


@pytest.mark.asyncio
async def test_json_snapshot_source(tmp_path, document):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")

    snapshot = await JsonSnapshotSource(path).get_snapshot()

    assert len(snapshot.items) == 4


@pytest.mark.asyncio
async def test_json_snapshot_source_missing_file(tmp_path):
    with pytest.raises(SnapshotError):
        await JsonSnapshotSource(tmp_path / "missing.json").get_snapshot()


@pytest.mark.asyncio
async def test_json_snapshot_source_invalid_utf8(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_bytes(b'{"user_information": {"level": 1}, "kanji": [{"character": "\xff"}]}')

    with pytest.raises(SnapshotError):
        await JsonSnapshotSource(path).get_snapshot()
