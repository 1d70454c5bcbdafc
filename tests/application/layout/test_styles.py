import pytest

from kanjiwall.application.layout import StylePair, StyleTable, parse_color
from kanjiwall.domain.study.models import MasteryState


def test_default_table_covers_every_state():
    table = StyleTable.default()
    for state in MasteryState:
        assert isinstance(table.resolve(state), StylePair)


def test_default_colors():
    table = StyleTable.default()
    apprentice = table.resolve(MasteryState.APPRENTICE)
    assert apprentice.foreground == (0x60, 0x60, 0x60, 255)
    assert apprentice.background == (0xDD, 0x00, 0x93, 0x60)


def test_resolve_labels():
    table = StyleTable.default()
    assert table.resolve("enlighten") == table.resolve(MasteryState.ENLIGHTENED)
    assert table.resolve("") == table.resolve(MasteryState.UNSEEN)
    assert table.resolve(None) == table.resolve(MasteryState.UNSEEN)
    assert table.resolve("mystery") == table.resolve(MasteryState.UNSEEN)


def test_from_hex_overrides():
    table = StyleTable.from_hex({"burned": ["#000000", "#ffffff80"]})
    burned = table.resolve(MasteryState.BURNED)
    assert burned.foreground == (0, 0, 0, 255)
    assert burned.background == (255, 255, 255, 0x80)


def test_from_hex_rejects_bad_input():
    with pytest.raises(ValueError):
        StyleTable.from_hex({"guru": ["not-a-color", "#fff"]})
    with pytest.raises(ValueError):
        StyleTable.from_hex({"legendary": ["#000", "#fff"]})


def test_table_requires_unseen():
    pair = StylePair((0, 0, 0, 255), (1, 1, 1, 255))
    with pytest.raises(ValueError):
        StyleTable({MasteryState.GURU: pair})


def test_table_is_read_only():
    table = StyleTable.default()
    with pytest.raises(TypeError):
        table.styles[MasteryState.GURU] = None


def test_parse_color_names():
    assert parse_color("red") == (255, 0, 0, 255)
