"""Tests for the glyph-grid layout engine."""

import math

import pytest

from kanjiwall.application.layout import GlyphGridLayout, LayoutResult, Rect, StyleTable
from kanjiwall.domain.study.models import MasteryState
from kanjiwall.domain.study.ports import FontSpec

FONT = FontSpec(family="Test Sans")
GAP = 1


def _states(universe: str, count: int, state=MasteryState.APPRENTICE):
    return {glyph: state for glyph in universe[:count]}


def _fits(size: int, count: int, rect: Rect) -> bool:
    """Brute-force fit check using the FakeCanvas metrics."""
    width, height, descent = size, size + size // 4, size // 4
    cols = rect.width // (width + GAP)
    if cols == 0:
        return False
    rows = math.ceil(count / cols)
    return (
        rows * height + (rows - 1) * GAP + descent <= rect.height
        and cols * width + (cols - 1) * GAP <= rect.width
    )


class TestComputeLayout:
    def test_ten_glyphs_in_100_by_40(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe, minor_gap=GAP)
        rect = Rect(0, 0, 100, 40)

        layout = engine.compute_layout(_states(small_universe, 10), rect, FONT)

        assert layout.font_pixel_size == 15
        assert (layout.columns, layout.rows) == (6, 2)
        assert (layout.cell_width, layout.cell_height, layout.descent) == (15, 18, 3)
        assert _fits(layout.font_pixel_size, 10, rect)
        assert not _fits(layout.font_pixel_size + 1, 10, rect)

    def test_block_is_centered(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe, minor_gap=GAP)

        layout = engine.compute_layout(_states(small_universe, 10), Rect(50, 20, 100, 40), FONT)

        # Block is 6*15+5 = 95 wide and 2*18+1 = 37 high
        assert layout.x_start == 50 + 2
        assert layout.y_start == 20 + 1

    @pytest.mark.parametrize("count", [1, 3, 7, 12, 15])
    @pytest.mark.parametrize("size", [(100, 40), (64, 64), (300, 20), (37, 91)])
    def test_fit_invariant_and_maximality(self, fake_canvas, small_universe, count, size):
        engine = GlyphGridLayout(fake_canvas, small_universe, minor_gap=GAP)
        rect = Rect(0, 0, *size)

        layout = engine.compute_layout(_states(small_universe, count), rect, FONT)

        assert not layout.is_empty
        rows, cols = layout.rows, layout.columns
        assert rows * layout.cell_height + (rows - 1) * GAP + layout.descent <= rect.height
        assert cols * layout.cell_width + (cols - 1) * GAP <= rect.width
        assert rows * cols >= count
        assert not _fits(layout.font_pixel_size + 1, count, rect)

    def test_more_glyphs_never_grow_font(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe, minor_gap=GAP)
        rect = Rect(0, 0, 120, 50)

        sizes = [
            engine.compute_layout(_states(small_universe, n), rect, FONT).font_pixel_size
            for n in range(1, len(small_universe) + 1)
        ]

        assert sizes == sorted(sizes, reverse=True)

    def test_deterministic(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe, minor_gap=GAP)
        states = _states(small_universe, 9)

        first = engine.compute_layout(states, Rect(0, 0, 80, 80), FONT)
        second = engine.compute_layout(dict(reversed(states.items())), Rect(0, 0, 80, 80), FONT)

        assert first == second

    def test_empty_active_set(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe)

        layout = engine.compute_layout({}, Rect(0, 0, 100, 100), FONT)

        assert layout == LayoutResult()
        assert layout.is_empty
        assert fake_canvas.measured == []

    def test_rect_too_small(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe, minor_gap=GAP)

        layout = engine.compute_layout(_states(small_universe, 3), Rect(0, 0, 1, 1), FONT)

        assert layout.is_empty
        assert layout.glyph_count == 3
        assert layout.font_pixel_size == 0

    def test_zero_sized_rect(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe)

        layout = engine.compute_layout(_states(small_universe, 3), Rect(0, 0, 0, 0), FONT)

        assert layout.is_empty

    def test_margin_shrinks_area(self, fake_canvas, small_universe):
        plain = GlyphGridLayout(fake_canvas, small_universe, minor_gap=GAP)
        margined = GlyphGridLayout(fake_canvas, small_universe, minor_gap=GAP, margin=10)
        states = _states(small_universe, 10)

        expected = plain.compute_layout(states, Rect(10, 10, 100, 40), FONT)
        layout = margined.compute_layout(states, Rect(0, 0, 120, 60), FONT)

        assert layout == expected

    def test_glyphs_outside_universe_are_ignored(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe)
        states = {"一": MasteryState.GURU, "龍": MasteryState.GURU}

        assert engine.active_glyphs(states) == ["一"]
        assert engine.compute_layout(states, Rect(0, 0, 50, 50), FONT).glyph_count == 1

    def test_negative_rect_rejected(self):
        with pytest.raises(ValueError):
            Rect(0, 0, -1, 10)

    def test_corner_radius(self):
        assert LayoutResult(cell_width=15, cell_height=18).corner_radius == 2
        assert LayoutResult(cell_width=64, cell_height=80).corner_radius == 8


class TestPlacementAndPaint:
    def test_placements_follow_universe_order(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe, minor_gap=GAP)
        # Insert in reverse order: universe order must still win
        states = dict(reversed(list(_states(small_universe, 10).items())))
        layout = engine.compute_layout(states, Rect(0, 0, 100, 40), FONT)

        placements = list(engine.iter_placements(layout, states))

        assert [glyph for glyph, _ in placements] == list(small_universe[:10])
        assert placements[0][1] == (2, 1)
        assert placements[1][1] == (2 + 16, 1)
        assert placements[6][1] == (2, 1 + 19)

    def test_placements_are_restartable(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe)
        states = _states(small_universe, 5)
        layout = engine.compute_layout(states, Rect(0, 0, 60, 60), FONT)

        assert list(engine.iter_placements(layout, states)) == list(
            engine.iter_placements(layout, states)
        )

    def test_paint_calls(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe, minor_gap=GAP)
        styles = StyleTable.default()
        states = _states(small_universe, 10)
        states["二"] = MasteryState.BURNED

        layout = engine.paint(states, Rect(0, 0, 100, 40), FONT, styles)

        assert len(fake_canvas.calls) == 20
        rect_call, glyph_call = fake_canvas.calls[0], fake_canvas.calls[1]
        assert rect_call == ("rect", (2, 1, 15, 18), layout.corner_radius,
                             styles.resolve(MasteryState.APPRENTICE).background)
        # Glyph drawn on the baseline: cell top + cell height - descent
        assert glyph_call == ("glyph", (2, 1 + 15), "一",
                              styles.resolve(MasteryState.APPRENTICE).foreground, 15)
        assert fake_canvas.calls[2][3] == styles.resolve(MasteryState.BURNED).background

    def test_paint_is_deterministic(self, make_canvas, small_universe):
        runs = []
        for _ in range(2):
            canvas = make_canvas()
            engine = GlyphGridLayout(canvas, small_universe)
            engine.paint(_states(small_universe, 12), Rect(0, 0, 90, 70), FONT, StyleTable.default())
            runs.append(canvas.calls)

        assert runs[0] == runs[1]

    def test_paint_nothing_when_empty(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe)

        layout = engine.paint({}, Rect(0, 0, 100, 100), FONT, StyleTable.default())

        assert layout.is_empty
        assert fake_canvas.calls == []

    def test_unknown_state_uses_unseen_colors(self, fake_canvas, small_universe):
        engine = GlyphGridLayout(fake_canvas, small_universe)
        styles = StyleTable.default()

        engine.paint({"一": None}, Rect(0, 0, 40, 40), FONT, styles)

        assert fake_canvas.calls[0][3] == styles.resolve(MasteryState.UNSEEN).background
