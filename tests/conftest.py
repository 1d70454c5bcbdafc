import pytest

from kanjiwall.domain.study.ports import Canvas, FontSpec, GlyphMetrics

SMALL_UNIVERSE = "一二三四五六七八九十口日月田目"


class FakeCanvas(Canvas):
    """
    Canvas with deterministic metrics that records every paint call.

    At pixel size s: advance width s, line height s + s // 4, descent s // 4.
    """

    def __init__(self):
        self.calls: list[tuple] = []
        self.measured: list[int] = []

    def measure(self, glyph: str, font: FontSpec) -> GlyphMetrics:
        size = font.pixel_size
        self.measured.append(size)
        return GlyphMetrics(advance_width=size, line_height=size + size // 4, descent=size // 4)

    def fill_rounded_rect(self, box, radius, color) -> None:
        self.calls.append(("rect", box, radius, color))

    def draw_glyph(self, position, glyph, color, font) -> None:
        self.calls.append(("glyph", position, glyph, color, font.pixel_size))


@pytest.fixture
def fake_canvas():
    return FakeCanvas()


@pytest.fixture
def small_universe():
    return SMALL_UNIVERSE


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    for name in (
        "KANJIWALL_INTERVAL",
        "KANJIWALL_FONT_NAME",
        "KANJIWALL_BACKGROUND",
        "KANJIWALL_VERBOSE",
        "KANJIWALL_LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def make_canvas():
    return FakeCanvas
