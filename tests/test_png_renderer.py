"""Unit tests for MonthGridRenderer."""
from datetime import date, datetime

import pytest
from PIL import ImageColor, ImageDraw

from layout.models import Event, ScheduleWindow, StyleTag
from layout.month_grid import build_month
from rasterizer.png_renderer import (
    MUTED_FILL,
    STYLE_COLORS,
    MonthGridRenderer,
)


@pytest.fixture
def march_grid():
    """March 2024 with a regular shift on the 5th."""
    events = [
        Event(datetime(2024, 3, 5, 8), datetime(2024, 3, 5, 16), "Regular Shift AM")
    ]
    window = ScheduleWindow.from_dates(date(2024, 3, 1), date(2024, 3, 20))
    return build_month(date(2024, 3, 1), events, window)


class TestMonthGridRenderer:
    """Test cases for MonthGridRenderer class."""

    def test_render_single_month_dimensions(self, march_grid):
        """Test image size for one month at scale 1."""
        renderer = MonthGridRenderer(scale=1)

        image = renderer.render([march_grid])

        assert image.size == (24 * 2 + 120 * 7, 24 * 2 + 48 + 28 + 84 * 6)
        assert image.mode == 'RGB'

    def test_render_stacks_months_vertically(self, march_grid):
        """Test that several months are stacked in one image."""
        renderer = MonthGridRenderer(scale=2)
        april = build_month(date(2024, 4, 1), [])

        image = renderer.render([march_grid, april])

        assert image.width == renderer.month_width
        assert image.height == renderer.month_height * 2

    def test_render_paints_core_decisions(self, march_grid):
        """Test that muted cells and labelled cells get their fills."""
        renderer = MonthGridRenderer(scale=1)

        image = renderer.render([march_grid])

        # First cell (Feb 25) is muted
        assert image.getpixel((84, 120)) == ImageColor.getrgb(MUTED_FILL)
        # March 5 sits in row 1, column 2; sample the right end of its chip
        assert image.getpixel((374, 256)) == ImageColor.getrgb(
            STYLE_COLORS[StyleTag.REGULAR_SHIFT]
        )

    def test_render_empty_raises(self):
        """Test that rendering nothing is rejected."""
        with pytest.raises(ValueError):
            MonthGridRenderer().render([])

    def test_render_png_bytes(self, march_grid):
        """Test PNG encoding of the rendered grid."""
        png = MonthGridRenderer(scale=1).render_png([march_grid])

        assert png.startswith(b'\x89PNG\r\n\x1a\n')

    def test_export_filename(self):
        """Test the download filename format."""
        now = datetime(2024, 3, 5, 12, 0, 0)

        filename = MonthGridRenderer.export_filename(now)

        assert filename == f"nurse-schedule-{int(now.timestamp() * 1000)}.png"

    def test_fit_text_truncates_long_labels(self, march_grid):
        """Test that labels wider than the chip get an ellipsis."""
        renderer = MonthGridRenderer(scale=1)
        draw = ImageDraw.Draw(renderer.render([march_grid]))

        fitted = renderer._fit_text(draw, "Mandatory staff education seminar", 60)

        assert fitted.endswith("...")
        assert draw.textlength(fitted, font=renderer.label_font) <= 60
        assert renderer._fit_text(draw, "Payday", 200) == "Payday"
