"""PNG rasterization of computed month grids."""
import io
import logging
from datetime import datetime
from typing import Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from layout.models import DayCell, MonthGrid, StyleTag

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']

STYLE_COLORS = {
    StyleTag.REGULAR_SHIFT: "#cfe8d5",
    StyleTag.ON_VACATION: "#fde2b8",
    StyleTag.EDUCATIONAL_EVENT: "#d6e4f5",
    StyleTag.PERSONAL_EVENT: "#ead7f0",
    StyleTag.PAYDAY: "#f7f0b5",
}
DEFAULT_CHIP_COLOR = "#e6e1d8"
TEXT_COLOR = "#3b3a36"
MUTED_TEXT_COLOR = "#b8b2a6"
MUTED_FILL = "#f1ede4"
POST_SCHEDULE_FILL = "#ece9e3"
HATCH_COLOR = "#d9d4ca"
GRID_LINE_COLOR = "#d8d2c6"


class MonthGridRenderer:
    """Paints MonthGrid values; never reclassifies events."""

    CELL_WIDTH = 120
    CELL_HEIGHT = 84
    PADDING = 24
    TITLE_HEIGHT = 48
    WEEKDAY_HEIGHT = 28
    HATCH_STEP = 10

    def __init__(self, scale: int = 2, background: str = "#fdfbf7"):
        """
        Initialize the renderer.

        Args:
            scale: Pixel multiplier applied to every dimension (default: 2)
            background: Page background color
        """
        self.scale = scale
        self.background = background
        self.title_font = ImageFont.load_default(size=22 * scale)
        self.body_font = ImageFont.load_default(size=13 * scale)
        self.label_font = ImageFont.load_default(size=11 * scale)

    @property
    def month_width(self) -> int:
        return (self.PADDING * 2 + self.CELL_WIDTH * 7) * self.scale

    @property
    def month_height(self) -> int:
        return (
            self.PADDING * 2
            + self.TITLE_HEIGHT
            + self.WEEKDAY_HEIGHT
            + self.CELL_HEIGHT * 6
        ) * self.scale

    def render(self, grids: Sequence[MonthGrid]) -> Image.Image:
        """
        Stack the given months vertically into one image.

        Args:
            grids: Month grids in display order

        Returns:
            RGB image

        Raises:
            ValueError: If grids is empty
        """
        if not grids:
            raise ValueError("At least one month grid is required")

        image = Image.new(
            'RGB',
            (self.month_width, self.month_height * len(grids)),
            self.background
        )
        draw = ImageDraw.Draw(image)

        for index, grid in enumerate(grids):
            self._draw_month(draw, grid, top=index * self.month_height)

        logger.info(
            f"Rendered {len(grids)} months at {image.width}x{image.height}"
        )
        return image

    def render_png(self, grids: Sequence[MonthGrid]) -> bytes:
        """Render grids and encode the result as PNG."""
        buffer = io.BytesIO()
        self.render(grids).save(buffer, format='PNG')
        return buffer.getvalue()

    @staticmethod
    def export_filename(now: Optional[datetime] = None) -> str:
        now = now or datetime.now()
        return f"nurse-schedule-{int(now.timestamp() * 1000)}.png"

    def _draw_month(self, draw: ImageDraw.ImageDraw, grid: MonthGrid, top: int) -> None:
        s = self.scale
        left = self.PADDING * s
        y = top + self.PADDING * s

        title_width = draw.textlength(grid.title, font=self.title_font)
        draw.text(
            ((self.month_width - title_width) / 2, y),
            grid.title,
            fill=TEXT_COLOR,
            font=self.title_font
        )
        y += self.TITLE_HEIGHT * s

        for column, name in enumerate(WEEKDAY_NAMES):
            name_width = draw.textlength(name, font=self.body_font)
            cell_x = left + column * self.CELL_WIDTH * s
            draw.text(
                (cell_x + (self.CELL_WIDTH * s - name_width) / 2, y),
                name,
                fill=TEXT_COLOR,
                font=self.body_font
            )
        y += self.WEEKDAY_HEIGHT * s

        for row, week in enumerate(grid.weeks):
            for column, cell in enumerate(week):
                box = (
                    left + column * self.CELL_WIDTH * s,
                    y + row * self.CELL_HEIGHT * s,
                    left + (column + 1) * self.CELL_WIDTH * s,
                    y + (row + 1) * self.CELL_HEIGHT * s,
                )
                self._draw_cell(draw, cell, box)

    def _draw_cell(self, draw: ImageDraw.ImageDraw, cell: DayCell, box) -> None:
        s = self.scale
        x0, y0, x1, y1 = box

        if cell.muted:
            draw.rectangle(box, fill=MUTED_FILL)
        elif cell.past_schedule_end:
            draw.rectangle(box, fill=POST_SCHEDULE_FILL)
            self._draw_hatch(draw, box)
        draw.rectangle(box, outline=GRID_LINE_COLOR, width=s)

        draw.text(
            (x0 + 6 * s, y0 + 4 * s),
            str(cell.date.day),
            fill=MUTED_TEXT_COLOR if cell.muted else TEXT_COLOR,
            font=self.body_font
        )

        if not cell.has_event or cell.label is None:
            return

        chip = (x0 + 4 * s, y1 - 30 * s, x1 - 4 * s, y1 - 8 * s)
        draw.rounded_rectangle(
            chip,
            radius=4 * s,
            fill=STYLE_COLORS.get(cell.style_tag, DEFAULT_CHIP_COLOR)
        )
        label = self._fit_text(draw, cell.label, chip[2] - chip[0] - 8 * s)
        draw.text(
            (chip[0] + 4 * s, chip[1] + 5 * s),
            label,
            fill=TEXT_COLOR,
            font=self.label_font
        )

    def _draw_hatch(self, draw: ImageDraw.ImageDraw, box) -> None:
        """Diagonal hatching clipped to box."""
        x0, y0, x1, y1 = box
        height = y1 - y0
        step = self.HATCH_STEP * self.scale

        for offset in range(0, (x1 - x0) + height, step):
            top_x, top_y = x0 + offset, y0
            bottom_x, bottom_y = x0 + offset - height, y1
            if top_x > x1:
                top_y += top_x - x1
                top_x = x1
            if bottom_x < x0:
                bottom_y -= x0 - bottom_x
                bottom_x = x0
            if top_y <= bottom_y:
                draw.line(
                    [(top_x, top_y), (bottom_x, bottom_y)],
                    fill=HATCH_COLOR,
                    width=self.scale
                )

    def _fit_text(self, draw: ImageDraw.ImageDraw, text: str, max_width: float) -> str:
        """Truncate text with an ellipsis until it fits max_width."""
        if draw.textlength(text, font=self.label_font) <= max_width:
            return text
        while text and draw.textlength(text + "...", font=self.label_font) > max_width:
            text = text[:-1]
        return text + "..."
