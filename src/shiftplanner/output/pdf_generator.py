"""PDF generation for schedule output.

This module creates printable PDF schedules showing:
- A staff-by-date grid with each day's shift and unit
- A summary page with per-staff statistics
"""

from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Union

from shiftplanner.domain.models import SavedSchedule, Shift
from shiftplanner.output.grid import Cell, GridRow, build_grid

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    Shift.OPEN: (0.55, 0.78, 0.55),  # Green
    Shift.MIDDLE: (0.55, 0.6, 0.85),  # Blue
    Shift.CLOSE: (0.9, 0.68, 0.4),  # Orange
    "off": (0.8, 0.8, 0.8),  # Gray
    "empty": (1.0, 1.0, 1.0),
}

CELL_LABELS = {
    Cell.FULL_OPEN: "O",
    Cell.FULL_MIDDLE: "M",
    Cell.FULL_CLOSE: "C",
    Cell.HALF_OPEN: "o½",
    Cell.HALF_MIDDLE: "m½",
    Cell.HALF_CLOSE: "c½",
    Cell.OFF: "OFF",
    Cell.NONE: "",
}


def _cell_color(cell: Cell) -> tuple[float, float, float]:
    if cell == Cell.OFF:
        return COLORS["off"]
    shift = cell.shift
    if shift is None:
        return COLORS["empty"]
    r, g, b = COLORS[shift]
    if cell.value.startswith("half"):
        # Half cells use a lighter tint of the shift color.
        return (r + (1 - r) * 0.5, g + (1 - g) * 0.5, b + (1 - b) * 0.5)
    return (r, g, b)


class PDFGenerator:
    """Generates printable PDF schedules.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(saved_schedule, "schedule.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
        days_per_page: int = 16,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.days_per_page = days_per_page

    def generate(
        self,
        schedule: SavedSchedule,
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate PDF schedule and save to file.

        Args:
            schedule: The saved schedule to render.
            output_path: Path to save the PDF.
            include_summary: Whether to include the statistics page.
        """
        try:
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=(self.page_width, self.page_height))
        self._draw(c, schedule, include_summary)
        c.save()

    def generate_to_buffer(
        self,
        schedule: SavedSchedule,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate PDF and return as bytes buffer."""
        try:
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(self.page_width, self.page_height))
        self._draw(c, schedule, include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(self, c, schedule: SavedSchedule, include_summary: bool) -> None:
        dates, rows = build_grid(schedule)
        self._draw_grid_pages(c, schedule, dates, rows)
        if include_summary:
            self._draw_summary_page(c, schedule)

    def _draw_grid_pages(
        self,
        c,
        schedule: SavedSchedule,
        dates: list[date],
        rows: list[GridRow],
    ) -> None:
        """Draw the staff-by-date grid, paging over dates and staff."""
        row_height = 18
        header_height = 60
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height) - 1)

        name_width = 110
        grid_left = self.margin + name_width
        grid_width = self.page_width - self.margin - grid_left

        date_chunks = [
            dates[i : i + self.days_per_page] for i in range(0, len(dates), self.days_per_page)
        ] or [[]]
        row_chunks = [
            rows[i : i + rows_per_page] for i in range(0, len(rows), rows_per_page)
        ] or [[]]
        total_pages = len(date_chunks) * len(row_chunks)

        page_num = 0
        for chunk_index, page_dates in enumerate(date_chunks):
            offset = chunk_index * self.days_per_page
            col_width = grid_width / max(1, len(page_dates))

            for page_rows in row_chunks:
                page_num += 1
                self._draw_header(c, schedule)

                # Date header row
                y = self.page_height - self.margin - header_height
                c.setFont("Helvetica-Bold", 7)
                c.setFillColorRGB(0, 0, 0)
                for i, d in enumerate(page_dates):
                    x = grid_left + i * col_width
                    c.drawCentredString(x + col_width / 2, y + 8, d.strftime("%m/%d"))
                    c.drawCentredString(x + col_width / 2, y, d.strftime("%a"))

                # Staff rows
                for row in page_rows:
                    y -= row_height
                    c.setFillColorRGB(0, 0, 0)
                    c.setFont("Helvetica", 8)
                    c.drawString(self.margin, y + 5, (row.staff.name or row.staff.id)[:20])

                    for i in range(len(page_dates)):
                        cell = row.cells[offset + i]
                        x = grid_left + i * col_width
                        c.setFillColorRGB(*_cell_color(cell))
                        c.setStrokeColorRGB(0.6, 0.6, 0.6)
                        c.setLineWidth(0.5)
                        c.rect(x, y, col_width, row_height - 2, fill=1, stroke=1)

                        label = CELL_LABELS[cell]
                        if label:
                            c.setFillColorRGB(0, 0, 0)
                            c.setFont("Helvetica-Bold", 7)
                            c.drawCentredString(x + col_width / 2, y + 5, label)

                self._draw_legend(c, self.margin, self.margin + 10)

                c.setFont("Helvetica", 9)
                c.setFillColorRGB(0, 0, 0)
                c.drawCentredString(
                    self.page_width / 2,
                    self.margin - 10,
                    f"Page {page_num} of {total_pages}",
                )
                c.showPage()

    def _draw_header(self, c, schedule: SavedSchedule) -> None:
        """Draw page header with the schedule range."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Shift Schedule - {schedule.start_date.strftime('%B %d, %Y')} "
            f"to {schedule.end_date.strftime('%B %d, %Y')}",
        )

        c.setFont("Helvetica", 10)
        rules = schedule.work_rules
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Staff: {len(schedule.staff)}   Daily headcount: "
            f"{rules.daily_staff_base:g}-{rules.daily_staff_max:g}   "
            f"Shift: {rules.work_hours:g}h incl. {rules.break_hours:g}h break",
        )

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        items = [
            (COLORS[Shift.OPEN], "O Open"),
            (COLORS[Shift.MIDDLE], "M Middle"),
            (COLORS[Shift.CLOSE], "C Close"),
            (_cell_color(Cell.HALF_OPEN), "½ Half"),
            (COLORS["off"], "Off"),
        ]

        c.setFont("Helvetica", 7)
        current_x = x + 45

        for color, label in items:
            c.setFillColorRGB(*color)
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 70

    def _draw_summary_page(self, c, schedule: SavedSchedule) -> None:
        """Draw summary page with per-staff statistics."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Schedule Summary - {schedule.start_date.isoformat()} to {schedule.end_date.isoformat()}",
        )

        y = self.page_height - self.margin - 60
        columns = [
            ("Name", 0),
            ("Work units", 180),
            ("Full", 260),
            ("Half", 320),
            ("Off", 380),
        ]

        c.setFont("Helvetica-Bold", 10)
        for label, dx in columns:
            c.drawString(self.margin + dx, y, label)
        y -= 16

        c.setFont("Helvetica", 10)
        for stat in schedule.stats:
            if y < self.margin + 20:
                c.showPage()
                y = self.page_height - self.margin - 20
                c.setFont("Helvetica", 10)
            values = [
                stat.name[:28],
                f"{stat.work_units:g}",
                str(stat.full_days),
                str(stat.half_days),
                str(stat.off_days),
            ]
            for (_, dx), value in zip(columns, values):
                c.drawString(self.margin + dx, y, value)
            y -= 14

        c.showPage()
