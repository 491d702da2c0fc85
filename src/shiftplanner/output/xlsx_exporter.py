"""Excel (XLSX) export for saved schedules.

The workbook holds three sheets:
- Roster: one row per date, names with units per shift (``Kim(0.5)``)
- Grid: one row per staff member, one colored cell per date
- Stats: off/half/full days and work units per staff member
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from shiftplanner.domain.models import SavedSchedule
from shiftplanner.output.csv_exporter import STATS_HEADER, CSVExporter
from shiftplanner.output.grid import Cell, build_grid, export_basename

HEADER_COLOR = "366092"

# Fill colors (hex RGB) for grid cells
CELL_FILLS = {
    Cell.FULL_OPEN: "8CC78C",
    Cell.FULL_MIDDLE: "8C99D9",
    Cell.FULL_CLOSE: "E6AD66",
    Cell.HALF_OPEN: "C5E3C5",
    Cell.HALF_MIDDLE: "C5CCEC",
    Cell.HALF_CLOSE: "F2D6B3",
    Cell.OFF: "CCCCCC",
}


def _require_openpyxl():
    try:
        import openpyxl
    except ImportError:
        raise ImportError(
            "openpyxl is required for Excel export. "
            "Install with: pip install openpyxl"
        )
    return openpyxl


class XLSXExporter:
    """Renders saved schedules as Excel workbooks.

    Example:
        >>> exporter = XLSXExporter()
        >>> path = exporter.write(saved, "exports/")
    """

    def __init__(self, tables: Optional[CSVExporter] = None):
        self.tables = tables or CSVExporter()

    def build_workbook(self, schedule: SavedSchedule):
        """Build an openpyxl Workbook for a saved schedule."""
        openpyxl = _require_openpyxl()
        from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

        thin = Side(style="thin")
        styles = {
            "header_fill": PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type="solid"),
            "header_font": Font(color="FFFFFF", bold=True),
            "border": Border(left=thin, right=thin, top=thin, bottom=thin),
            "center": Alignment(horizontal="center", vertical="center"),
        }

        wb = openpyxl.Workbook()
        ws_roster = wb.active
        ws_roster.title = "Roster"
        self._write_table(ws_roster, self.tables.roster_rows(schedule), styles)
        ws_roster.column_dimensions["A"].width = 12
        for letter in ("B", "C", "D"):
            ws_roster.column_dimensions[letter].width = 30

        self._write_grid(wb.create_sheet("Grid"), schedule, styles, PatternFill)
        self._write_stats(wb.create_sheet("Stats"), schedule, styles)
        return wb

    def generate(self, schedule: SavedSchedule, output_path: Union[str, Path]) -> None:
        """Save the workbook to a file."""
        self.build_workbook(schedule).save(str(output_path))

    def generate_to_buffer(self, schedule: SavedSchedule) -> BytesIO:
        """Save the workbook into a bytes buffer."""
        buffer = BytesIO()
        self.build_workbook(schedule).save(buffer)
        buffer.seek(0)
        return buffer

    def write(self, schedule: SavedSchedule, directory: Union[str, Path]) -> Path:
        """Write ``<start>~<end>_schedule.xlsx`` into a directory."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{export_basename(schedule)}.xlsx"
        self.generate(schedule, path)
        return path

    def _style_header(self, ws, styles: dict) -> None:
        for cell in ws[1]:
            cell.fill = styles["header_fill"]
            cell.font = styles["header_font"]
            cell.alignment = styles["center"]
            cell.border = styles["border"]

    def _write_table(self, ws, rows: list[list], styles: dict) -> None:
        for row in rows:
            ws.append(row)
        self._style_header(ws, styles)

    def _write_grid(self, ws, schedule: SavedSchedule, styles: dict, fill_type) -> None:
        dates, rows = build_grid(schedule)
        ws.append(["Staff"] + [f"{d.strftime('%a')}\n{d.strftime('%m/%d')}" for d in dates])
        self._style_header(ws, styles)
        ws.column_dimensions["A"].width = 20

        for row_idx, row in enumerate(rows, start=2):
            ws.cell(row_idx, 1, row.staff.name or row.staff.id).border = styles["border"]
            for col_idx, cell_value in enumerate(row.cells, start=2):
                cell = ws.cell(row_idx, col_idx, cell_value.value or None)
                cell.alignment = styles["center"]
                cell.border = styles["border"]
                color = CELL_FILLS.get(cell_value)
                if color:
                    cell.fill = fill_type(start_color=color, end_color=color, fill_type="solid")

        for col_idx in range(2, len(dates) + 2):
            ws.column_dimensions[ws.cell(1, col_idx).column_letter].width = 12
        ws.freeze_panes = "B2"

    def _write_stats(self, ws, schedule: SavedSchedule, styles: dict) -> None:
        ws.append(list(STATS_HEADER))
        for stat in schedule.stats:
            ws.append([stat.name, stat.work_units, stat.full_days, stat.half_days, stat.off_days])
        self._style_header(ws, styles)
        ws.column_dimensions["A"].width = 20
