"""CSV export for saved schedules.

Three tables are produced:
- Grid: one row per staff member, one column per date (full-open, off, ...)
- Roster: one row per date, names with units per shift (``Kim(0.5)``)
- Stats: off/half/full days and work units per staff member
"""

import csv
import io
from pathlib import Path
from typing import Union

from shiftplanner.domain.models import SavedSchedule, Shift
from shiftplanner.output.grid import build_grid, export_basename

GRID_HEADER = ["staff_id", "name"]
STATS_HEADER = ["name", "work_units", "full_days", "half_days", "off_days"]
LINE_TERMINATOR = "\n"


def _format_units(value: float) -> str:
    return f"{value:g}"


class CSVExporter:
    """Renders saved schedules as CSV text or files.

    Example:
        >>> exporter = CSVExporter()
        >>> paths = exporter.write(saved, "exports/")
    """

    def grid_rows(self, schedule: SavedSchedule) -> list[list[str]]:
        dates, rows = build_grid(schedule)
        table = [GRID_HEADER + [d.isoformat() for d in dates]]
        for row in rows:
            table.append([row.staff.id, row.staff.name] + [cell.value for cell in row.cells])
        return table

    def roster_rows(self, schedule: SavedSchedule) -> list[list[str]]:
        names = {s.id: s.name for s in schedule.staff}
        table = [["date"] + [shift.value for shift in Shift]]
        for assignment in sorted(schedule.assignments, key=lambda a: a.schedule_date):
            row = [assignment.schedule_date.isoformat()]
            for shift in Shift:
                row.append(
                    " / ".join(
                        f"{names.get(e.staff_id, e.staff_id)}({_format_units(e.unit)})"
                        for e in assignment.by_shift[shift]
                    )
                )
            table.append(row)
        return table

    def stats_rows(self, schedule: SavedSchedule) -> list[list[str]]:
        table = [list(STATS_HEADER)]
        for stat in schedule.stats:
            table.append(
                [
                    stat.name,
                    _format_units(stat.work_units),
                    str(stat.full_days),
                    str(stat.half_days),
                    str(stat.off_days),
                ]
            )
        return table

    def to_string(self, rows: list[list[str]]) -> str:
        buffer = io.StringIO()
        csv.writer(buffer, lineterminator=LINE_TERMINATOR).writerows(rows)
        return buffer.getvalue()

    def write(self, schedule: SavedSchedule, directory: Union[str, Path]) -> list[Path]:
        """Write grid, roster and stats CSV files into a directory.

        Returns:
            Paths of the written files.
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        base = export_basename(schedule)

        written = []
        for suffix, rows in (
            ("grid", self.grid_rows(schedule)),
            ("roster", self.roster_rows(schedule)),
            ("stats", self.stats_rows(schedule)),
        ):
            path = directory / f"{base}_{suffix}.csv"
            with path.open("w", encoding="utf-8", newline="") as handle:
                csv.writer(handle, lineterminator=LINE_TERMINATOR).writerows(rows)
            written.append(path)
        return written
