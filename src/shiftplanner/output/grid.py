"""Per-staff, per-day cell view of a saved schedule.

Cells are derived purely from the stored assignments and off requests;
nothing is recomputed.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from shiftplanner.domain.models import (
    FULL_UNIT,
    DayRequest,
    SavedSchedule,
    ScheduleAssignment,
    Shift,
    StaffMember,
)


class Cell(Enum):
    """What a staff member does on a given day."""

    FULL_OPEN = "full-open"
    FULL_MIDDLE = "full-middle"
    FULL_CLOSE = "full-close"
    HALF_OPEN = "half-open"
    HALF_MIDDLE = "half-middle"
    HALF_CLOSE = "half-close"
    OFF = "off"
    NONE = ""  # Not off, not assigned

    @classmethod
    def for_entry(cls, shift: Shift, unit: float) -> "Cell":
        prefix = "full" if unit >= FULL_UNIT else "half"
        return cls(f"{prefix}-{shift.value}")

    @property
    def shift(self) -> Optional[Shift]:
        if "-" not in self.value:
            return None
        return Shift(self.value.split("-", 1)[1])


def cell_for(
    assignment: ScheduleAssignment,
    request: DayRequest,
    staff_id: str,
) -> Cell:
    """Derive a staff member's cell for one day."""
    if request.is_off(staff_id):
        return Cell.OFF
    entries = assignment.shifts_for(staff_id)
    if not entries:
        return Cell.NONE
    shift, unit = entries[0]
    return Cell.for_entry(shift, unit)


@dataclass
class GridRow:
    """One staff member's cells across the schedule range."""

    staff: StaffMember
    cells: list[Cell]


def build_grid(schedule: SavedSchedule) -> tuple[list[date], list[GridRow]]:
    """Build the staff-by-date grid for a saved schedule.

    Returns:
        Tuple of (dates, rows) with one row per roster entry.
    """
    requests = {r.schedule_date: r for r in schedule.requests}
    assignments = sorted(schedule.assignments, key=lambda a: a.schedule_date)
    dates = [a.schedule_date for a in assignments]

    rows = []
    for staff in schedule.staff:
        cells = [
            cell_for(
                assignment,
                requests.get(assignment.schedule_date) or DayRequest.empty(assignment.schedule_date),
                staff.id,
            )
            for assignment in assignments
        ]
        rows.append(GridRow(staff=staff, cells=cells))
    return dates, rows


def export_basename(schedule: SavedSchedule) -> str:
    """File name stem for exports: ``<start>~<end>_schedule``."""
    return f"{schedule.start_date.isoformat()}~{schedule.end_date.isoformat()}_schedule"
