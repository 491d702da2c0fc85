"""Per-staff statistics derived from a generated schedule."""

from typing import Optional

from shiftplanner.domain.models import (
    FULL_UNIT,
    HALF_UNIT,
    DayRequest,
    ScheduleAssignment,
    ScheduleInput,
    ScheduleStats,
)
from shiftplanner.scheduling.workload import WorkloadTracker


def aggregate_stats(
    schedule_input: ScheduleInput,
    assignments: list[ScheduleAssignment],
    workload: Optional[WorkloadTracker] = None,
) -> list[ScheduleStats]:
    """Count off, half and full days per staff member.

    Args:
        schedule_input: The input the assignments were generated from.
        assignments: One assignment per date.
        workload: The engine's tally from the same run. ``work_units`` is
            taken from it; when omitted (e.g. re-deriving stats for a stored
            schedule) units are summed from the assignments instead.

    Returns:
        One ScheduleStats per staff member, in roster order.
    """
    requests = schedule_input.requests_by_date()
    stats = []

    for staff in schedule_input.staff:
        entry = ScheduleStats(staff_id=staff.id, name=staff.name)
        summed_units = 0.0

        for assignment in assignments:
            request = requests.get(assignment.schedule_date) or DayRequest.empty(
                assignment.schedule_date
            )
            if request.is_off(staff.id):
                entry.off_days += 1
                continue

            units = assignment.staff_units(staff.id)
            summed_units += units
            if units == HALF_UNIT:
                entry.half_days += 1
            elif units >= FULL_UNIT:
                entry.full_days += 1

        entry.work_units = workload.get(staff.id) if workload is not None else summed_units
        stats.append(entry)

    return stats
