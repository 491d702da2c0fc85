"""Normalization of raw and legacy payloads into canonical models.

Older stored data differs from the current shape in a few ways:

- Day requests carried ``needBoost: bool`` instead of ``needDelta``.
- Inputs and saved schedules identified the period by ``year``/``month``
  instead of ``startDateISO``/``endDateISO``.
- Work rules used upper-case keys (``DAILY_STAFF_BASE``) or a single
  ``DAILY_STAFF`` headcount.
- Staff entries could lack ``priority`` or ``availableShifts``.

Everything is translated here, before the engine runs, so the engine only
ever sees canonical data.
"""

import math
from datetime import datetime
from typing import Any

from shiftplanner.domain.dates import is_iso_date, month_range, parse_iso_date
from shiftplanner.domain.models import (
    DEFAULT_WORK_RULES,
    DayRequest,
    HalfRequest,
    InputFormatError,
    SavedSchedule,
    ScheduleAssignment,
    ScheduleInput,
    ScheduleStats,
    Shift,
    StaffMember,
    WorkRules,
)

_WORK_RULE_KEYS = {
    "daily_staff_base": ("dailyStaffBase", "DAILY_STAFF_BASE", "DAILY_STAFF"),
    "daily_staff_max": ("dailyStaffMax", "DAILY_STAFF_MAX"),
    "work_hours": ("workHours", "WORK_HOURS"),
    "break_hours": ("breakHours", "BREAK_HOURS"),
}


def _as_number(value: Any) -> float:
    """Convert to float; NaN for anything that is not numeric."""
    if isinstance(value, bool) or value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def normalize_work_rules(data: Any) -> WorkRules:
    """Build work rules from any known key spelling.

    Missing or non-numeric fields fall back to the defaults. A legacy
    single ``DAILY_STAFF`` value becomes both base and max.
    """
    if not isinstance(data, dict):
        return DEFAULT_WORK_RULES
    values = {}
    for field_name, keys in _WORK_RULE_KEYS.items():
        for key in keys:
            number = _as_number(data.get(key))
            if math.isfinite(number):
                values[field_name] = number
                break
    if "daily_staff_max" not in values and "DAILY_STAFF" in data and "daily_staff_base" in values:
        values["daily_staff_max"] = values["daily_staff_base"]
    return WorkRules(**{
        name: values.get(name, getattr(DEFAULT_WORK_RULES, name)) for name in _WORK_RULE_KEYS
    })


def normalize_request(data: dict) -> DayRequest:
    """Build a canonical day request, translating ``needBoost``."""
    if "dateISO" not in data:
        raise InputFormatError("Day request missing field 'dateISO'")
    delta = _as_number(data.get("needDelta"))
    if not math.isfinite(delta):
        delta = 1.0 if data.get("needBoost") else 0.0
    try:
        schedule_date = parse_iso_date(data["dateISO"])
    except ValueError as e:
        raise InputFormatError(str(e)) from None
    try:
        half_staff = [
            HalfRequest(staff_id=str(h["staffId"]), shift=Shift.parse(h["shift"]))
            for h in data.get("halfStaff") or []
        ]
    except (KeyError, TypeError) as e:
        raise InputFormatError(f"Day request {schedule_date}: malformed halfStaff entry ({e})") from None
    return DayRequest(
        schedule_date=schedule_date,
        off_staff_ids={str(s) for s in data.get("offStaffIds") or []},
        half_staff=half_staff,
        need_delta=delta,
    )


def normalize_staff(data: dict) -> StaffMember:
    """Build a staff member, tolerating missing optional fields."""
    return StaffMember.from_dict(
        {
            **data,
            "name": str(data.get("name") or ""),
            "availableShifts": data.get("availableShifts") or [],
        }
    )


def _resolve_period(data: dict) -> tuple[Any, Any]:
    """Start/end from ISO fields, else from legacy year/month.

    Unparseable dates are returned unchanged so the input validator can
    report them.
    """
    if "startDateISO" in data or "endDateISO" in data:
        start = data.get("startDateISO")
        end = data.get("endDateISO")
        return (
            parse_iso_date(start) if is_iso_date(start) else start,
            parse_iso_date(end) if is_iso_date(end) else end,
        )
    if "year" in data and "month" in data:
        try:
            return month_range(int(data["year"]), int(data["month"]))
        except (TypeError, ValueError):
            return data.get("year"), data.get("month")
    raise InputFormatError("Input needs startDateISO/endDateISO or year/month")


def normalize_input(data: dict) -> ScheduleInput:
    """Build a canonical generation input from a raw JSON document."""
    if not isinstance(data, dict):
        raise InputFormatError("Schedule input must be a JSON object")
    start, end = _resolve_period(data)
    return ScheduleInput(
        start_date=start,
        end_date=end,
        work_rules=normalize_work_rules(data.get("workRules")),
        staff=[normalize_staff(s) for s in data.get("staff") or []],
        requests=[normalize_request(r) for r in data.get("requests") or []],
    )


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise InputFormatError(f"Invalid timestamp: {value!r}") from None


def normalize_saved_schedule(data: dict) -> SavedSchedule:
    """Build a saved schedule from stored JSON (current or legacy shape)."""
    if "id" not in data:
        raise InputFormatError("Saved schedule missing field 'id'")
    start, end = _resolve_period(data)
    if not is_iso_date(start) or not is_iso_date(end):
        raise InputFormatError(f"Saved schedule {data['id']} has an invalid period")
    return SavedSchedule(
        id=str(data["id"]),
        start_date=start,
        end_date=end,
        year=int(data.get("year", start.year)),
        month=int(data.get("month", start.month)),
        created_at=_parse_timestamp(data.get("createdAtISO")),
        updated_at=_parse_timestamp(data.get("updatedAtISO", data.get("createdAtISO"))),
        work_rules=normalize_work_rules(data.get("workRules")),
        staff=[normalize_staff(s) for s in data.get("staff") or []],
        requests=[normalize_request(r) for r in data.get("requests") or []],
        assignments=[ScheduleAssignment.from_dict(a) for a in data.get("assignments") or []],
        stats=[ScheduleStats.from_dict(s) for s in data.get("stats") or []],
        edit_source_schedule_id=data.get("editSourceScheduleId") or None,
    )
