"""Domain models for the shift planning system.

This module contains the core data structures shared by the assignment
engine, the validators and the persistence/export adapters: shifts, work
rules, staff members, per-day requests and the generated schedule output.

All models serialize to the camelCase JSON shape used by stored schedules
via ``to_dict`` / ``from_dict``.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from shiftplanner.domain.dates import expand_date_range, month_range, parse_iso_date


class InputFormatError(ValueError):
    """Raised when a payload cannot be parsed into a domain model."""


class Shift(Enum):
    """Coverage category for a day.

    The three shifts are independent categories; no ordering is implied.
    """

    OPEN = "open"
    MIDDLE = "middle"
    CLOSE = "close"

    @classmethod
    def parse(cls, value: Any) -> "Shift":
        """Parse a shift from its string value (or return it unchanged)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InputFormatError(f"Unknown shift: {value!r}") from None


FULL_UNIT = 1.0
HALF_UNIT = 0.5

DEFAULT_PRIORITY = 3


@dataclass(frozen=True)
class WorkRules:
    """Work-rule configuration for a generation run.

    Attributes:
        daily_staff_base: Base headcount per day, in units (0.5 step).
        daily_staff_max: Upper bound for the adjusted headcount.
        work_hours: Length of a full shift in hours.
        break_hours: Break time included in a shift, in hours.
    """

    daily_staff_base: float = 2.0
    daily_staff_max: float = 3.0
    work_hours: float = 8.0
    break_hours: float = 1.0

    def need_for(self, need_delta: float) -> float:
        """Target headcount for a day, clamped to [base, max]."""
        return min(
            self.daily_staff_max,
            max(self.daily_staff_base, self.daily_staff_base + need_delta),
        )

    def to_dict(self) -> dict:
        return {
            "dailyStaffBase": self.daily_staff_base,
            "dailyStaffMax": self.daily_staff_max,
            "workHours": self.work_hours,
            "breakHours": self.break_hours,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkRules":
        try:
            return cls(
                daily_staff_base=float(data["dailyStaffBase"]),
                daily_staff_max=float(data["dailyStaffMax"]),
                work_hours=float(data["workHours"]),
                break_hours=float(data["breakHours"]),
            )
        except KeyError as e:
            raise InputFormatError(f"Work rules missing field {e.args[0]!r}") from None
        except (TypeError, ValueError) as e:
            raise InputFormatError(f"Invalid work rules: {e}") from None


DEFAULT_WORK_RULES = WorkRules()


@dataclass
class StaffMember:
    """A staff member who can be scheduled.

    Attributes:
        id: Unique identifier.
        name: Display name.
        available_shifts: Shifts the staff member can work.
        required_shift: If set, the only shift the staff member may work.
        preferred_shift: Soft preference, gives a small score bonus.
        priority: Per-shift desirability (higher is better).
    """

    id: str
    name: str
    available_shifts: set[Shift] = field(default_factory=lambda: set(Shift))
    required_shift: Optional[Shift] = None
    preferred_shift: Optional[Shift] = None
    priority: dict[Shift, float] = field(
        default_factory=lambda: {shift: DEFAULT_PRIORITY for shift in Shift}
    )

    @classmethod
    def new(cls, name: str = "") -> "StaffMember":
        """Create a staff member with a fresh id and default settings."""
        return cls(id=uuid.uuid4().hex, name=name)

    def can_work(self, shift: Shift) -> bool:
        """Check if the staff member may be assigned to a shift."""
        if shift not in self.available_shifts:
            return False
        if self.required_shift is not None and self.required_shift != shift:
            return False
        return True

    def eligible_shifts(self) -> list[Shift]:
        """Shifts the engine may offer, in enum order."""
        if self.required_shift is not None:
            return [self.required_shift]
        return [shift for shift in Shift if shift in self.available_shifts]

    def get_priority(self, shift: Shift) -> float:
        return self.priority.get(shift, 0)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "availableShifts": [s.value for s in Shift if s in self.available_shifts],
            "priority": {s.value: self.priority.get(s, 0) for s in Shift},
        }
        if self.required_shift is not None:
            data["requiredShift"] = self.required_shift.value
        if self.preferred_shift is not None:
            data["preferredShift"] = self.preferred_shift.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "StaffMember":
        if "id" not in data:
            raise InputFormatError("Staff member missing field 'id'")
        required = data.get("requiredShift")
        preferred = data.get("preferredShift")
        raw_priority = data.get("priority") or {}
        if not isinstance(raw_priority, dict):
            raise InputFormatError(f"Staff {data['id']}: priority must be an object")
        priority = {shift: DEFAULT_PRIORITY for shift in Shift}
        for key, value in raw_priority.items():
            try:
                priority[Shift.parse(key)] = float(value)
            except (TypeError, ValueError):
                raise InputFormatError(
                    f"Staff {data['id']}: invalid priority for {key!r}: {value!r}"
                ) from None
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            available_shifts={Shift.parse(s) for s in data.get("availableShifts", [])},
            required_shift=Shift.parse(required) if required else None,
            preferred_shift=Shift.parse(preferred) if preferred else None,
            priority=priority,
        )


@dataclass(frozen=True)
class HalfRequest:
    """A request for a staff member to work half a unit on a given shift."""

    staff_id: str
    shift: Shift


@dataclass
class DayRequest:
    """Per-day staffing requests.

    Attributes:
        schedule_date: Date the request applies to.
        off_staff_ids: Staff unavailable that day.
        half_staff: Staff working only a half unit on a specific shift.
        need_delta: Adjustment to the day's headcount (0.5 step).
    """

    schedule_date: date
    off_staff_ids: set[str] = field(default_factory=set)
    half_staff: list[HalfRequest] = field(default_factory=list)
    need_delta: float = 0.0

    @classmethod
    def empty(cls, schedule_date: date) -> "DayRequest":
        """The zero-valued request used for dates without one."""
        return cls(schedule_date=schedule_date)

    def is_off(self, staff_id: str) -> bool:
        return staff_id in self.off_staff_ids

    def half_for(self, staff_id: str) -> Optional[HalfRequest]:
        for half in self.half_staff:
            if half.staff_id == staff_id:
                return half
        return None

    def toggle_off(self, staff_id: str) -> None:
        """Toggle a day off; any half request for the staff is dropped."""
        if staff_id in self.off_staff_ids:
            self.off_staff_ids.discard(staff_id)
        else:
            self.off_staff_ids.add(staff_id)
        self.half_staff = [h for h in self.half_staff if h.staff_id != staff_id]

    def toggle_half(self, staff_id: str, shift: Shift) -> None:
        """Toggle a half request; the staff is removed from the off set."""
        self.off_staff_ids.discard(staff_id)
        existing = self.half_for(staff_id)
        if existing is not None:
            self.half_staff.remove(existing)
        else:
            self.half_staff.append(HalfRequest(staff_id=staff_id, shift=shift))

    def to_dict(self) -> dict:
        return {
            "dateISO": self.schedule_date.isoformat(),
            "offStaffIds": sorted(self.off_staff_ids),
            "halfStaff": [
                {"staffId": h.staff_id, "shift": h.shift.value} for h in self.half_staff
            ],
            "needDelta": self.need_delta,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DayRequest":
        """Parse a canonical request (see ``normalize`` for legacy shapes)."""
        if "dateISO" not in data:
            raise InputFormatError("Day request missing field 'dateISO'")
        try:
            need_delta = float(data.get("needDelta", 0))
        except (TypeError, ValueError):
            need_delta = math.nan
        if not math.isfinite(need_delta):
            raise InputFormatError(
                f"Day request {data['dateISO']}: needDelta must be a finite number"
            )
        return cls(
            schedule_date=parse_iso_date(data["dateISO"]),
            off_staff_ids={str(s) for s in data.get("offStaffIds", [])},
            half_staff=[
                HalfRequest(staff_id=str(h["staffId"]), shift=Shift.parse(h["shift"]))
                for h in data.get("halfStaff", [])
            ],
            need_delta=need_delta,
        )


@dataclass(frozen=True)
class StaffUnit:
    """One entry in a shift: a staff member and the unit they fill."""

    staff_id: str
    unit: float


@dataclass
class ScheduleAssignment:
    """Shift assignment for a single date."""

    schedule_date: date
    by_shift: dict[Shift, list[StaffUnit]] = field(
        default_factory=lambda: {shift: [] for shift in Shift}
    )

    def assign(self, staff_id: str, shift: Shift, unit: float) -> None:
        self.by_shift[shift].append(StaffUnit(staff_id=staff_id, unit=unit))

    def shift_units(self, shift: Shift) -> float:
        """Sum of units assigned to a shift."""
        return sum(entry.unit for entry in self.by_shift.get(shift, []))

    def total_units(self) -> float:
        return sum(self.shift_units(shift) for shift in Shift)

    def staff_units(self, staff_id: str) -> float:
        """Sum of units a staff member works on this date, across shifts."""
        return sum(
            entry.unit
            for entries in self.by_shift.values()
            for entry in entries
            if entry.staff_id == staff_id
        )

    def shifts_for(self, staff_id: str) -> list[tuple[Shift, float]]:
        """All (shift, unit) entries for a staff member."""
        return [
            (shift, entry.unit)
            for shift in Shift
            for entry in self.by_shift.get(shift, [])
            if entry.staff_id == staff_id
        ]

    def entries(self) -> list[tuple[Shift, StaffUnit]]:
        return [
            (shift, entry) for shift in Shift for entry in self.by_shift.get(shift, [])
        ]

    def to_dict(self) -> dict:
        return {
            "dateISO": self.schedule_date.isoformat(),
            "byShift": {
                shift.value: [
                    {"staffId": e.staff_id, "unit": e.unit} for e in self.by_shift[shift]
                ]
                for shift in Shift
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScheduleAssignment":
        assignment = cls(schedule_date=parse_iso_date(data["dateISO"]))
        for key, entries in (data.get("byShift") or {}).items():
            shift = Shift.parse(key)
            for entry in entries:
                assignment.assign(str(entry["staffId"]), shift, float(entry["unit"]))
        return assignment


@dataclass
class ScheduleStats:
    """Per-staff summary derived from a generated schedule."""

    staff_id: str
    name: str
    off_days: int = 0
    half_days: int = 0
    full_days: int = 0
    work_units: float = 0.0

    def to_dict(self) -> dict:
        return {
            "staffId": self.staff_id,
            "name": self.name,
            "offDays": self.off_days,
            "halfDays": self.half_days,
            "fullDays": self.full_days,
            "workUnits": self.work_units,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScheduleStats":
        return cls(
            staff_id=str(data["staffId"]),
            name=str(data.get("name", "")),
            off_days=int(data.get("offDays", 0)),
            half_days=int(data.get("halfDays", 0)),
            full_days=int(data.get("fullDays", 0)),
            work_units=float(data.get("workUnits", 0)),
        )


@dataclass
class ScheduleInput:
    """Everything needed for one generation run.

    Attributes:
        start_date: First date of the range (inclusive).
        end_date: Last date of the range (inclusive).
        work_rules: Headcount and hours configuration.
        staff: Staff roster.
        requests: Per-day requests; dates without one use the zero default.
    """

    start_date: date
    end_date: date
    work_rules: WorkRules = DEFAULT_WORK_RULES
    staff: list[StaffMember] = field(default_factory=list)
    requests: list[DayRequest] = field(default_factory=list)

    @classmethod
    def for_month(
        cls,
        year: int,
        month: int,
        work_rules: WorkRules = DEFAULT_WORK_RULES,
        staff: Optional[list[StaffMember]] = None,
        requests: Optional[list[DayRequest]] = None,
    ) -> "ScheduleInput":
        """Create an input covering a whole calendar month."""
        start, end = month_range(year, month)
        return cls(
            start_date=start,
            end_date=end,
            work_rules=work_rules,
            staff=staff or [],
            requests=requests or [],
        )

    def dates(self) -> list[date]:
        return expand_date_range(self.start_date, self.end_date)

    def staff_map(self) -> dict[str, StaffMember]:
        return {s.id: s for s in self.staff}

    def requests_by_date(self) -> dict[date, DayRequest]:
        return {r.schedule_date: r for r in self.requests}

    def request_for(self, schedule_date: date) -> DayRequest:
        """The request for a date, or the zero-valued default."""
        return self.requests_by_date().get(schedule_date) or DayRequest.empty(schedule_date)

    def to_dict(self) -> dict:
        return {
            "startDateISO": self.start_date.isoformat(),
            "endDateISO": self.end_date.isoformat(),
            "workRules": self.work_rules.to_dict(),
            "staff": [s.to_dict() for s in self.staff],
            "requests": [r.to_dict() for r in self.requests],
        }


@dataclass
class SavedSchedule:
    """Persisted envelope combining a generation input and its output.

    ``year``/``month`` are kept for older readers; they always reflect the
    start date, even for ranges that span months.
    """

    id: str
    start_date: date
    end_date: date
    year: int
    month: int
    created_at: datetime
    updated_at: datetime
    work_rules: WorkRules
    staff: list[StaffMember]
    requests: list[DayRequest]
    assignments: list[ScheduleAssignment]
    stats: list[ScheduleStats]
    edit_source_schedule_id: Optional[str] = None

    def to_input(self) -> ScheduleInput:
        return ScheduleInput(
            start_date=self.start_date,
            end_date=self.end_date,
            work_rules=self.work_rules,
            staff=list(self.staff),
            requests=list(self.requests),
        )

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "startDateISO": self.start_date.isoformat(),
            "endDateISO": self.end_date.isoformat(),
            "year": self.year,
            "month": self.month,
            "createdAtISO": self.created_at.isoformat(),
            "updatedAtISO": self.updated_at.isoformat(),
            "workRules": self.work_rules.to_dict(),
            "staff": [s.to_dict() for s in self.staff],
            "requests": [r.to_dict() for r in self.requests],
            "assignments": [a.to_dict() for a in self.assignments],
            "stats": [s.to_dict() for s in self.stats],
        }
        if self.edit_source_schedule_id:
            data["editSourceScheduleId"] = self.edit_source_schedule_id
        return data
