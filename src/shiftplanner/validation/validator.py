"""Validation of generation inputs and generated schedules.

This module is the single source of truth for constraint checking:

- ``InputValidator`` checks a proposed input before generation runs.
  Generation must not run while it reports errors.
- ``ScheduleValidator`` re-checks generated assignments against the hard
  constraints. It never modifies the assignments; a schedule with errors
  must not be saved or exported.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

from shiftplanner.domain.dates import is_iso_date, parse_iso_date, span_days
from shiftplanner.domain.models import (
    FULL_UNIT,
    DayRequest,
    ScheduleAssignment,
    ScheduleInput,
    StaffMember,
)
from shiftplanner.domain.policies import CoveragePolicy, DefaultCoveragePolicy

logger = logging.getLogger(__name__)


class ValidationErrorType(Enum):
    """Types of validation errors."""

    # Input errors
    INVALID_START_DATE = "invalid_start_date"
    INVALID_END_DATE = "invalid_end_date"
    END_BEFORE_START = "end_before_start"
    RANGE_TOO_LONG = "range_too_long"
    NO_STAFF = "no_staff"
    BLANK_NAME = "blank_name"
    NO_AVAILABLE_SHIFTS = "no_available_shifts"
    REQUIRED_SHIFT_NOT_AVAILABLE = "required_shift_not_available"
    PREFERRED_SHIFT_NOT_AVAILABLE = "preferred_shift_not_available"
    STAFF_BASE_TOO_LOW = "staff_base_too_low"
    STAFF_MAX_BELOW_BASE = "staff_max_below_base"
    INVALID_WORK_HOURS = "invalid_work_hours"
    INVALID_BREAK_HOURS = "invalid_break_hours"
    NON_FINITE_WORK_RULE = "non_finite_work_rule"
    INVALID_NEED_DELTA = "invalid_need_delta"

    # Schedule errors
    COVERAGE_FLOOR_UNMET = "coverage_floor_unmet"
    UNKNOWN_STAFF = "unknown_staff"
    SHIFT_NOT_AVAILABLE = "shift_not_available"
    REQUIRED_SHIFT_VIOLATED = "required_shift_violated"
    ASSIGNED_ON_DAY_OFF = "assigned_on_day_off"
    UNITS_EXCEEDED = "units_exceeded"
    MISSING_DAY = "missing_day"
    DUPLICATE_DAY = "duplicate_day"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    staff_id: Optional[str] = None
    schedule_date: Optional[date] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


@dataclass
class ValidationResult:
    """Result of a validation pass."""

    is_valid: bool = True
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    @property
    def messages(self) -> list[str]:
        """Human-readable error messages, in detection order."""
        return [str(error) for error in self.errors]

    def error_types(self) -> list[ValidationErrorType]:
        return [error.error_type for error in self.errors]


def _staff_label(staff: StaffMember) -> str:
    return staff.name.strip() or "(unnamed)"


def _is_half_step(value: float) -> bool:
    if not math.isfinite(value):
        return False
    return (value * 2) == int(value * 2)


class InputValidator:
    """Checks a generation input for structural and semantic errors.

    All applicable errors are accumulated; nothing short-circuits.

    Example:
        >>> result = InputValidator().validate(schedule_input)
        >>> if not result.is_valid:
        ...     print(result.messages)
    """

    def __init__(self, coverage_policy: Optional[CoveragePolicy] = None):
        self.coverage_policy = coverage_policy or DefaultCoveragePolicy()

    def validate(self, schedule_input: ScheduleInput) -> ValidationResult:
        result = ValidationResult()
        self._validate_range(schedule_input.start_date, schedule_input.end_date, result)
        self._validate_staff(schedule_input.staff, result)
        self._validate_work_rules(schedule_input, result)
        self._check_requests(schedule_input, result)
        return result

    def _validate_range(self, start: Any, end: Any, result: ValidationResult) -> None:
        start_ok = is_iso_date(start)
        end_ok = is_iso_date(end)
        if not start_ok:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_START_DATE,
                    message=f"Start date is not a valid YYYY-MM-DD date: {start!r}",
                )
            )
        if not end_ok:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_END_DATE,
                    message=f"End date is not a valid YYYY-MM-DD date: {end!r}",
                )
            )
        if not (start_ok and end_ok):
            return

        days = span_days(parse_iso_date(start), parse_iso_date(end))
        if days < 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.END_BEFORE_START,
                    message="End date must not be before the start date.",
                )
            )
        max_days = self.coverage_policy.max_range_days()
        if days + 1 > max_days:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.RANGE_TOO_LONG,
                    message=f"Range is too long. Choose at most {max_days} days.",
                    details={"days": days + 1, "max_days": max_days},
                )
            )

    def _validate_staff(self, staff_list: list[StaffMember], result: ValidationResult) -> None:
        if not staff_list:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NO_STAFF,
                    message="At least one staff member is required.",
                )
            )
            return

        seen_ids: set[str] = set()
        for staff in staff_list:
            if staff.id in seen_ids:
                result.add_warning(f"Duplicate staff id {staff.id}.")
            seen_ids.add(staff.id)

            if not staff.name.strip():
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.BLANK_NAME,
                        message="Staff name is blank.",
                        staff_id=staff.id,
                    )
                )
            if not staff.available_shifts:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.NO_AVAILABLE_SHIFTS,
                        message=f"{_staff_label(staff)}: select at least one available shift.",
                        staff_id=staff.id,
                    )
                )
            if staff.required_shift is not None and staff.required_shift not in staff.available_shifts:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.REQUIRED_SHIFT_NOT_AVAILABLE,
                        message=f"{_staff_label(staff)}: the required shift must be one of the available shifts.",
                        staff_id=staff.id,
                        details={"shift": staff.required_shift.value},
                    )
                )
            if staff.preferred_shift is not None and staff.preferred_shift not in staff.available_shifts:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.PREFERRED_SHIFT_NOT_AVAILABLE,
                        message=f"{_staff_label(staff)}: the preferred shift must be one of the available shifts.",
                        staff_id=staff.id,
                        details={"shift": staff.preferred_shift.value},
                    )
                )

    def _validate_work_rules(self, schedule_input: ScheduleInput, result: ValidationResult) -> None:
        rules = schedule_input.work_rules
        non_finite = [
            name
            for name, value in (
                ("dailyStaffBase", rules.daily_staff_base),
                ("dailyStaffMax", rules.daily_staff_max),
                ("workHours", rules.work_hours),
                ("breakHours", rules.break_hours),
            )
            if not math.isfinite(value)
        ]
        for name in non_finite:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NON_FINITE_WORK_RULE,
                    message=f"Work rule {name} must be a finite number.",
                    details={"field": name},
                )
            )
        if non_finite:
            return

        if rules.daily_staff_base < 0.5:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.STAFF_BASE_TOO_LOW,
                    message="Base daily headcount must be at least 0.5.",
                    details={"daily_staff_base": rules.daily_staff_base},
                )
            )
        if rules.daily_staff_max < rules.daily_staff_base:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.STAFF_MAX_BELOW_BASE,
                    message="Maximum daily headcount must not be below the base headcount.",
                    details={
                        "daily_staff_base": rules.daily_staff_base,
                        "daily_staff_max": rules.daily_staff_max,
                    },
                )
            )
        if not rules.work_hours > 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_WORK_HOURS,
                    message="Work hours must be greater than 0.",
                )
            )
        if not rules.break_hours >= 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_BREAK_HOURS,
                    message="Break hours must not be negative.",
                )
            )
        for label, value in (("base", rules.daily_staff_base), ("max", rules.daily_staff_max)):
            if not _is_half_step(value):
                result.add_warning(f"Daily headcount {label} {value} is not a multiple of 0.5.")

    def _check_requests(self, schedule_input: ScheduleInput, result: ValidationResult) -> None:
        """Warn about requests the engine will ignore; reject non-finite deltas."""
        staff_ids = {s.id for s in schedule_input.staff}
        in_range = is_iso_date(schedule_input.start_date) and is_iso_date(schedule_input.end_date)
        seen_dates: set[date] = set()

        for request in schedule_input.requests:
            day = request.schedule_date
            if day in seen_dates:
                result.add_warning(f"{day}: more than one request; only the last is used.")
            seen_dates.add(day)
            if in_range and not (schedule_input.start_date <= day <= schedule_input.end_date):
                result.add_warning(f"{day}: request is outside the schedule range.")
            unknown = {s for s in request.off_staff_ids if s not in staff_ids}
            unknown.update(h.staff_id for h in request.half_staff if h.staff_id not in staff_ids)
            for staff_id in sorted(unknown):
                result.add_warning(f"{day}: request refers to unknown staff {staff_id}.")
            if not math.isfinite(request.need_delta):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INVALID_NEED_DELTA,
                        message=f"{day}: headcount delta must be a finite number.",
                        schedule_date=day,
                    )
                )
            elif not _is_half_step(request.need_delta):
                result.add_warning(f"{day}: headcount delta {request.need_delta} is not a multiple of 0.5.")


class ScheduleValidator:
    """Validates generated assignments against the hard constraints.

    Validation is read-only and idempotent: running it twice on the same
    assignments yields the same errors.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(schedule_input, assignments)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(self, coverage_policy: Optional[CoveragePolicy] = None):
        self.coverage_policy = coverage_policy or DefaultCoveragePolicy()

    def validate(
        self,
        schedule_input: ScheduleInput,
        assignments: list[ScheduleAssignment],
    ) -> ValidationResult:
        """Validate every day of a generated schedule.

        Args:
            schedule_input: The input the assignments were generated from.
            assignments: One assignment per date.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult()
        staff_map = schedule_input.staff_map()
        requests = schedule_input.requests_by_date()

        self._validate_days_present(schedule_input, assignments, result)

        for assignment in assignments:
            request = requests.get(assignment.schedule_date) or DayRequest.empty(
                assignment.schedule_date
            )
            self._validate_floors(assignment, request, schedule_input.staff, result)
            self._validate_entries(assignment, request, staff_map, result)

        if not result.is_valid:
            logger.info("Schedule validation found %d error(s)", len(result.errors))
        return result

    def _validate_days_present(
        self,
        schedule_input: ScheduleInput,
        assignments: list[ScheduleAssignment],
        result: ValidationResult,
    ) -> None:
        """Exactly one assignment per date of the range."""
        counts: dict[date, int] = {}
        for assignment in assignments:
            counts[assignment.schedule_date] = counts.get(assignment.schedule_date, 0) + 1

        for schedule_date in schedule_input.dates():
            count = counts.get(schedule_date, 0)
            if count == 0:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.MISSING_DAY,
                        message=f"{schedule_date}: no assignment for this date.",
                        schedule_date=schedule_date,
                    )
                )
            elif count > 1:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_DAY,
                        message=f"{schedule_date}: {count} assignments for this date.",
                        schedule_date=schedule_date,
                    )
                )

    def _validate_floors(
        self,
        assignment: ScheduleAssignment,
        request: DayRequest,
        staff_list: list[StaffMember],
        result: ValidationResult,
    ) -> None:
        """Check open/close coverage floors, with diagnostics."""
        day = assignment.schedule_date
        off_count = len(request.off_staff_ids)

        for shift in self.coverage_policy.floored_shifts():
            floor = self.coverage_policy.floor_units(shift)
            units = assignment.shift_units(shift)
            if units >= floor:
                continue

            eligible = sum(
                1 for s in staff_list if not request.is_off(s.id) and s.can_work(shift)
            )
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.COVERAGE_FLOOR_UNMET,
                    message=(
                        f"{day}: {shift.value} coverage {units:g} is below the minimum {floor:g}. "
                        f"{off_count} off, {eligible} eligible for {shift.value}."
                    ),
                    schedule_date=day,
                    details={
                        "shift": shift.value,
                        "units": units,
                        "floor": floor,
                        "off_count": off_count,
                        "eligible_count": eligible,
                    },
                )
            )

    def _validate_entries(
        self,
        assignment: ScheduleAssignment,
        request: DayRequest,
        staff_map: dict[str, StaffMember],
        result: ValidationResult,
    ) -> None:
        """Check each assigned (staff, shift, unit) entry."""
        day = assignment.schedule_date

        for shift, entry in assignment.entries():
            staff = staff_map.get(entry.staff_id)
            if staff is None:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_STAFF,
                        message=f"{day}: unknown staff {entry.staff_id} assigned to {shift.value}.",
                        staff_id=entry.staff_id,
                        schedule_date=day,
                    )
                )
            else:
                if shift not in staff.available_shifts:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.SHIFT_NOT_AVAILABLE,
                            message=f"{day}: {_staff_label(staff)} cannot work {shift.value}.",
                            staff_id=staff.id,
                            schedule_date=day,
                            details={"shift": shift.value},
                        )
                    )
                if staff.required_shift is not None and staff.required_shift != shift:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.REQUIRED_SHIFT_VIOLATED,
                            message=(
                                f"{day}: {_staff_label(staff)} must work "
                                f"{staff.required_shift.value}, assigned {shift.value}."
                            ),
                            staff_id=staff.id,
                            schedule_date=day,
                            details={"shift": shift.value, "required": staff.required_shift.value},
                        )
                    )
            if request.is_off(entry.staff_id):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.ASSIGNED_ON_DAY_OFF,
                        message=f"{day}: staff {entry.staff_id} is off but assigned to {shift.value}.",
                        staff_id=entry.staff_id,
                        schedule_date=day,
                    )
                )

        seen: set[str] = set()
        for _, entry in assignment.entries():
            if entry.staff_id in seen:
                continue
            seen.add(entry.staff_id)
            units = assignment.staff_units(entry.staff_id)
            if units > FULL_UNIT:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNITS_EXCEEDED,
                        message=f"{day}: staff {entry.staff_id} assigned {units:g} units.",
                        staff_id=entry.staff_id,
                        schedule_date=day,
                        details={"units": units},
                    )
                )
