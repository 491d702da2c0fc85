"""Tests for input and schedule validation."""

from datetime import date, timedelta

import pytest

from shiftplanner.domain.models import (
    DayRequest,
    HalfRequest,
    ScheduleAssignment,
    ScheduleInput,
    Shift,
    StaffMember,
    WorkRules,
)
from shiftplanner.validation.validator import (
    InputValidator,
    ScheduleValidator,
    ValidationErrorType,
)


START = date(2024, 6, 3)


def make_staff(staff_id, shifts=None, **kwargs):
    return StaffMember(
        id=staff_id,
        name=kwargs.pop("name", f"Staff {staff_id}"),
        available_shifts=set(shifts) if shifts is not None else set(Shift),
        **kwargs,
    )


@pytest.fixture
def staff():
    return [
        make_staff("A", [Shift.OPEN, Shift.MIDDLE]),
        make_staff("B", [Shift.MIDDLE, Shift.CLOSE]),
        make_staff("C", [Shift.CLOSE], required_shift=Shift.CLOSE),
    ]


@pytest.fixture
def schedule_input(staff):
    return ScheduleInput(start_date=START, end_date=START + timedelta(days=1), staff=staff)


def covered_day(schedule_date):
    """An assignment that meets both floors with A opening and C closing."""
    assignment = ScheduleAssignment(schedule_date=schedule_date)
    assignment.assign("A", Shift.OPEN, 1.0)
    assignment.assign("C", Shift.CLOSE, 1.0)
    return assignment


class TestInputValidator:
    """Tests for InputValidator."""

    def test_valid_input(self, schedule_input):
        result = InputValidator().validate(schedule_input)
        assert result.is_valid
        assert result.errors == []

    def test_invalid_dates(self, staff):
        schedule_input = ScheduleInput(start_date="2024-13-01", end_date="soon", staff=staff)
        result = InputValidator().validate(schedule_input)

        assert result.error_types() == [
            ValidationErrorType.INVALID_START_DATE,
            ValidationErrorType.INVALID_END_DATE,
        ]

    def test_end_before_start(self, staff):
        schedule_input = ScheduleInput(start_date=START, end_date=START - timedelta(days=1), staff=staff)
        result = InputValidator().validate(schedule_input)

        assert result.error_types() == [ValidationErrorType.END_BEFORE_START]

    def test_longest_allowed_range(self, staff):
        """371 inclusive days are accepted; 372 are not."""
        ok = ScheduleInput(start_date=START, end_date=START + timedelta(days=370), staff=staff)
        too_long = ScheduleInput(start_date=START, end_date=START + timedelta(days=371), staff=staff)

        assert InputValidator().validate(ok).is_valid
        result = InputValidator().validate(too_long)
        assert result.error_types() == [ValidationErrorType.RANGE_TOO_LONG]
        assert result.errors[0].details == {"days": 372, "max_days": 371}

    def test_no_staff(self):
        result = InputValidator().validate(ScheduleInput(start_date=START, end_date=START))
        assert result.error_types() == [ValidationErrorType.NO_STAFF]

    def test_staff_errors_accumulate(self):
        """Every staff problem is reported, not just the first."""
        staff = [
            make_staff("A", name="  "),
            make_staff("B", shifts=[]),
            make_staff("C", [Shift.OPEN], required_shift=Shift.CLOSE),
            make_staff("D", [Shift.OPEN], preferred_shift=Shift.MIDDLE),
        ]
        result = InputValidator().validate(ScheduleInput(start_date=START, end_date=START, staff=staff))

        assert result.error_types() == [
            ValidationErrorType.BLANK_NAME,
            ValidationErrorType.NO_AVAILABLE_SHIFTS,
            ValidationErrorType.REQUIRED_SHIFT_NOT_AVAILABLE,
            ValidationErrorType.PREFERRED_SHIFT_NOT_AVAILABLE,
        ]
        assert [e.staff_id for e in result.errors] == ["A", "B", "C", "D"]

    @pytest.mark.parametrize(
        "rules,expected",
        [
            (WorkRules(daily_staff_base=0.0, daily_staff_max=3.0), ValidationErrorType.STAFF_BASE_TOO_LOW),
            (WorkRules(daily_staff_base=2.0, daily_staff_max=1.5), ValidationErrorType.STAFF_MAX_BELOW_BASE),
            (WorkRules(work_hours=0.0), ValidationErrorType.INVALID_WORK_HOURS),
            (WorkRules(break_hours=-1.0), ValidationErrorType.INVALID_BREAK_HOURS),
        ],
    )
    def test_work_rule_errors(self, staff, rules, expected):
        schedule_input = ScheduleInput(start_date=START, end_date=START, work_rules=rules, staff=staff)
        result = InputValidator().validate(schedule_input)

        assert result.error_types() == [expected]

    @pytest.mark.parametrize(
        "rules,field",
        [
            (WorkRules(daily_staff_base=float("nan")), "dailyStaffBase"),
            (WorkRules(daily_staff_max=float("inf")), "dailyStaffMax"),
            (WorkRules(work_hours=float("inf")), "workHours"),
            (WorkRules(break_hours=float("-inf")), "breakHours"),
        ],
    )
    def test_non_finite_work_rules_are_errors(self, staff, rules, field):
        schedule_input = ScheduleInput(start_date=START, end_date=START, work_rules=rules, staff=staff)
        result = InputValidator().validate(schedule_input)

        assert result.error_types() == [ValidationErrorType.NON_FINITE_WORK_RULE]
        assert result.errors[0].details == {"field": field}

    def test_non_finite_need_delta_is_error(self, staff):
        requests = [DayRequest(schedule_date=START, need_delta=float("inf"))]
        schedule_input = ScheduleInput(start_date=START, end_date=START, staff=staff, requests=requests)
        result = InputValidator().validate(schedule_input)

        assert result.error_types() == [ValidationErrorType.INVALID_NEED_DELTA]
        assert result.errors[0].schedule_date == START

    def test_errors_across_sections_accumulate(self):
        schedule_input = ScheduleInput(
            start_date="bad",
            end_date=START,
            work_rules=WorkRules(daily_staff_base=0.0),
        )
        result = InputValidator().validate(schedule_input)

        assert result.error_types() == [
            ValidationErrorType.INVALID_START_DATE,
            ValidationErrorType.NO_STAFF,
            ValidationErrorType.STAFF_BASE_TOO_LOW,
        ]

    def test_request_warnings_do_not_invalidate(self, staff):
        requests = [
            DayRequest(schedule_date=START, off_staff_ids={"ZZ"}),
            DayRequest(schedule_date=START, need_delta=0.3),
            DayRequest(schedule_date=START + timedelta(days=30)),
        ]
        schedule_input = ScheduleInput(start_date=START, end_date=START, staff=staff, requests=requests)
        result = InputValidator().validate(schedule_input)

        assert result.is_valid
        assert "2024-06-03: request refers to unknown staff ZZ." in result.warnings
        assert "2024-06-03: more than one request; only the last is used." in result.warnings
        assert "2024-07-03: request is outside the schedule range." in result.warnings
        assert any("not a multiple of 0.5" in w for w in result.warnings)

    def test_duplicate_staff_id_warns(self):
        staff = [make_staff("A"), make_staff("A")]
        result = InputValidator().validate(ScheduleInput(start_date=START, end_date=START, staff=staff))

        assert result.is_valid
        assert result.warnings == ["Duplicate staff id A."]


class TestScheduleValidator:
    """Tests for ScheduleValidator."""

    def test_covered_schedule_passes(self, schedule_input):
        assignments = [covered_day(d) for d in schedule_input.dates()]
        result = ScheduleValidator().validate(schedule_input, assignments)

        assert result.is_valid
        assert result.messages == []

    def test_floor_message_includes_diagnostics(self, schedule_input):
        """One error per short shift, naming off and eligible counts."""
        schedule_input.requests = [DayRequest(schedule_date=START, off_staff_ids={"A"})]
        assignments = [ScheduleAssignment(schedule_date=START), covered_day(START + timedelta(days=1))]
        result = ScheduleValidator().validate(schedule_input, assignments)

        assert result.messages == [
            "2024-06-03: open coverage 0 is below the minimum 0.5. 1 off, 0 eligible for open.",
            "2024-06-03: close coverage 0 is below the minimum 0.5. 1 off, 2 eligible for close.",
        ]
        assert result.errors[1].details == {
            "shift": "close",
            "units": 0,
            "floor": 0.5,
            "off_count": 1,
            "eligible_count": 2,
        }

    def test_half_unit_meets_floor(self, schedule_input):
        day = ScheduleAssignment(schedule_date=START)
        day.assign("A", Shift.OPEN, 0.5)
        day.assign("B", Shift.CLOSE, 0.5)
        assignments = [day, covered_day(START + timedelta(days=1))]

        assert ScheduleValidator().validate(schedule_input, assignments).is_valid

    def test_entry_violations(self, schedule_input):
        schedule_input.requests = [DayRequest(schedule_date=START, off_staff_ids={"B"})]
        day = covered_day(START)
        day.assign("A", Shift.CLOSE, 0.5)
        day.assign("B", Shift.MIDDLE, 1.0)
        day.assign("C", Shift.MIDDLE, 0.5)
        day.assign("X", Shift.MIDDLE, 1.0)
        assignments = [day, covered_day(START + timedelta(days=1))]

        result = ScheduleValidator().validate(schedule_input, assignments)

        assert sorted(t.value for t in result.error_types()) == sorted([
            ValidationErrorType.SHIFT_NOT_AVAILABLE.value,      # A on close
            ValidationErrorType.ASSIGNED_ON_DAY_OFF.value,      # B while off
            ValidationErrorType.SHIFT_NOT_AVAILABLE.value,      # C on middle
            ValidationErrorType.REQUIRED_SHIFT_VIOLATED.value,  # C on middle
            ValidationErrorType.UNKNOWN_STAFF.value,            # X
            ValidationErrorType.UNITS_EXCEEDED.value,           # A at 1.5
            ValidationErrorType.UNITS_EXCEEDED.value,           # C at 1.5
        ])

    def test_missing_and_duplicate_days(self, schedule_input):
        assignments = [covered_day(START), covered_day(START)]
        result = ScheduleValidator().validate(schedule_input, assignments)

        assert result.error_types() == [
            ValidationErrorType.DUPLICATE_DAY,
            ValidationErrorType.MISSING_DAY,
        ]

    def test_validation_is_idempotent(self, schedule_input):
        """Validating twice gives the same errors and leaves assignments untouched."""
        day = ScheduleAssignment(schedule_date=START)
        day.assign("B", Shift.OPEN, 1.0)
        assignments = [day, covered_day(START + timedelta(days=1))]
        before = [a.to_dict() for a in assignments]

        validator = ScheduleValidator()
        first = validator.validate(schedule_input, assignments)
        second = validator.validate(schedule_input, assignments)

        assert first.messages == second.messages
        assert [a.to_dict() for a in assignments] == before

    def test_half_request_staff_counts_as_eligible(self, schedule_input):
        """Only off staff reduce the eligible count."""
        schedule_input.requests = [
            DayRequest(schedule_date=START, half_staff=[HalfRequest("A", Shift.MIDDLE)])
        ]
        assignments = [ScheduleAssignment(schedule_date=START), covered_day(START + timedelta(days=1))]
        result = ScheduleValidator().validate(schedule_input, assignments)

        assert result.errors[0].details["eligible_count"] == 1
        assert result.errors[0].details["off_count"] == 0
