"""Tests for the greedy assignment engine and the Scheduler facade."""

import random
from datetime import date, timedelta

import pytest

from shiftplanner.cli import create_sample_requests, create_sample_staff
from shiftplanner.domain.models import (
    DayRequest,
    HalfRequest,
    ScheduleInput,
    Shift,
    StaffMember,
    StaffUnit,
    WorkRules,
)
from shiftplanner.scheduling.engine import AssignmentEngine
from shiftplanner.scheduling.scheduler import InvalidScheduleInputError, Scheduler
from shiftplanner.validation.validator import ValidationErrorType


DAY = date(2024, 3, 4)


def first(seq):
    return seq[0]


def last(seq):
    return seq[-1]


def make_staff(staff_id: str, shifts=None, **kwargs) -> StaffMember:
    """Create a staff member available for the given shifts (default all)."""
    return StaffMember(
        id=staff_id,
        name=f"Staff {staff_id}",
        available_shifts=set(shifts) if shifts is not None else set(Shift),
        **kwargs,
    )


def make_input(staff, requests=None, start=DAY, days=1, base=2.0, maximum=3.0) -> ScheduleInput:
    return ScheduleInput(
        start_date=start,
        end_date=start + timedelta(days=days - 1),
        work_rules=WorkRules(daily_staff_base=base, daily_staff_max=maximum),
        staff=staff,
        requests=requests or [],
    )


def sample_month_input() -> ScheduleInput:
    staff = create_sample_staff(6)
    start, days = date(2024, 5, 1), 31
    dates = [start + timedelta(days=i) for i in range(days)]
    return make_input(staff, create_sample_requests(staff, dates), start=start, days=days)


class TestCoverageFloors:
    """Tests for open/close floor enforcement."""

    def test_feasible_floor(self):
        """An open-only and a close-only staff cover both floors."""
        staff = [make_staff("A", [Shift.OPEN]), make_staff("B", [Shift.CLOSE])]
        result = Scheduler(random_source=first).generate(make_input(staff))

        day = result.assignments[0]
        assert day.by_shift[Shift.OPEN] == [StaffUnit("A", 1.0)]
        assert day.by_shift[Shift.CLOSE] == [StaffUnit("B", 1.0)]
        assert day.by_shift[Shift.MIDDLE] == []
        assert result.errors == []
        assert result.is_valid

    def test_infeasible_open_reported(self):
        """The only opener being off yields an open-floor error for that date."""
        staff = [make_staff("A", [Shift.OPEN]), make_staff("B", [Shift.CLOSE])]
        requests = [DayRequest(schedule_date=DAY, off_staff_ids={"A"})]
        result = Scheduler(random_source=first).generate(make_input(staff, requests))

        assert not result.is_valid
        floor_errors = [
            e for e in result.validation.errors
            if e.error_type == ValidationErrorType.COVERAGE_FLOOR_UNMET
        ]
        assert len(floor_errors) == 1
        error = floor_errors[0]
        assert error.schedule_date == DAY
        assert error.details["shift"] == "open"
        assert error.details["off_count"] == 1
        assert error.details["eligible_count"] == 0
        assert "2024-03-04" in str(error)
        assert "open" in str(error)

    def test_half_on_open_satisfies_floor(self):
        """A half-unit opener is enough for the open floor."""
        staff = [make_staff("A"), make_staff("B", [Shift.OPEN, Shift.CLOSE])]
        requests = [DayRequest(schedule_date=DAY, half_staff=[HalfRequest("A", Shift.OPEN)])]
        result = Scheduler(random_source=first).generate(make_input(staff, requests))

        day = result.assignments[0]
        assert day.by_shift[Shift.OPEN] == [StaffUnit("A", 0.5)]
        assert day.by_shift[Shift.CLOSE] == [StaffUnit("B", 1.0)]
        assert result.is_valid

    def test_floors_override_small_target(self):
        """Floors are enforced even when the day's target is only 0.5."""
        staff = [make_staff("A"), make_staff("B"), make_staff("C")]
        schedule_input = make_input(staff, base=0.5, maximum=0.5)
        result = Scheduler(random_source=first).generate(schedule_input)

        day = result.assignments[0]
        assert day.shift_units(Shift.OPEN) == 1.0
        assert day.shift_units(Shift.CLOSE) == 1.0
        assert day.total_units() == 2.0
        assert result.is_valid

    def test_priority_decides_floor_pick(self):
        """The higher-priority opener wins the open floor."""
        staff = [
            make_staff("A"),
            make_staff("B", priority={Shift.OPEN: 5, Shift.MIDDLE: 3, Shift.CLOSE: 3}),
        ]
        result = Scheduler(random_source=first).generate(make_input(staff))

        day = result.assignments[0]
        assert day.by_shift[Shift.OPEN] == [StaffUnit("B", 1.0)]
        assert day.by_shift[Shift.CLOSE] == [StaffUnit("A", 1.0)]


class TestHalfRequests:
    """Tests for half-day request handling."""

    def test_half_middle_honored(self):
        """A half-middle request puts the staff on middle at 0.5 only."""
        staff = [make_staff("A"), make_staff("B"), make_staff("C")]
        requests = [DayRequest(schedule_date=DAY, half_staff=[HalfRequest("A", Shift.MIDDLE)])]
        result = Scheduler(seed=1).generate(make_input(staff, requests))

        day = result.assignments[0]
        assert day.shifts_for("A") == [(Shift.MIDDLE, 0.5)]
        assert day.staff_units("A") == 0.5

    def test_unavailable_half_shift_is_re_resolved(self):
        """A half request on an unavailable shift moves to the staff's best shift."""
        staff = [make_staff("A", [Shift.MIDDLE]), make_staff("B"), make_staff("C")]
        requests = [DayRequest(schedule_date=DAY, half_staff=[HalfRequest("A", Shift.OPEN)])]
        result = Scheduler(random_source=first).generate(make_input(staff, requests))

        assert result.assignments[0].shifts_for("A") == [(Shift.MIDDLE, 0.5)]

    def test_required_shift_wins_over_half_shift(self):
        staff = [
            make_staff("A", [Shift.OPEN, Shift.CLOSE], required_shift=Shift.CLOSE),
            make_staff("B"),
        ]
        requests = [DayRequest(schedule_date=DAY, half_staff=[HalfRequest("A", Shift.OPEN)])]
        result = Scheduler(random_source=first).generate(make_input(staff, requests))

        assert result.assignments[0].shifts_for("A") == [(Shift.CLOSE, 0.5)]

    def test_half_for_off_staff_is_skipped(self):
        """Off takes precedence over a half request for the same staff."""
        staff = [make_staff("A"), make_staff("B"), make_staff("C")]
        requests = [
            DayRequest(
                schedule_date=DAY,
                off_staff_ids={"A"},
                half_staff=[HalfRequest("A", Shift.MIDDLE)],
            )
        ]
        result = Scheduler(random_source=first).generate(make_input(staff, requests))

        assert result.assignments[0].shifts_for("A") == []
        assert result.is_valid

    def test_half_for_unknown_staff_is_ignored(self):
        staff = [make_staff("A"), make_staff("B")]
        requests = [DayRequest(schedule_date=DAY, half_staff=[HalfRequest("ZZ", Shift.OPEN)])]
        result = Scheduler(random_source=first).generate(make_input(staff, requests))

        assert result.assignments[0].staff_units("ZZ") == 0
        assert result.is_valid


class TestFillTarget:
    """Tests for headcount targets and greedy fill."""

    def test_need_delta_raises_target(self):
        """base=2, max=3 and a +1 delta give three units that day."""
        staff = [make_staff(s) for s in "ABCDE"]
        requests = [DayRequest(schedule_date=DAY + timedelta(days=1), need_delta=1.0)]
        result = Scheduler(seed=3).generate(make_input(staff, requests, days=2))

        assert result.assignments[0].total_units() == 2.0
        assert result.assignments[1].total_units() == 3.0

    @pytest.mark.parametrize("delta,expected", [(5.0, 3.0), (-1.0, 2.0), (0.5, 3.0)])
    def test_target_is_clamped(self, delta, expected):
        """The target is clamped to [base, max]; full units may overshoot by 0.5."""
        staff = [make_staff(s) for s in "ABCDE"]
        requests = [DayRequest(schedule_date=DAY, need_delta=delta)]
        result = Scheduler(seed=3).generate(make_input(staff, requests))

        assert result.assignments[0].total_units() == expected

    def test_pool_exhaustion_stops_fill(self):
        """With fewer staff than the target the engine stops without error."""
        staff = [make_staff("A"), make_staff("B")]
        result = Scheduler(seed=3).generate(make_input(staff, base=3.0, maximum=3.0))

        assert result.assignments[0].total_units() == 2.0
        assert result.is_valid

    def test_fill_uses_staff_best_shift(self):
        """Fill places each pick on that staff member's own best shift."""
        staff = [
            make_staff("A", [Shift.OPEN]),
            make_staff("B", [Shift.CLOSE]),
            make_staff("C", preferred_shift=Shift.MIDDLE),
        ]
        result = Scheduler(random_source=first).generate(make_input(staff, base=3.0))

        assert result.assignments[0].shifts_for("C") == [(Shift.MIDDLE, 1.0)]


class TestRangeInvariants:
    """Tests for invariants that hold over a whole generated range."""

    def test_one_assignment_per_date_in_order(self):
        schedule_input = sample_month_input()
        result = Scheduler(seed=7).generate(schedule_input)

        assert [a.schedule_date for a in result.assignments] == schedule_input.dates()

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_hard_constraints_hold(self, seed):
        """Off staff are never assigned; required shifts and the unit cap hold."""
        schedule_input = sample_month_input()
        result = Scheduler(seed=seed).generate(schedule_input)
        staff_map = schedule_input.staff_map()

        for assignment in result.assignments:
            request = schedule_input.request_for(assignment.schedule_date)
            for shift, entry in assignment.entries():
                staff = staff_map[entry.staff_id]
                assert not request.is_off(entry.staff_id)
                assert shift in staff.available_shifts
                if staff.required_shift is not None:
                    assert shift == staff.required_shift
            for staff in schedule_input.staff:
                assert assignment.staff_units(staff.id) <= 1.0

    def test_sample_month_is_valid(self):
        result = Scheduler(seed=11).generate(sample_month_input())
        assert result.is_valid, result.errors

    def test_workload_is_balanced(self):
        """Identical staff end up with identical workload."""
        staff = [make_staff(s) for s in "ABCD"]
        result = Scheduler(seed=5).generate(make_input(staff, days=10))

        assert [s.work_units for s in result.stats] == [5.0, 5.0, 5.0, 5.0]

    def test_engine_workload_matches_assignments(self):
        schedule_input = sample_month_input()
        engine = AssignmentEngine(random_source=random.Random(2).choice)
        engine_result = engine.solve(schedule_input)

        for staff in schedule_input.staff:
            total = sum(a.staff_units(staff.id) for a in engine_result.assignments)
            assert engine_result.workload.get(staff.id) == total


class TestTieBreaking:
    """Tests for random tie-breaking."""

    def test_seeded_runs_are_identical(self):
        schedule_input = sample_month_input()
        first_run = Scheduler(seed=42).generate(schedule_input)
        second_run = Scheduler(seed=42).generate(schedule_input)

        assert [a.to_dict() for a in first_run.assignments] == [
            a.to_dict() for a in second_run.assignments
        ]

    def test_stub_random_source_is_used(self):
        """Ties go to whatever the injected picker returns."""
        staff = [make_staff("A"), make_staff("B"), make_staff("C")]
        result = Scheduler(random_source=last).generate(make_input(staff, base=0.5, maximum=0.5))

        day = result.assignments[0]
        assert day.by_shift[Shift.OPEN] == [StaffUnit("C", 1.0)]
        assert day.by_shift[Shift.CLOSE] == [StaffUnit("B", 1.0)]

    def test_every_tied_candidate_can_win(self):
        """Across runs, each of three identical staff gets the open floor."""
        staff = [make_staff("A"), make_staff("B"), make_staff("C")]
        schedule_input = make_input(staff, base=0.5, maximum=0.5)
        rng = random.Random(0)

        openers = set()
        for _ in range(60):
            result = Scheduler(random_source=rng.choice).generate(schedule_input)
            openers.add(result.assignments[0].by_shift[Shift.OPEN][0].staff_id)

        assert openers == {"A", "B", "C"}


class TestSchedulerInput:
    """Tests for input validation at the Scheduler boundary."""

    def test_invalid_input_raises(self):
        """Generation does not run when input validation fails."""
        schedule_input = make_input([])
        with pytest.raises(InvalidScheduleInputError) as excinfo:
            Scheduler().generate(schedule_input)

        assert excinfo.value.validation.error_types() == [ValidationErrorType.NO_STAFF]
        assert excinfo.value.errors == ["At least one staff member is required."]

    def test_end_before_start_raises(self):
        schedule_input = ScheduleInput(
            start_date=date(2024, 3, 5),
            end_date=date(2024, 3, 1),
            staff=[make_staff("A")],
        )
        with pytest.raises(InvalidScheduleInputError):
            Scheduler().generate(schedule_input)

    def test_revalidate_matches_generate(self):
        """Re-validation of generated assignments yields the same errors."""
        staff = [make_staff("A", [Shift.OPEN]), make_staff("B", [Shift.CLOSE])]
        requests = [DayRequest(schedule_date=DAY, off_staff_ids={"A"})]
        schedule_input = make_input(staff, requests)
        scheduler = Scheduler(random_source=first)
        result = scheduler.generate(schedule_input)

        again = scheduler.revalidate(schedule_input, result.assignments)
        assert again.messages == result.errors
        assert scheduler.revalidate(schedule_input, result.assignments).messages == again.messages
