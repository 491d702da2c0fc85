"""Greedy score-based assignment engine.

This module implements the day-by-day assignment heuristic:
1. Resolve the day's request (or the zero default)
2. Compute the fill target from base headcount and the day's delta
3. Fix half-day requests at 0.5 units
4. Enforce the open/close coverage floors
5. Greedily fill to the target with the best-scoring (staff, shift) pairs

The only state carried across days is the workload tally, which biases
later picks toward less-worked staff.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from shiftplanner.domain.models import (
    FULL_UNIT,
    HALF_UNIT,
    DayRequest,
    ScheduleAssignment,
    ScheduleInput,
    Shift,
    StaffMember,
)
from shiftplanner.domain.policies import (
    CoveragePolicy,
    DefaultCoveragePolicy,
    DefaultScoringPolicy,
    ScoringPolicy,
)
from shiftplanner.scheduling.selection import (
    RandomSource,
    default_random_source,
    pick_best,
)
from shiftplanner.scheduling.workload import WorkloadTracker

logger = logging.getLogger(__name__)


@dataclass
class DayState:
    """Tracks a single day's assignment while it is being built."""

    request: DayRequest
    need: float
    need_for_fill: float
    assignment: ScheduleAssignment
    assigned_ids: set[str] = field(default_factory=set)

    @property
    def schedule_date(self) -> date:
        return self.request.schedule_date

    def is_available(self, staff: StaffMember) -> bool:
        """Not off and not yet assigned today."""
        return not self.request.is_off(staff.id) and staff.id not in self.assigned_ids


@dataclass
class EngineResult:
    """Assignments for every date plus the run's final workload tally."""

    assignments: list[ScheduleAssignment]
    workload: WorkloadTracker


class AssignmentEngine:
    """Greedy heuristic engine for range-wide shift assignment.

    The engine assumes its input already passed input validation. It does
    not backtrack: days it cannot cover are left under-covered and are
    reported by the post-generation validator.

    Example:
        >>> engine = AssignmentEngine(random_source=default_random_source(7))
        >>> result = engine.solve(schedule_input)
        >>> result.assignments[0].shift_units(Shift.OPEN)
        1.0
    """

    def __init__(
        self,
        scoring_policy: Optional[ScoringPolicy] = None,
        coverage_policy: Optional[CoveragePolicy] = None,
        random_source: Optional[RandomSource] = None,
    ):
        self.scoring_policy = scoring_policy or DefaultScoringPolicy()
        self.coverage_policy = coverage_policy or DefaultCoveragePolicy()
        self.random_source = random_source or default_random_source()

    def solve(self, schedule_input: ScheduleInput) -> EngineResult:
        """Generate assignments for every date of the input range.

        Args:
            schedule_input: Validated generation input.

        Returns:
            EngineResult with one ScheduleAssignment per date.
        """
        workload = WorkloadTracker()
        requests = schedule_input.requests_by_date()
        assignments = []

        for schedule_date in schedule_input.dates():
            request = requests.get(schedule_date) or DayRequest.empty(schedule_date)
            state = self._start_day(request, schedule_input)

            self._fix_half_requests(state, schedule_input.staff, workload)
            self._enforce_floors(state, schedule_input.staff, workload)
            self._fill_to_target(state, schedule_input.staff, workload)

            logger.debug(
                "%s: need=%.1f fill=%.1f assigned=%.1f (open=%.1f middle=%.1f close=%.1f)",
                schedule_date,
                state.need,
                state.need_for_fill,
                state.assignment.total_units(),
                state.assignment.shift_units(Shift.OPEN),
                state.assignment.shift_units(Shift.MIDDLE),
                state.assignment.shift_units(Shift.CLOSE),
            )
            assignments.append(state.assignment)

        return EngineResult(assignments=assignments, workload=workload)

    def score(self, staff: StaffMember, shift: Shift, workload: WorkloadTracker) -> float:
        """Score a (staff, shift) pair against the current workload."""
        return self.scoring_policy.score(staff, shift, workload.get(staff.id))

    def best_shift_for_staff(
        self,
        staff: StaffMember,
        workload: WorkloadTracker,
    ) -> Optional[Shift]:
        """The staff member's own best shift.

        A required shift short-circuits scoring. Ties between available
        shifts are broken by the random source.
        """
        if staff.required_shift is not None:
            return staff.required_shift
        return pick_best(
            staff.eligible_shifts(),
            lambda shift: self.score(staff, shift, workload),
            self.random_source,
        )

    def _start_day(self, request: DayRequest, schedule_input: ScheduleInput) -> DayState:
        """Compute the day's targets and create an empty assignment."""
        need = schedule_input.work_rules.need_for(request.need_delta)
        need_for_fill = max(need, self.coverage_policy.min_fill_units())
        return DayState(
            request=request,
            need=need,
            need_for_fill=need_for_fill,
            assignment=ScheduleAssignment(schedule_date=request.schedule_date),
        )

    def _assign(
        self,
        state: DayState,
        staff: StaffMember,
        shift: Shift,
        unit: float,
        workload: WorkloadTracker,
    ) -> None:
        state.assignment.assign(staff.id, shift, unit)
        state.assigned_ids.add(staff.id)
        workload.add(staff.id, unit)

    def _fix_half_requests(
        self,
        state: DayState,
        staff_list: list[StaffMember],
        workload: WorkloadTracker,
    ) -> None:
        """Assign every honored half request at 0.5 units.

        A requested shift the staff member cannot work is re-resolved to
        their best shift instead of dropping the request.
        """
        staff_map = {s.id: s for s in staff_list}

        for half in state.request.half_staff:
            if state.request.is_off(half.staff_id):
                continue
            staff = staff_map.get(half.staff_id)
            if staff is None:
                logger.debug("%s: half request for unknown staff %s", state.schedule_date, half.staff_id)
                continue
            if staff.id in state.assigned_ids:
                continue

            if staff.can_work(half.shift):
                shift = half.shift
            else:
                shift = self.best_shift_for_staff(staff, workload)
                logger.debug(
                    "%s: half request %s/%s re-resolved to %s",
                    state.schedule_date,
                    staff.id,
                    half.shift.value,
                    shift.value if shift else None,
                )
            if shift is None:
                continue

            self._assign(state, staff, shift, HALF_UNIT, workload)

    def _enforce_floors(
        self,
        state: DayState,
        staff_list: list[StaffMember],
        workload: WorkloadTracker,
    ) -> None:
        """Force one full assignment on each shift below its floor.

        Runs regardless of the fill target; floors take precedence.
        """
        for shift in self.coverage_policy.floored_shifts():
            if state.assignment.shift_units(shift) >= self.coverage_policy.floor_units(shift):
                continue

            candidates = [s for s in staff_list if state.is_available(s) and s.can_work(shift)]
            best = pick_best(
                candidates,
                lambda s, shift=shift: self.score(s, shift, workload),
                self.random_source,
            )
            if best is None:
                logger.warning(
                    "%s: no eligible staff to cover the %s floor",
                    state.schedule_date,
                    shift.value,
                )
                continue

            self._assign(state, best, shift, FULL_UNIT, workload)

    def _fill_to_target(
        self,
        state: DayState,
        staff_list: list[StaffMember],
        workload: WorkloadTracker,
    ) -> None:
        """Greedily add the best (staff, shift) pair until the target is met."""
        while state.assignment.total_units() < state.need_for_fill:
            pairs = []
            for staff in staff_list:
                if not state.is_available(staff):
                    continue
                shift = self.best_shift_for_staff(staff, workload)
                if shift is not None:
                    pairs.append((staff, shift))

            pick = pick_best(
                pairs,
                lambda pair: self.score(pair[0], pair[1], workload),
                self.random_source,
            )
            if pick is None:
                logger.debug(
                    "%s: pool exhausted at %.1f of %.1f units",
                    state.schedule_date,
                    state.assignment.total_units(),
                    state.need_for_fill,
                )
                break

            staff, shift = pick
            self._assign(state, staff, shift, FULL_UNIT, workload)
