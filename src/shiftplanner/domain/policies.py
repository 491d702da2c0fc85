"""Policy definitions for assignment rules.

This module contains configurable policies that define how candidates are
scored and which coverage floors each shift must meet. Policies are kept
separate from the assignment engine to allow independent testing and easy
modification.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from shiftplanner.domain.models import Shift, StaffMember


class ScoringPolicy(ABC):
    """Abstract base class for candidate scoring."""

    @abstractmethod
    def score(self, staff: StaffMember, shift: Shift, workload: float) -> float:
        """Compute the desirability of assigning a staff member to a shift.

        Args:
            staff: The candidate staff member.
            shift: The candidate shift.
            workload: Units already assigned to the staff in this run.

        Returns:
            Comparable score; higher is more desirable.
        """
        pass


class CoveragePolicy(ABC):
    """Abstract base class for per-shift coverage floors."""

    @abstractmethod
    def floor_units(self, shift: Shift) -> float:
        """Minimum units a shift must be covered with each day (0 = none)."""
        pass

    @abstractmethod
    def max_range_days(self) -> int:
        """Maximum allowed span of a generation range, in days."""
        pass

    def floored_shifts(self) -> list[Shift]:
        """Shifts with a non-zero floor, in enum order."""
        return [shift for shift in Shift if self.floor_units(shift) > 0]

    def min_fill_units(self) -> float:
        """Smallest fill target a day can have (sum of all floors)."""
        return sum(self.floor_units(shift) for shift in Shift)


@dataclass
class DefaultScoringPolicy(ScoringPolicy):
    """Default scoring: ``priority*10 + preferred*5 - workload*2``.

    One priority step outweighs the preference bonus.
    """

    priority_weight: float = 10.0
    preference_bonus: float = 5.0
    workload_penalty: float = 2.0

    def score(self, staff: StaffMember, shift: Shift, workload: float) -> float:
        preferred = 1 if staff.preferred_shift == shift else 0
        return (
            staff.get_priority(shift) * self.priority_weight
            + preferred * self.preference_bonus
            - workload * self.workload_penalty
        )


@dataclass
class DefaultCoveragePolicy(CoveragePolicy):
    """Default coverage rules.

    - Open and close need at least 0.5 units each (a half counts).
    - Middle has no floor.
    - A generation range may span at most 371 days.
    """

    open_floor: float = 0.5
    close_floor: float = 0.5
    middle_floor: float = 0.0
    max_days: int = 371

    def floor_units(self, shift: Shift) -> float:
        if shift == Shift.OPEN:
            return self.open_floor
        elif shift == Shift.CLOSE:
            return self.close_floor
        else:
            return self.middle_floor

    def max_range_days(self) -> int:
        return self.max_days
