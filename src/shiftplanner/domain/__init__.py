"""Domain models and business rules for shift planning."""

from shiftplanner.domain.dates import (
    expand_date_range,
    expand_month,
    is_iso_date,
    month_range,
    parse_iso_date,
)
from shiftplanner.domain.models import (
    DEFAULT_WORK_RULES,
    FULL_UNIT,
    HALF_UNIT,
    DayRequest,
    HalfRequest,
    InputFormatError,
    SavedSchedule,
    ScheduleAssignment,
    ScheduleInput,
    ScheduleStats,
    Shift,
    StaffMember,
    StaffUnit,
    WorkRules,
)
from shiftplanner.domain.normalize import (
    normalize_input,
    normalize_request,
    normalize_saved_schedule,
    normalize_work_rules,
)
from shiftplanner.domain.policies import (
    CoveragePolicy,
    DefaultCoveragePolicy,
    DefaultScoringPolicy,
    ScoringPolicy,
)

__all__ = [
    # Models
    "DayRequest",
    "HalfRequest",
    "InputFormatError",
    "SavedSchedule",
    "ScheduleAssignment",
    "ScheduleInput",
    "ScheduleStats",
    "Shift",
    "StaffMember",
    "StaffUnit",
    "WorkRules",
    "DEFAULT_WORK_RULES",
    "FULL_UNIT",
    "HALF_UNIT",
    # Dates
    "expand_date_range",
    "expand_month",
    "is_iso_date",
    "month_range",
    "parse_iso_date",
    # Normalization
    "normalize_input",
    "normalize_request",
    "normalize_saved_schedule",
    "normalize_work_rules",
    # Policies
    "CoveragePolicy",
    "DefaultCoveragePolicy",
    "DefaultScoringPolicy",
    "ScoringPolicy",
]
