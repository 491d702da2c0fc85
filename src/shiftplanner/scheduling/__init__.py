"""Scheduling engine for generating shift assignments."""

from shiftplanner.scheduling.engine import AssignmentEngine, EngineResult
from shiftplanner.scheduling.scheduler import (
    InvalidScheduleInputError,
    ScheduleResult,
    Scheduler,
)
from shiftplanner.scheduling.selection import (
    RandomSource,
    best_candidates,
    default_random_source,
    pick_best,
)
from shiftplanner.scheduling.stats import aggregate_stats
from shiftplanner.scheduling.workload import WorkloadTracker

__all__ = [
    # Core scheduler
    "Scheduler",
    "ScheduleResult",
    "InvalidScheduleInputError",
    # Engine
    "AssignmentEngine",
    "EngineResult",
    "WorkloadTracker",
    "aggregate_stats",
    # Selection
    "RandomSource",
    "best_candidates",
    "default_random_source",
    "pick_best",
]
