"""Persistence adapters for saved schedules."""

from shiftplanner.storage.store import (
    ScheduleNotSavableError,
    ScheduleStore,
    WorkRulesStore,
    build_saved_schedule,
)

__all__ = [
    "ScheduleNotSavableError",
    "ScheduleStore",
    "WorkRulesStore",
    "build_saved_schedule",
]
