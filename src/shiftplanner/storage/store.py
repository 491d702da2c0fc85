"""JSON-file persistence for saved schedules and work rules.

Stored files are treated as untrusted: a missing file, unparseable JSON or
an unexpected shape degrades to an empty collection (or default work
rules) instead of raising.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from shiftplanner.domain.models import (
    DEFAULT_WORK_RULES,
    InputFormatError,
    SavedSchedule,
    ScheduleInput,
    WorkRules,
)
from shiftplanner.domain.normalize import normalize_saved_schedule, normalize_work_rules
from shiftplanner.scheduling.scheduler import ScheduleResult

logger = logging.getLogger(__name__)


class ScheduleNotSavableError(ValueError):
    """Raised when a schedule with validation errors is about to be saved."""


def _read_json(path: Path) -> Optional[Any]:
    """Parsed file content, or None when missing or unparseable."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        logger.warning("Ignoring undecodable store file %s: %s", path, e)
        return None
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring unparseable store file %s: %s", path, e)
        return None


def _write_json(path: Path, value: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(value, ensure_ascii=False, indent=2), encoding="utf-8")


def build_saved_schedule(
    schedule_input: ScheduleInput,
    result: ScheduleResult,
    schedule_id: Optional[str] = None,
    edit_source_schedule_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SavedSchedule:
    """Wrap a generation result in a persistable envelope.

    Args:
        schedule_input: Input the result was generated from.
        result: Generation result; must have passed validation.
        schedule_id: Id to store under; a new one is generated if omitted.
        edit_source_schedule_id: Id of the schedule this one was edited from.
        now: Timestamp for created/updated fields (defaults to UTC now).

    Raises:
        ScheduleNotSavableError: If the result has validation errors.
    """
    if not result.is_valid:
        raise ScheduleNotSavableError(
            f"Schedule has {len(result.errors)} validation error(s): {result.errors[0]}"
        )
    timestamp = now or datetime.now(timezone.utc)
    return SavedSchedule(
        id=schedule_id or uuid.uuid4().hex,
        start_date=schedule_input.start_date,
        end_date=schedule_input.end_date,
        year=schedule_input.start_date.year,
        month=schedule_input.start_date.month,
        created_at=timestamp,
        updated_at=timestamp,
        work_rules=schedule_input.work_rules,
        staff=list(schedule_input.staff),
        requests=list(schedule_input.requests),
        assignments=list(result.assignments),
        stats=list(result.stats),
        edit_source_schedule_id=edit_source_schedule_id,
    )


class ScheduleStore:
    """Saved schedules kept in a single JSON file (``{"items": [...]}``).

    Example:
        >>> store = ScheduleStore("schedules.json")
        >>> store.upsert(saved)
        >>> store.get(saved.id).start_date
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> list[SavedSchedule]:
        """All stored schedules, in stored order (newest first)."""
        data = _read_json(self.path)
        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            if data is not None:
                logger.warning("Store file %s has no item list; treating as empty", self.path)
            return []

        schedules = []
        for item in data["items"]:
            try:
                schedules.append(normalize_saved_schedule(item))
            except (InputFormatError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed stored schedule: %s", e)
        return schedules

    def save(self, schedules: list[SavedSchedule]) -> None:
        _write_json(self.path, {"items": [s.to_dict() for s in schedules]})

    def upsert(self, schedule: SavedSchedule) -> None:
        """Replace the schedule with the same id, else insert it first."""
        schedules = self.load()
        for i, existing in enumerate(schedules):
            if existing.id == schedule.id:
                schedule.created_at = existing.created_at
                schedules[i] = schedule
                break
        else:
            schedules.insert(0, schedule)
        self.save(schedules)

    def get(self, schedule_id: str) -> Optional[SavedSchedule]:
        for schedule in self.load():
            if schedule.id == schedule_id:
                return schedule
        return None

    def delete(self, schedule_id: str) -> bool:
        """Delete a schedule; returns whether anything was removed."""
        schedules = self.load()
        remaining = [s for s in schedules if s.id != schedule_id]
        if len(remaining) == len(schedules):
            return False
        self.save(remaining)
        return True

    def filter_by_year(self, year: int) -> list[SavedSchedule]:
        return [s for s in self.load() if s.year == year]


class WorkRulesStore:
    """The last-used work rules, kept in a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> WorkRules:
        """Stored rules, or the defaults when missing or malformed."""
        data = _read_json(self.path)
        if data is None:
            return DEFAULT_WORK_RULES
        return normalize_work_rules(data)

    def save(self, rules: WorkRules) -> None:
        _write_json(self.path, rules.to_dict())
