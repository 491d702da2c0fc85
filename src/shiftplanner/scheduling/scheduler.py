"""Main scheduler interface.

This module provides the high-level Scheduler class that orchestrates
input validation, assignment, post-generation validation and statistics.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from shiftplanner.domain.models import ScheduleAssignment, ScheduleInput, ScheduleStats
from shiftplanner.domain.policies import (
    CoveragePolicy,
    DefaultCoveragePolicy,
    DefaultScoringPolicy,
    ScoringPolicy,
)
from shiftplanner.scheduling.engine import AssignmentEngine
from shiftplanner.scheduling.selection import RandomSource, default_random_source
from shiftplanner.scheduling.stats import aggregate_stats
from shiftplanner.validation.validator import (
    InputValidator,
    ScheduleValidator,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class InvalidScheduleInputError(ValueError):
    """Raised when generation is requested for an input that fails validation."""

    def __init__(self, validation: ValidationResult):
        self.validation = validation
        messages = validation.messages
        summary = messages[0] if messages else "invalid input"
        if len(messages) > 1:
            summary += f" (and {len(messages) - 1} more)"
        super().__init__(summary)

    @property
    def errors(self) -> list[str]:
        return self.validation.messages


@dataclass
class ScheduleResult:
    """Output of one generation run.

    Attributes:
        assignments: One assignment per date of the range.
        stats: Per-staff statistics from the same run.
        validation: Post-generation validation of the assignments.
    """

    assignments: list[ScheduleAssignment]
    stats: list[ScheduleStats]
    validation: ValidationResult = field(default_factory=ValidationResult)

    @property
    def is_valid(self) -> bool:
        return self.validation.is_valid

    @property
    def errors(self) -> list[str]:
        return self.validation.messages


class Scheduler:
    """High-level scheduler for generating range schedules.

    Post-generation problems never raise: they are returned on the result
    so the caller can decide not to save or export. Invalid input raises
    ``InvalidScheduleInputError`` before anything is generated.

    Example:
        >>> scheduler = Scheduler(seed=42)
        >>> result = scheduler.generate(schedule_input)
        >>> if not result.is_valid:
        ...     print(result.errors)
    """

    def __init__(
        self,
        scoring_policy: Optional[ScoringPolicy] = None,
        coverage_policy: Optional[CoveragePolicy] = None,
        random_source: Optional[RandomSource] = None,
        seed: Optional[int] = None,
    ):
        """Initialize scheduler with policies.

        Args:
            scoring_policy: Policy for candidate scoring.
            coverage_policy: Policy for per-shift coverage floors.
            random_source: Tie-break picker; overrides ``seed``.
            seed: Seed for the default uniform tie-break picker.
        """
        self.scoring_policy = scoring_policy or DefaultScoringPolicy()
        self.coverage_policy = coverage_policy or DefaultCoveragePolicy()
        self.random_source = random_source or default_random_source(seed)

        self.input_validator = InputValidator(coverage_policy=self.coverage_policy)
        self.schedule_validator = ScheduleValidator(coverage_policy=self.coverage_policy)

    def validate_input(self, schedule_input: ScheduleInput) -> ValidationResult:
        return self.input_validator.validate(schedule_input)

    def generate(self, schedule_input: ScheduleInput) -> ScheduleResult:
        """Validate, generate, re-validate and summarize.

        Args:
            schedule_input: Generation input (canonical shape).

        Returns:
            ScheduleResult with assignments, stats and validation.

        Raises:
            InvalidScheduleInputError: If input validation reports errors.
        """
        input_validation = self.validate_input(schedule_input)
        if not input_validation.is_valid:
            raise InvalidScheduleInputError(input_validation)
        for warning in input_validation.warnings:
            logger.warning(warning)

        logger.info(
            "Generating schedule %s..%s for %d staff",
            schedule_input.start_date,
            schedule_input.end_date,
            len(schedule_input.staff),
        )

        # A fresh engine per run keeps the workload tally private to it.
        engine = AssignmentEngine(
            scoring_policy=self.scoring_policy,
            coverage_policy=self.coverage_policy,
            random_source=self.random_source,
        )
        engine_result = engine.solve(schedule_input)

        validation = self.schedule_validator.validate(schedule_input, engine_result.assignments)
        stats = aggregate_stats(schedule_input, engine_result.assignments, engine_result.workload)

        if validation.is_valid:
            logger.info("Generated %d day(s), validation passed", len(engine_result.assignments))
        else:
            logger.warning(
                "Generated %d day(s) with %d validation error(s)",
                len(engine_result.assignments),
                len(validation.errors),
            )

        return ScheduleResult(
            assignments=engine_result.assignments,
            stats=stats,
            validation=validation,
        )

    def revalidate(
        self,
        schedule_input: ScheduleInput,
        assignments: list[ScheduleAssignment],
    ) -> ValidationResult:
        """Re-run post-generation validation on existing assignments."""
        return self.schedule_validator.validate(schedule_input, assignments)
