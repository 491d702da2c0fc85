"""Running workload tally for a single generation run."""

from dataclasses import dataclass, field


@dataclass
class WorkloadTracker:
    """Tracks units assigned to each staff member across the whole run.

    A fresh tracker is created for every generation call; it is never
    shared between runs.
    """

    units: dict[str, float] = field(default_factory=dict)  # staff_id -> units

    def get(self, staff_id: str) -> float:
        """Units assigned to a staff member so far."""
        return self.units.get(staff_id, 0.0)

    def add(self, staff_id: str, unit: float) -> None:
        """Record units assigned to a staff member."""
        self.units[staff_id] = self.units.get(staff_id, 0.0) + unit

    def snapshot(self) -> dict[str, float]:
        return dict(self.units)
