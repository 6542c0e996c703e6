"""Configuration for the transformation-matrix pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class FacialReductionConfig:
    """Knobs shared by the LP oracle calls and the per-component workers."""

    # Distance from 0 or 1 under which an LP value is read as that integer
    tolerance: float = 1e-6

    # Method handed to scipy.optimize.linprog; simplex returns vertex solutions
    lp_method: str = "highs-ds"

    # Seconds allowed per LP call; None disables the limit
    lp_time_limit: Optional[float] = 60.0

    # Worker threads for per-arc feasibility checks and per-component extraction
    parallelism: int = 1

    # Run the property checks in qccpfr.facial.verify before returning
    validate_result: bool = False

    def __post_init__(self) -> None:
        if not 0.0 < self.tolerance < 0.5:
            raise ValueError(
                f"tolerance must be in (0, 0.5), got {self.tolerance}"
            )
        if self.parallelism < 1:
            raise ValueError(f"parallelism must be >= 1, got {self.parallelism}")
        if self.lp_time_limit is not None and self.lp_time_limit <= 0:
            raise ValueError(
                f"lp_time_limit must be positive or None, got {self.lp_time_limit}"
            )

    def workers_for(self, num_tasks: int) -> int:
        """Number of threads worth starting for ``num_tasks`` independent jobs."""
        return max(1, min(self.parallelism, num_tasks))


# Global configuration instance
DEFAULT_CONFIG = FacialReductionConfig()
