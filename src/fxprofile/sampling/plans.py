"""Sample plans for parameter sweeps.

Plans are denser near the boundaries, where logarithmic and exponential
curvature and binary/enum boundaries are most visible.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import logging

import numpy as np

from ..constants import (
    DEFAULT_SAMPLE_POINTS,
    DENSE_SAMPLE_POINTS,
    MAX_STEP_SAMPLES,
    TOGGLE_SAMPLE_POINTS,
)
from .base import SamplePlan, validate_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DefaultPlan:
    """The 15-point default distribution."""

    def points(self) -> Tuple[float, ...]:
        return DEFAULT_SAMPLE_POINTS

    def method_name(self) -> str:
        return "default"


@dataclass(frozen=True)
class DensePlan:
    """A 33-point distribution for parameters without a declared step size."""

    def points(self) -> Tuple[float, ...]:
        return DENSE_SAMPLE_POINTS

    def method_name(self) -> str:
        return "dense"


@dataclass(frozen=True)
class TogglePlan:
    """Toggles only need their two boundaries."""

    def points(self) -> Tuple[float, ...]:
        return TOGGLE_SAMPLE_POINTS

    def method_name(self) -> str:
        return "toggle"


@dataclass(frozen=True)
class StepPlan:
    """Sample every multiple of the parameter's declared step size.

    Attributes:
        step: Normalized step size reported by the host, in (0, 1]
        max_samples: Upper bound on the number of query points
    """
    step: float
    max_samples: int = MAX_STEP_SAMPLES

    def __post_init__(self):
        """Validate step size."""
        if not (0.0 < self.step <= 1.0):
            raise ValueError(f"Step must be in (0, 1], got {self.step}")
        if self.max_samples < 2:
            raise ValueError(f"max_samples must be >= 2, got {self.max_samples}")

    def points(self) -> Tuple[float, ...]:
        """Multiples of the step below 1.0, then exactly 1.0.

        If the step would produce more than ``max_samples`` points the grid
        is thinned to evenly spaced points over [0, 1].
        """
        n_steps = int(np.floor(1.0 / self.step + 1e-9))
        if n_steps + 1 > self.max_samples:
            logger.warning(
                f"Step {self.step:.6f} needs {n_steps + 1} samples; thinning to {self.max_samples}"
            )
            grid = np.linspace(0.0, 1.0, self.max_samples)
        else:
            grid = np.arange(n_steps + 1, dtype=float) * self.step
            grid = grid[grid < 1.0 - 1e-9]
            grid = np.append(grid, 1.0)
        return validate_points(round(float(p), 12) for p in grid)

    def method_name(self) -> str:
        return "step"


def plan_by_name(name: str) -> SamplePlan:
    """Resolve a named plan ("default" or "dense").

    Raises:
        ValueError: If the name is not a known plan
    """
    plans = {"default": DefaultPlan(), "dense": DensePlan()}
    if name not in plans:
        raise ValueError(f"Unknown sample plan '{name}'. Available: {sorted(plans)}")
    return plans[name]


def plan_for_parameter(is_toggle: bool = False, small_step: Optional[float] = None, fallback: str = "default") -> SamplePlan:
    """Choose a plan from the step metadata a host reports for a parameter.

    Args:
        is_toggle: Host reports the parameter as a toggle
        small_step: Smallest normalized step, or None/0 when undefined
        fallback: Named plan used when no step information is available

    Returns:
        TogglePlan, StepPlan or the fallback plan
    """
    if is_toggle:
        return TogglePlan()
    if small_step is not None and 0.0 < small_step <= 1.0:
        return StepPlan(small_step)
    return plan_by_name(fallback)
