"""Sample plan protocol and point validation."""

from typing import Protocol, Sequence, Tuple
import math

from ..errors import InvalidSamplePointsError


class SamplePlan(Protocol):
    """Protocol for sample plans.

    A plan decides where a parameter is queried. The boundaries 0.0 and 1.0
    are always part of the plan; every downstream heuristic reads them.
    """

    def points(self) -> Tuple[float, ...]:
        """Return the ordered normalized query points.

        Returns:
            Strictly increasing points starting at 0.0 and ending at 1.0
        """
        ...

    def method_name(self) -> str:
        """Return the name of this plan."""
        ...


def validate_points(points: Sequence[float]) -> Tuple[float, ...]:
    """Validate and freeze a sequence of sample points.

    Args:
        points: Candidate normalized query points

    Returns:
        The points as a tuple of floats

    Raises:
        InvalidSamplePointsError: If points are empty, non-finite, outside
            [0, 1], not strictly increasing, or do not start at 0.0 and end at 1.0
    """
    frozen = tuple(float(p) for p in points)
    if not frozen:
        raise InvalidSamplePointsError("Sample points must not be empty")

    for p in frozen:
        if not math.isfinite(p) or not (0.0 <= p <= 1.0):
            raise InvalidSamplePointsError(f"Sample point {p} outside [0, 1]")

    for a, b in zip(frozen, frozen[1:]):
        if b <= a:
            raise InvalidSamplePointsError(f"Sample points must be strictly increasing, got {a} then {b}")

    if frozen[0] != 0.0 or frozen[-1] != 1.0:
        raise InvalidSamplePointsError(
            f"Sample points must start at 0.0 and end at 1.0, got [{frozen[0]}, ..., {frozen[-1]}]"
        )

    return frozen
