"""Parameter sampling.

This module provides sample plans and the sequential sampler that drives a
host's ``normalized -> display string`` primitive.
"""

from .base import SamplePlan, validate_points
from .plans import (
    DefaultPlan,
    DensePlan,
    StepPlan,
    TogglePlan,
    plan_by_name,
    plan_for_parameter,
)
from .sampler import QueryFn, Sampler, extract_numeric_value

__all__ = [
    "SamplePlan",
    "validate_points",
    "DefaultPlan",
    "DensePlan",
    "StepPlan",
    "TogglePlan",
    "plan_by_name",
    "plan_for_parameter",
    "QueryFn",
    "Sampler",
    "extract_numeric_value",
]
