"""Parameter profiling types.

This module provides the immutable value types passed between the sampler,
classifier, value mapper and profile cache.
"""

from .types import (
    ParameterType,
    ScalingType,
    Classification,
    OwnerIdentity,
    ParameterIdentity,
    ParameterSample,
    ParameterProfile,
)

__all__ = [
    "ParameterType",
    "ScalingType",
    "Classification",
    "OwnerIdentity",
    "ParameterIdentity",
    "ParameterSample",
    "ParameterProfile",
]
