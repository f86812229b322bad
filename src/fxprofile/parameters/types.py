"""Core types for parameter profiling.

This module implements the value types shared by every stage of the pipeline:
- ParameterType / ScalingType: closed variants for the inferred structure
- Classification: inferred type, optional scaling and a confidence score
- OwnerIdentity / ParameterIdentity: cache keys for a plugin and its parameters
- ParameterSample: one (normalized, formatted) observation
- ParameterProfile: the durable, queryable result of analysing a parameter

All types are immutable; a refreshed profile replaces the old one wholesale.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple
import math


class ParameterType(str, Enum):
    """Structural type of a parameter."""
    BINARY = "BINARY"
    ENUMERATED = "ENUMERATED"
    CONTINUOUS = "CONTINUOUS"
    UNKNOWN = "UNKNOWN"


class ScalingType(str, Enum):
    """Shape of the normalized → numeric relationship of a continuous parameter."""
    LINEAR = "LINEAR"
    LOGARITHMIC = "LOGARITHMIC"
    EXPONENTIAL = "EXPONENTIAL"
    INVERTED = "INVERTED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class Classification:
    """Inferred structure of a parameter.

    Confidence is a calibrated score, not a probability. Values below 0.5
    mean there is no reliable classification.

    Attributes:
        type: Structural parameter type
        scaling: Scaling shape, only set for continuous parameters
        confidence: Score in [0, 1]
    """
    type: ParameterType
    scaling: Optional[ScalingType] = None
    confidence: float = 0.0

    def __post_init__(self):
        """Validate classification fields."""
        if not isinstance(self.type, ParameterType):
            object.__setattr__(self, "type", ParameterType(self.type))
        if self.scaling is not None and not isinstance(self.scaling, ScalingType):
            object.__setattr__(self, "scaling", ScalingType(self.scaling))

        if self.scaling is not None and self.type is not ParameterType.CONTINUOUS:
            raise ValueError(f"Scaling is only meaningful for continuous parameters, got {self.type.value}")
        if math.isnan(self.confidence) or not (0.0 <= self.confidence <= 1.0):
            raise ValueError(f"Confidence must be in [0, 1], got {self.confidence}")

    @classmethod
    def unknown(cls) -> "Classification":
        """The 'no evidence' classification."""
        return cls(ParameterType.UNKNOWN, None, 0.0)

    @property
    def label(self) -> str:
        """Single label used in reports: the scaling for continuous parameters, else the type."""
        if self.type is ParameterType.CONTINUOUS and self.scaling is not None:
            return self.scaling.value
        return self.type.value

    def to_dict(self) -> Dict[str, Any]:
        """Export as JSON-serializable dictionary."""
        return {
            "type": self.type.value,
            "scaling": self.scaling.value if self.scaling is not None else None,
            "confidence": self.confidence,
        }


@dataclass(frozen=True, order=True)
class OwnerIdentity:
    """Identity of the plugin instance that exposes a set of parameters.

    Attributes:
        plugin_name: Plugin display name (e.g. "ReaComp")
        plugin_format: Plugin format (e.g. "VST3", "AU", "JS")
    """
    plugin_name: str
    plugin_format: str

    def __post_init__(self):
        """Validate owner identity."""
        if not self.plugin_name:
            raise ValueError("Owner identity requires a plugin name")

    def __str__(self) -> str:
        return f"{self.plugin_name} ({self.plugin_format})" if self.plugin_format else self.plugin_name


@dataclass(frozen=True, order=True)
class ParameterIdentity:
    """Stable key of a single parameter: its owner and index.

    Attributes:
        owner: Plugin that exposes the parameter
        parameter_index: Zero-based parameter index within the owner
    """
    owner: OwnerIdentity
    parameter_index: int

    def __post_init__(self):
        """Validate parameter index."""
        if isinstance(self.parameter_index, bool) or not isinstance(self.parameter_index, int):
            raise TypeError(f"Parameter index must be int, got {type(self.parameter_index).__name__}")
        if self.parameter_index < 0:
            raise ValueError(f"Parameter index must be >= 0, got {self.parameter_index}")

    def __str__(self) -> str:
        return f"{self.owner}#{self.parameter_index}"


@dataclass(frozen=True)
class ParameterSample:
    """One observation of a parameter at a normalized value.

    Attributes:
        normalized_value: Query point in [0, 1]
        formatted_value: Display string returned by the host ("" for a gap)
        numeric_value: Number parsed from the display string (0.0 if none)
        is_numeric: Whether a number could be parsed
    """
    normalized_value: float
    formatted_value: str
    numeric_value: float = 0.0
    is_numeric: bool = False

    def __post_init__(self):
        """Validate the sample point."""
        if not (0.0 <= self.normalized_value <= 1.0):
            raise ValueError(f"Normalized value must be in [0, 1], got {self.normalized_value}")
        if self.is_numeric and not math.isfinite(self.numeric_value):
            raise ValueError(f"Numeric value must be finite, got {self.numeric_value}")

    @property
    def is_gap(self) -> bool:
        """True when the host returned nothing for this point."""
        return self.formatted_value == ""

    def to_dict(self) -> Dict[str, Any]:
        """Export as JSON-serializable dictionary."""
        return {
            "normalized_value": self.normalized_value,
            "formatted_value": self.formatted_value,
            "numeric_value": self.numeric_value,
            "is_numeric": self.is_numeric,
        }


@dataclass(frozen=True)
class ParameterProfile:
    """Durable summary of an analysed parameter.

    Profiles are owned by the profile cache once stored. They are never
    patched: re-analysis produces a new profile that replaces the old one.

    Attributes:
        identity: Parameter this profile describes
        classification: Inferred type, scaling and confidence
        samples: Observations ordered by normalized value
        enum_values: Distinct display strings, only for enumerated parameters
        unit: Dominant unit token of the display strings, if any
        min_formatted: Display string at normalized 0.0
        max_formatted: Display string at normalized 1.0
        name: Parameter display name, if known
    """
    identity: ParameterIdentity
    classification: Classification
    samples: Tuple[ParameterSample, ...] = field(default_factory=tuple)
    enum_values: Optional[Tuple[str, ...]] = None
    unit: Optional[str] = None
    min_formatted: str = ""
    max_formatted: str = ""
    name: str = ""

    def __post_init__(self):
        """Freeze sequences and validate ordering."""
        object.__setattr__(self, "samples", tuple(self.samples))
        if self.enum_values is not None:
            object.__setattr__(self, "enum_values", tuple(self.enum_values))

        points = [s.normalized_value for s in self.samples]
        if any(b <= a for a, b in zip(points, points[1:])):
            raise ValueError(f"Profile samples for {self.identity} must be strictly increasing in normalized value")

        if self.enum_values is not None and self.classification.type is not ParameterType.ENUMERATED:
            raise ValueError("enum_values are only allowed on enumerated profiles")

    @property
    def owner(self) -> OwnerIdentity:
        return self.identity.owner

    @property
    def confidence(self) -> float:
        return self.classification.confidence

    def with_classification(self, classification: Classification) -> "ParameterProfile":
        """Create a new profile with a different classification.

        Returns:
            New ParameterProfile; enum values are dropped unless the new type is enumerated
        """
        enum_values = self.enum_values if classification.type is ParameterType.ENUMERATED else None
        return ParameterProfile(
            identity=self.identity,
            classification=classification,
            samples=self.samples,
            enum_values=enum_values,
            unit=self.unit,
            min_formatted=self.min_formatted,
            max_formatted=self.max_formatted,
            name=self.name,
        )

    def __repr__(self) -> str:
        """Compact representation for debugging."""
        return (
            f"ParameterProfile({self.identity}, {self.classification.label}, "
            f"confidence={self.confidence:.2f}, samples={len(self.samples)})"
        )
