"""Type classification from sampled display strings.

Rules are evaluated in a fixed order and the first match wins:

1. binary: at most two distinct display strings
2. enumerated: few distinct strings relative to the number of samples
3. continuous: most samples are numeric; the shape comes from the scaling analyzer
4. unit hints in the display text ("Hz", "ms", "dB") when the numeric analysis
   is inconclusive
5. unknown

Cardinality checks come first because they rarely misfire and are cheap.
Empty display strings are gaps from failed queries and never count as values.
"""

from collections import Counter
from typing import List, Optional, Sequence, Tuple
import re

from ..constants import (
    BINARY_CONFIDENCE,
    BINARY_MAX_DISTINCT,
    ENUM_CONFIDENCE,
    ENUM_MAX_DISTINCT,
    UNIT_FALLBACK_CONFIDENCE,
)
from ..parameters import Classification, ParameterSample, ParameterType, ScalingType
from .scaling import ScalingAnalyzer

# Checked in order against the lowercased first display string
UNIT_HINTS: Tuple[Tuple[Tuple[str, ...], ScalingType], ...] = (
    (("hz", "khz"), ScalingType.LOGARITHMIC),
    (("ms", "sec"), ScalingType.LOGARITHMIC),
    (("db",), ScalingType.LINEAR),
)

_UNIT_RE = re.compile(r"\d\s*([^\d\s][^\d]*?)\s*$")
_MAX_UNIT_LENGTH = 12


def distinct_values(samples: Sequence[ParameterSample]) -> List[str]:
    """Distinct non-empty display strings in order of first appearance."""
    return list(dict.fromkeys(s.formatted_value for s in samples if s.formatted_value))


def extract_unit(samples: Sequence[ParameterSample]) -> Optional[str]:
    """Most common unit token trailing the numbers in numeric samples.

    Example:
        "-6.0 dB", "0.0 dB", "+6.0 dB" -> "dB"
    """
    units = Counter()
    for sample in samples:
        if not sample.is_numeric:
            continue
        match = _UNIT_RE.search(sample.formatted_value)
        if match:
            unit = match.group(1).strip()
            if unit and len(unit) <= _MAX_UNIT_LENGTH:
                units[unit] += 1

    if not units:
        return None
    return units.most_common(1)[0][0]


class TypeClassifier:
    """Classifies a parameter from its samples.

    Classification is a pure function of the samples; it never raises for
    well-formed samples and returns UNKNOWN at 0.0 when evidence is missing.
    """

    def __init__(self, scaling_analyzer: Optional[ScalingAnalyzer] = None):
        self.scaling_analyzer = scaling_analyzer or ScalingAnalyzer()

    def classify(self, samples: Sequence[ParameterSample]) -> Classification:
        """Classify a parameter.

        Args:
            samples: Samples ordered by normalized value

        Returns:
            Classification with type, scaling (continuous only) and confidence
        """
        if not samples:
            return Classification.unknown()

        distinct = distinct_values(samples)
        if not distinct:
            return Classification.unknown()

        n_samples = len(samples)

        if len(distinct) <= BINARY_MAX_DISTINCT:
            return Classification(ParameterType.BINARY, None, BINARY_CONFIDENCE)

        if len(distinct) <= ENUM_MAX_DISTINCT and 2 * len(distinct) < n_samples:
            return Classification(ParameterType.ENUMERATED, None, ENUM_CONFIDENCE)

        structural: Optional[Classification] = None
        n_numeric = sum(1 for s in samples if s.is_numeric)
        if 2 * n_numeric > n_samples:
            scaling, confidence = self.scaling_analyzer.analyze(samples).as_tuple()
            if scaling is not ScalingType.UNKNOWN:
                return Classification(ParameterType.CONTINUOUS, scaling, confidence)
            # Still structurally continuous, just without a reliable shape
            structural = Classification(ParameterType.CONTINUOUS, ScalingType.UNKNOWN, confidence)

        hinted = self._classify_by_unit(samples)
        if hinted is not None:
            return hinted

        return structural or Classification.unknown()

    def _classify_by_unit(self, samples: Sequence[ParameterSample]) -> Optional[Classification]:
        text = next((s.formatted_value for s in samples if s.formatted_value), "").lower()
        for needles, scaling in UNIT_HINTS:
            if any(needle in text for needle in needles):
                return Classification(ParameterType.CONTINUOUS, scaling, UNIT_FALLBACK_CONFIDENCE)
        return None


def classify(samples: Sequence[ParameterSample]) -> Classification:
    """Classify samples with the default analyzer."""
    return TypeClassifier().classify(samples)
