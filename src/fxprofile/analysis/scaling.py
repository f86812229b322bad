"""Scaling analysis for continuous parameters.

Each candidate shape gets an independent confidence score; the tests are not
mutually exclusive (a frequency knob can look both inverted and logarithmic).
Arbitration picks the single best-evidenced shape, breaking ties in the fixed
priority order linear > logarithmic > exponential > inverted.

Shape tests describe the display value as the normalized value rises:
- linear: constant rate of change
- logarithmic: either most of the change happens in the first quarter, or the
  values form a geometric progression (equal ratios per step, the usual
  "log scale" of frequency and time knobs)
- exponential: most of the change happens in the last quarter
- inverted: the value at 1.0 is below the value at 0.0

The geometric fit only scores rising curves. A falling curve whose inverted
score clears the threshold is reported as inverted rather than linear; a
shallow fall (small drop relative to the values) stays linear.
"""

from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple

import numpy as np

from ..constants import (
    FIRST_QUARTER,
    LAST_QUARTER,
    MIDPOINT,
    MIN_CURVE_SAMPLES,
    MIN_LINEAR_PAIRS,
    MIN_LINEAR_SAMPLES,
    MIN_SCALING_CONFIDENCE,
    QUARTER_SHARE_CUTOFF,
    QUARTER_SHARE_GAIN,
    SCALING_CONFIDENCE_CAP,
)
from ..parameters import ParameterSample, ScalingType
from .stats import consecutive_rates, mean_rate, numeric_indices, rate_constancy

# Tie-break order for equal scores
SCALING_PRIORITY: Tuple[ScalingType, ...] = (
    ScalingType.LINEAR,
    ScalingType.LOGARITHMIC,
    ScalingType.EXPONENTIAL,
    ScalingType.INVERTED,
)


@dataclass(frozen=True)
class ScalingResult:
    """Outcome of scaling analysis.

    Attributes:
        scaling: Best-evidenced shape, or UNKNOWN
        confidence: Score of the chosen shape (0.0 for UNKNOWN)
        scores: Independent score of every candidate, for diagnostics
    """
    scaling: ScalingType
    confidence: float
    scores: Dict[ScalingType, float] = field(default_factory=dict)

    def as_tuple(self) -> Tuple[ScalingType, float]:
        return self.scaling, self.confidence


def _quarter_share(delta: float, total: float) -> float:
    """Map the share of total change in a quarter to a confidence."""
    if total == 0:
        return 0.0
    ratio = delta / total
    if ratio > QUARTER_SHARE_CUTOFF:
        return min((ratio - QUARTER_SHARE_CUTOFF) * QUARTER_SHARE_GAIN, SCALING_CONFIDENCE_CAP)
    return 0.0


def _boundaries_numeric(samples: Sequence[ParameterSample]) -> bool:
    return bool(samples) and samples[0].is_numeric and samples[-1].is_numeric


class ScalingAnalyzer:
    """Scores candidate normalized → numeric relationships."""

    def linear_confidence(self, samples: Sequence[ParameterSample]) -> float:
        """High when the rate of change is nearly constant across the range."""
        if len(samples) < MIN_LINEAR_SAMPLES:
            return 0.0
        rates, n_pairs = consecutive_rates(samples)
        if n_pairs < MIN_LINEAR_PAIRS or rates.size == 0:
            return 0.0
        return rate_constancy(rates)

    def logarithmic_confidence(self, samples: Sequence[ParameterSample]) -> float:
        """Larger of the first-quarter share test and the geometric fit."""
        return max(self._first_quarter_confidence(samples), self._geometric_confidence(samples))

    def exponential_confidence(self, samples: Sequence[ParameterSample]) -> float:
        """High when the last quarter of the range carries most of the change."""
        indices = numeric_indices(samples)
        if len(indices) < MIN_CURVE_SAMPLES or not _boundaries_numeric(samples):
            return 0.0

        three_quarter = None
        for idx in reversed(indices):
            if samples[idx].normalized_value <= LAST_QUARTER:
                three_quarter = idx
                break
        if three_quarter is None:
            return 0.0

        end = samples[-1].numeric_value
        last_quarter_range = abs(end - samples[three_quarter].numeric_value)
        total_range = abs(end - samples[0].numeric_value)
        return _quarter_share(last_quarter_range, total_range)

    def inverted_confidence(self, samples: Sequence[ParameterSample]) -> float:
        """Fires when the value at 1.0 is strictly below the value at 0.0."""
        if not _boundaries_numeric(samples):
            return 0.0

        start = samples[0].numeric_value
        end = samples[-1].numeric_value
        if end >= start:
            return 0.0

        largest = max(abs(start), abs(end))
        if largest == 0:
            return 0.0
        return min(abs(start - end) / largest, SCALING_CONFIDENCE_CAP)

    def scores(self, samples: Sequence[ParameterSample]) -> Dict[ScalingType, float]:
        """Independent score for every candidate, in priority order."""
        return {
            ScalingType.LINEAR: self.linear_confidence(samples),
            ScalingType.LOGARITHMIC: self.logarithmic_confidence(samples),
            ScalingType.EXPONENTIAL: self.exponential_confidence(samples),
            ScalingType.INVERTED: self.inverted_confidence(samples),
        }

    def analyze(self, samples: Sequence[ParameterSample]) -> ScalingResult:
        """Pick the best-evidenced shape.

        A confidently inverted curve is never reported as linear, even though
        a straight falling line also has a constant rate of change.

        Returns:
            The highest-scoring shape if its score exceeds the minimum
            confidence, otherwise UNKNOWN at 0.0
        """
        scores = self.scores(samples)

        candidates = SCALING_PRIORITY
        if scores[ScalingType.INVERTED] > MIN_SCALING_CONFIDENCE:
            candidates = tuple(s for s in SCALING_PRIORITY if s is not ScalingType.LINEAR)

        best_type = ScalingType.UNKNOWN
        best_score = MIN_SCALING_CONFIDENCE
        for scaling in candidates:
            if scores[scaling] > best_score:
                best_type = scaling
                best_score = scores[scaling]

        if best_type is ScalingType.UNKNOWN:
            return ScalingResult(ScalingType.UNKNOWN, 0.0, scores)
        return ScalingResult(best_type, best_score, scores)

    def _first_quarter_confidence(self, samples: Sequence[ParameterSample]) -> float:
        indices = numeric_indices(samples)
        if len(indices) < MIN_CURVE_SAMPLES or not _boundaries_numeric(samples):
            return 0.0

        first_quarter = None
        midpoint = None
        for idx in indices:
            value = samples[idx].normalized_value
            if first_quarter is None and value >= FIRST_QUARTER:
                first_quarter = idx
            if midpoint is None and value >= MIDPOINT:
                midpoint = idx
                break
        if first_quarter is None or midpoint is None:
            return 0.0

        start = samples[0].numeric_value
        first_quarter_range = abs(samples[first_quarter].numeric_value - start)
        total_range = abs(samples[-1].numeric_value - start)
        return _quarter_share(first_quarter_range, total_range)

    def _geometric_confidence(self, samples: Sequence[ParameterSample]) -> float:
        """Fit of a rising geometric progression, only when it beats the linear fit."""
        indices = numeric_indices(samples)
        if len(indices) < MIN_CURVE_SAMPLES or not _boundaries_numeric(samples):
            return 0.0
        if any(samples[i].numeric_value <= 0 for i in indices):
            return 0.0

        log_rates, n_pairs = consecutive_rates(samples, transform=np.log)
        if n_pairs < MIN_LINEAR_PAIRS or log_rates.size == 0 or mean_rate(log_rates) <= 0:
            return 0.0

        raw_rates, _ = consecutive_rates(samples)
        log_fit = rate_constancy(log_rates)
        if log_fit <= rate_constancy(raw_rates):
            return 0.0
        return min(log_fit, SCALING_CONFIDENCE_CAP)


def analyze_scaling(samples: Sequence[ParameterSample]) -> Tuple[ScalingType, float]:
    """Convenience wrapper returning ``(scaling, confidence)``."""
    return ScalingAnalyzer().analyze(samples).as_tuple()
