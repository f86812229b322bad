"""Global constants for fxprofile.

This module centralizes the heuristic thresholds used by the classifier and
scaling analyzer. They were chosen empirically against a handful of real
plugins and are kept behind names so they can be recalibrated in one place.
"""

from typing import Tuple

# Type classifier
BINARY_MAX_DISTINCT: int = 2
BINARY_CONFIDENCE: float = 0.95
ENUM_MAX_DISTINCT: int = 10
ENUM_CONFIDENCE: float = 0.90
UNIT_FALLBACK_CONFIDENCE: float = 0.7

# Scaling analyzer
MIN_SCALING_CONFIDENCE: float = 0.5
QUARTER_SHARE_CUTOFF: float = 0.4
QUARTER_SHARE_GAIN: float = 2.0
SCALING_CONFIDENCE_CAP: float = 0.9
RATE_VARIANCE_EPSILON: float = 1e-4
FIRST_QUARTER: float = 0.25
MIDPOINT: float = 0.5
LAST_QUARTER: float = 0.75
MIN_LINEAR_SAMPLES: int = 3
MIN_LINEAR_PAIRS: int = 2
MIN_CURVE_SAMPLES: int = 4

# Downstream consumers
DEFAULT_MIN_CONFIDENCE: float = 0.75

# Sample plans
DEFAULT_SAMPLE_POINTS: Tuple[float, ...] = (
    0.0, 0.01, 0.05, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 0.95, 0.99, 1.0,
)

DENSE_SAMPLE_POINTS: Tuple[float, ...] = (
    0.0,
    0.01, 0.02, 0.03, 0.04, 0.05, 0.06, 0.07, 0.08, 0.09,
    0.1, 0.15, 0.2, 0.25, 0.3, 0.35, 0.4, 0.45,
    0.5, 0.55, 0.6, 0.65, 0.7, 0.75, 0.8, 0.85, 0.9, 0.95,
    0.96, 0.97, 0.98, 0.99,
    1.0,
)

TOGGLE_SAMPLE_POINTS: Tuple[float, ...] = (0.0, 1.0)

# Step plans with tiny steps can explode; the host round-trips are synchronous.
MAX_STEP_SAMPLES: int = 1024

# Stores
DEFAULT_DB_PATH: str = "fxprofile.db"
