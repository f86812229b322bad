"""Numeric helpers shared by the scaling analyzer."""

from typing import Callable, Optional, Sequence, Tuple
import math

import numpy as np

from ..constants import RATE_VARIANCE_EPSILON
from ..parameters import ParameterSample


def numeric_indices(samples: Sequence[ParameterSample]) -> list:
    """Indices of samples that carry a parsed number."""
    return [i for i, s in enumerate(samples) if s.is_numeric]


def consecutive_rates(
    samples: Sequence[ParameterSample],
    transform: Optional[Callable[[np.ndarray], np.ndarray]] = None,
) -> Tuple[np.ndarray, int]:
    """Rates of change between neighbouring numeric samples.

    Only adjacent pairs where both samples are numeric are used; a gap breaks
    the chain rather than bridging it.

    Args:
        samples: Samples ordered by normalized value
        transform: Optional elementwise transform applied to numeric values
            before differencing (e.g. ``np.log``)

    Returns:
        (rates, n_pairs): rates for pairs with a non-zero normalized step, and
        the number of valid numeric pairs before that filter
    """
    if len(samples) < 2:
        return np.empty(0), 0

    x = np.array([s.normalized_value for s in samples], dtype=float)
    y = np.array([s.numeric_value for s in samples], dtype=float)
    ok = np.array([s.is_numeric for s in samples], dtype=bool)

    if transform is not None:
        y = np.where(ok, y, 1.0)
        y = transform(y)

    pair_ok = ok[1:] & ok[:-1]
    dx = np.diff(x)[pair_ok]
    dy = np.diff(y)[pair_ok]
    n_pairs = int(pair_ok.sum())

    nonzero = dx != 0
    return dy[nonzero] / dx[nonzero], n_pairs


def rate_constancy(rates: np.ndarray) -> float:
    """Score how constant a set of rates is.

    Returns ``1 - min(1, var / (mean^2 + eps))``: 1.0 for a perfectly
    constant rate, 0.0 when the spread is at least as large as the mean.
    """
    if rates.size == 0:
        return 0.0
    with np.errstate(over="ignore", invalid="ignore"):
        mean = float(np.mean(rates))
        variance = float(np.var(rates))
    normalized_variance = variance / (mean * mean + RATE_VARIANCE_EPSILON)
    if not math.isfinite(normalized_variance):
        return 0.0
    return 1.0 - min(normalized_variance, 1.0)


def mean_rate(rates: np.ndarray) -> float:
    """Mean rate of change, 0.0 when there are no rates."""
    if rates.size == 0:
        return 0.0
    with np.errstate(over="ignore", invalid="ignore"):
        return float(np.mean(rates))
