"""Bidirectional translation between normalized and display values.

A ValueMapper is built once from a ParameterProfile and only reads it.
Binary, enumerated and unclassified parameters use exact lookup tables;
continuous parameters interpolate over the sorted sample arrays.
"""

from typing import Dict, List, Optional
import logging
import math

import numpy as np

from ..parameters import ParameterProfile, ParameterType
from ..sampling import extract_numeric_value

logger = logging.getLogger(__name__)


def format_number(value: float, decimals: int = 4) -> str:
    """Render an interpolated number without a unit.

    Trailing zeros are trimmed, so 5.0 renders as "5" and 6.25 as "6.25".
    """
    text = f"{value:.{decimals}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


class ValueMapper:
    """Answer normalized → display and display → normalized queries for one profile.

    Lookups that cannot be answered return ``None``; callers should fall back
    to the value they already have rather than apply a guessed change.

    Example:
        >>> mapper = ValueMapper(profile)
        >>> mapper.to_formatted(0.0)
        'Off'
        >>> mapper.to_normalized("On")
        1.0
    """

    def __init__(self, profile: ParameterProfile):
        """Build lookup structures for the profile's parameter type.

        Raises:
            ValueError: If the profile has an unsupported parameter type
        """
        self.profile = profile
        self.kind = profile.classification.type

        captured = [s for s in profile.samples if not s.is_gap]
        self._by_point: Dict[float, str] = {s.normalized_value: s.formatted_value for s in captured}
        self._points = np.array([s.normalized_value for s in captured], dtype=float)
        self._formatted: List[str] = [s.formatted_value for s in captured]

        if self.kind is ParameterType.BINARY or self.kind is ParameterType.ENUMERATED:
            self._build_table()
        elif self.kind is ParameterType.CONTINUOUS:
            self._build_continuous()
        elif self.kind is ParameterType.UNKNOWN:
            self._build_table()
        else:
            raise ValueError(f"Unsupported parameter type: {self.kind}")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _build_table(self) -> None:
        """Map each display string to the captured point nearest the middle of its span."""
        spans: Dict[str, List[float]] = {}
        for point, formatted in zip(self._points, self._formatted):
            spans.setdefault(formatted, []).append(float(point))

        self._by_value: Dict[str, float] = {}
        for formatted, points in spans.items():
            middle = (points[0] + points[-1]) / 2.0
            self._by_value[formatted] = min(points, key=lambda p: abs(p - middle))

    def _build_continuous(self) -> None:
        self._by_value = {}
        for point, formatted in zip(self._points, self._formatted):
            self._by_value.setdefault(formatted, float(point))

        numeric = [s for s in self.profile.samples if s.is_numeric]
        self._xs = np.array([s.normalized_value for s in numeric], dtype=float)
        self._ys = np.array([s.numeric_value for s in numeric], dtype=float)

        steps = np.diff(self._ys)
        if np.all(steps >= 0):
            self._direction = 1
        elif np.all(steps <= 0):
            self._direction = -1
        else:
            self._direction = 0
            logger.debug(f"{self.profile.identity}: numeric values are not monotonic; using nearest-sample lookup")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_monotonic(self) -> bool:
        """Whether continuous lookups interpolate (True) or use the nearest sample."""
        return self.kind is ParameterType.CONTINUOUS and self._direction != 0

    def to_formatted(self, normalized: float) -> Optional[str]:
        """Display string for a normalized value.

        Captured points return their captured string exactly. Otherwise
        table types return the nearest captured string and continuous
        parameters return the linearly interpolated number, without unit.

        Args:
            normalized: Value in [0, 1]

        Returns:
            Display string, or None if the profile has no captured values

        Raises:
            ValueError: If normalized is outside [0, 1]
        """
        normalized = float(normalized)
        if math.isnan(normalized) or not (0.0 <= normalized <= 1.0):
            raise ValueError(f"Normalized value must be in [0, 1], got {normalized}")

        exact = self._by_point.get(normalized)
        if exact is not None:
            return exact

        if self.kind is ParameterType.CONTINUOUS and self._xs.size >= 2:
            return format_number(float(np.interp(normalized, self._xs, self._ys)))

        return self._nearest_formatted(normalized)

    def to_normalized(self, formatted: str) -> Optional[float]:
        """Normalized value for a display string.

        Table types require an exact string match. Continuous parameters
        parse the number and interpolate between the bracketing samples
        when the sampled values are monotonic, else use the nearest sample.

        Args:
            formatted: Display string, e.g. "On" or "6.8 dB"

        Returns:
            Normalized value in [0, 1], or None if no reasonable match exists
        """
        formatted = str(formatted)
        exact = self._by_value.get(formatted)
        if exact is not None:
            return exact

        if self.kind is not ParameterType.CONTINUOUS:
            return None

        value, is_numeric = extract_numeric_value(formatted.strip())
        if not is_numeric or self._ys.size == 0:
            return None

        low = float(self._ys.min())
        high = float(self._ys.max())
        tolerance = 1e-9 * max(1.0, high - low)
        if value < low - tolerance or value > high + tolerance:
            return None

        if self._direction == 0:
            nearest = int(np.argmin(np.abs(self._ys - value)))
            return float(self._xs[nearest])

        xs, ys = self._xs, self._ys
        if self._direction < 0:
            xs, ys = xs[::-1], ys[::-1]
        return self._interpolate_normalized(xs, ys, value)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _nearest_formatted(self, normalized: float) -> Optional[str]:
        if self._points.size == 0:
            return None
        nearest = int(np.argmin(np.abs(self._points - normalized)))
        return self._formatted[nearest]

    @staticmethod
    def _interpolate_normalized(xs: np.ndarray, ys: np.ndarray, value: float) -> float:
        """Invert a non-decreasing ys over xs by binary search and linear interpolation."""
        idx = int(np.searchsorted(ys, value, side="left"))
        if idx >= ys.size:
            return float(xs[-1])
        if idx == 0 or ys[idx] == value:
            return float(xs[idx])

        lo, hi = idx - 1, idx
        span = ys[hi] - ys[lo]
        if span == 0:
            return float(xs[lo])
        fraction = (value - ys[lo]) / span
        result = xs[lo] + fraction * (xs[hi] - xs[lo])
        return float(min(1.0, max(0.0, result)))
