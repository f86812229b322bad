"""Drive a sampling primitive over a set of normalized points.

The host primitive is not thread-safe, so a sweep is a strictly sequential
series of blocking calls made on the caller's thread.
"""

from typing import Callable, List, Optional, Sequence, Tuple
import logging
import math
import threading
import time

from ..errors import SamplingAborted
from ..parameters import ParameterSample
from .base import SamplePlan, validate_points
from .plans import DefaultPlan

logger = logging.getLogger(__name__)

# normalized value -> display string
QueryFn = Callable[[float], str]

_MINUS_SIGNS = ("-", "−")


def extract_numeric_value(formatted: str) -> Tuple[float, bool]:
    """Parse a number out of a display string.

    Tries a direct float parse of the whole string first. Failing that, scans
    for the first run of digits (with at most one decimal point after a digit);
    a minus sign immediately before the run is kept.

    Args:
        formatted: Display string, e.g. "6.8 dB", "-12 dB", "Off"

    Returns:
        (value, is_numeric); value is 0.0 when nothing numeric was found

    Example:
        >>> extract_numeric_value("6.8 dB")
        (6.8, True)
        >>> extract_numeric_value("Off")
        (0.0, False)
    """
    if not formatted:
        return 0.0, False

    try:
        value = float(formatted)
    except ValueError:
        pass
    else:
        # float() accepts "inf" and "nan"; those are labels, not numbers
        if math.isfinite(value):
            return value, True

    chars: List[str] = []
    seen_digit = False
    seen_point = False
    negative = False
    for i, char in enumerate(formatted):
        if char.isdigit() and char.isascii():
            if not seen_digit:
                negative = i > 0 and formatted[i - 1] in _MINUS_SIGNS
            chars.append(char)
            seen_digit = True
        elif char == "." and seen_digit and not seen_point:
            chars.append(char)
            seen_point = True
        elif seen_digit:
            break

    if not seen_digit:
        return 0.0, False

    value = float("".join(chars))
    if not math.isfinite(value):
        return 0.0, False
    return (-value if negative else value), True


class Sampler:
    """Sequential sampler over a host query function.

    Example:
        >>> sampler = Sampler()
        >>> samples = sampler.sample(lambda x: f"{x * 10:.1f} dB")
        >>> samples[-1].formatted_value
        '10.0 dB'
    """

    def __init__(self, plan: Optional[SamplePlan] = None):
        """Initialize sampler.

        Args:
            plan: Sample plan used when ``sample`` is called without points
        """
        self.plan = plan or DefaultPlan()

    def sample(
        self,
        query: QueryFn,
        points: Optional[Sequence[float]] = None,
        abort: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> List[ParameterSample]:
        """Query the parameter at every point in order.

        A point whose query raises or returns an empty string still yields a
        sample, with an empty display string and ``is_numeric=False``.

        Args:
            query: Host primitive mapping a normalized value to a display string
            points: Query points; defaults to the sampler's plan
            abort: Event checked before each query; when set the sweep is cancelled
            timeout: Seconds after which the sweep is cancelled, checked between points

        Returns:
            One sample per point, in point order

        Raises:
            InvalidSamplePointsError: If points are malformed
            SamplingAborted: If cancelled; partial samples are discarded
        """
        frozen = validate_points(points if points is not None else self.plan.points())
        deadline = time.monotonic() + timeout if timeout is not None else None

        samples: List[ParameterSample] = []
        for point in frozen:
            if abort is not None and abort.is_set():
                logger.info(f"Sampling aborted after {len(samples)} of {len(frozen)} points")
                raise SamplingAborted("Sampling aborted", completed=len(samples))
            if deadline is not None and time.monotonic() > deadline:
                logger.info(f"Sampling timed out after {len(samples)} of {len(frozen)} points")
                raise SamplingAborted(f"Sampling exceeded {timeout}s timeout", completed=len(samples))

            samples.append(self._sample_point(query, point))

        return samples

    def _sample_point(self, query: QueryFn, point: float) -> ParameterSample:
        try:
            formatted = query(point)
        except Exception as e:
            logger.warning(f"Failed to get formatted value for point {point:.2f}: {e}")
            formatted = ""

        if formatted is None:
            formatted = ""
        formatted = str(formatted)

        numeric, is_numeric = extract_numeric_value(formatted)
        return ParameterSample(
            normalized_value=point,
            formatted_value=formatted,
            numeric_value=numeric,
            is_numeric=is_numeric,
        )
