"""Exception hierarchy for fxprofile."""


class FxProfileError(Exception):
    """Base class for all fxprofile errors."""


class InvalidSamplePointsError(FxProfileError, ValueError):
    """Sample points are empty, unsorted, outside [0, 1] or miss a boundary."""


class SamplingAborted(FxProfileError):
    """A sample sequence was cancelled before it completed.

    Partial samples are discarded; no profile is built from them.
    """

    def __init__(self, message: str, completed: int = 0):
        super().__init__(message)
        self.completed = completed


class ProfileStoreError(FxProfileError):
    """The persistence store is unavailable or failed an operation.

    Unlike a missing profile (which is reported as ``None``), this is
    retryable.
    """
