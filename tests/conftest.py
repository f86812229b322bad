"""Shared fixtures: synthetic host query functions and sampled parameters."""

import pytest

from fxprofile.parameters import OwnerIdentity, ParameterIdentity, ParameterSample
from fxprofile.sampling import Sampler


def make_samples(query, points=None):
    """Sample a query function with the default plan."""
    return Sampler().sample(query, points=points)


def make_sample(normalized, formatted, numeric=None):
    """Build a single sample; numeric=None marks it non-numeric."""
    if numeric is None:
        return ParameterSample(normalized, formatted)
    return ParameterSample(normalized, formatted, float(numeric), True)


# ============================================================================
# Host query functions
# ============================================================================


def binary_query(x):
    return "On" if x >= 0.5 else "Off"


def enum_query(x):
    modes = ["Sine", "Saw", "Square", "Noise"]
    return modes[min(int(x * 4), 3)]


def linear_query(x):
    return f"{x * 10:.1f} dB"


def log_query(x):
    return f"{20 * 1000 ** x:.2f} Hz"


def inverted_query(x):
    return f"{1 - x:.2f}"


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def owner():
    """A typical plugin owner."""
    return OwnerIdentity("ReaComp", "VST3")


@pytest.fixture
def identity(owner):
    return ParameterIdentity(owner, 0)


@pytest.fixture
def binary_samples():
    """Off below 0.5, On above."""
    return make_samples(binary_query)


@pytest.fixture
def enum_samples():
    """Four waveform names over the 15 default points."""
    return make_samples(enum_query)


@pytest.fixture
def linear_samples():
    """0 dB to 10 dB, linear."""
    return make_samples(linear_query)


@pytest.fixture
def log_samples():
    """20 Hz to 20 kHz, geometric."""
    return make_samples(log_query)


@pytest.fixture
def inverted_samples():
    """1.00 down to 0.00."""
    return make_samples(inverted_query)
