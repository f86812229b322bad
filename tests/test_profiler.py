"""Tests for the sampling-to-cache pipeline."""

import logging
import threading
import time

import pytest

from fxprofile.analysis import classify
from fxprofile.cache import InMemoryProfileStore, ProfileCache
from fxprofile.errors import ProfileStoreError, SamplingAborted
from fxprofile.parameters import ParameterIdentity, ParameterType, ScalingType
from fxprofile.profiler import AnalysisReport, ParameterProfiler, build_profile
from fxprofile.sampling import StepPlan, TogglePlan

from conftest import binary_query, enum_query, inverted_query, linear_query, log_query, make_samples


class CountingQuery:
    """Wraps a query function and counts host calls."""

    def __init__(self, fn):
        self.fn = fn
        self.calls = 0

    def __call__(self, x):
        self.calls += 1
        return self.fn(x)


class FailingStore(InMemoryProfileStore):
    """Store that refuses writes for selected parameter indices."""

    def __init__(self, failing):
        super().__init__()
        self.failing = set(failing)

    def put(self, profile):
        if profile.identity.parameter_index in self.failing:
            raise ProfileStoreError("disk full")
        super().put(profile)


@pytest.fixture
def cache():
    return ProfileCache(InMemoryProfileStore())


@pytest.fixture
def profiler(cache):
    return ParameterProfiler(cache)


def host(owner, index, x):
    """A five-parameter plugin."""
    queries = [binary_query, enum_query, linear_query, log_query, inverted_query]
    return queries[index](x)


class TestBuildProfile:
    def test_enumerated_profile(self, identity):
        samples = make_samples(enum_query)
        profile = build_profile(identity, samples, classify(samples), name="Waveform")

        assert profile.enum_values == ("Sine", "Saw", "Square", "Noise")
        assert profile.min_formatted == "Sine"
        assert profile.max_formatted == "Noise"
        assert profile.name == "Waveform"
        assert profile.unit is None

    def test_continuous_profile(self, identity):
        samples = make_samples(linear_query)
        profile = build_profile(identity, samples, classify(samples))

        assert profile.enum_values is None
        assert profile.unit == "dB"
        assert profile.min_formatted == "0.0 dB"
        assert profile.max_formatted == "10.0 dB"


class TestAnalyzeParameter:
    """Tests for single-parameter profiling."""

    def test_profiles_and_caches(self, profiler, cache, identity):
        profile = profiler.analyze_parameter(identity, linear_query, name="Gain")

        assert profile.classification.type is ParameterType.CONTINUOUS
        assert profile.classification.scaling is ScalingType.LINEAR
        assert cache.get(identity) == profile

    def test_cached_profile_is_reused(self, profiler, identity):
        """Test a cached profile answers without touching the host."""
        query = CountingQuery(linear_query)
        first = profiler.analyze_parameter(identity, query)
        calls = query.calls

        second = profiler.analyze_parameter(identity, query)

        assert second == first
        assert query.calls == calls

    def test_refresh_resamples(self, profiler, cache, identity):
        profiler.analyze_parameter(identity, linear_query)
        refreshed = profiler.refresh(identity, binary_query)

        assert refreshed.classification.type is ParameterType.BINARY
        assert cache.get(identity) == refreshed

    def test_custom_points(self, profiler, identity):
        profile = profiler.analyze_parameter(identity, binary_query, points=TogglePlan().points())
        assert len(profile.samples) == 2
        assert profile.classification.type is ParameterType.BINARY

    def test_abort_caches_nothing(self, profiler, cache, identity):
        abort = threading.Event()
        abort.set()
        with pytest.raises(SamplingAborted):
            profiler.analyze_parameter(identity, linear_query, abort=abort)
        assert cache.get(identity) is None

    def test_logs_analysis_block(self, profiler, identity, caplog):
        with caplog.at_level(logging.INFO, logger="fxprofile.profiler"):
            profiler.analyze_parameter(identity, linear_query, name="Gain")

        assert "Detected type: LINEAR" in caplog.text
        assert "Numeric values:" in caplog.text


class TestAnalyzeOwner:
    """Tests for profiling every parameter of a plugin."""

    def test_report(self, profiler, cache, owner):
        report = profiler.analyze_owner(owner, host, 5, names=["Bypass", "Wave", "Gain", "Freq", "Mix"])

        labels = [p.classification.label for p in report.profiles]
        assert labels == ["BINARY", "ENUMERATED", "LINEAR", "LOGARITHMIC", "INVERTED"]
        assert [p.name for p in report.profiles] == ["Bypass", "Wave", "Gain", "Freq", "Mix"]
        assert report.failed == {}
        assert len(cache.list_profiles(owner)) == 5

    def test_type_distribution(self, profiler, owner):
        report = profiler.analyze_owner(owner, lambda o, i, x: binary_query(x) if i < 3 else linear_query(x), 4)

        assert report.type_distribution() == [("BINARY", 3, 75.0), ("LINEAR", 1, 25.0)]

    def test_frame(self, profiler, owner):
        report = profiler.analyze_owner(owner, host, 5)
        frame = report.to_frame()

        assert frame.height == 5
        assert frame["label"].to_list()[2] == "LINEAR"
        assert frame["unit"].to_list()[2] == "dB"

    def test_store_failure_is_recorded(self, owner):
        """Test one unwritable parameter does not stop the run."""
        profiler = ParameterProfiler(ProfileCache(FailingStore({1})))
        report = profiler.analyze_owner(owner, host, 3)

        assert [p.identity.parameter_index for p in report.profiles] == [0, 2]
        assert report.failed == {1: "disk full"}

    def test_per_parameter_plans(self, profiler, owner):
        plans = {0: TogglePlan(), 2: StepPlan(0.25)}
        report = profiler.analyze_owner(owner, host, 3, plans=plans)

        assert [len(p.samples) for p in report.profiles] == [2, 15, 5]

    def test_abort_stops_run(self, profiler, owner):
        abort = threading.Event()
        abort.set()
        with pytest.raises(SamplingAborted):
            profiler.analyze_owner(owner, host, 5, abort=abort)

    def test_timeout_applies_per_parameter(self, profiler, cache, owner):
        """Test a slow parameter times out while earlier ones stay cached."""
        def slow_host(o, i, x):
            if i == 1:
                time.sleep(0.1)
            return linear_query(x)

        with pytest.raises(SamplingAborted, match="timeout"):
            profiler.analyze_owner(owner, slow_host, 2, timeout=0.5)

        assert cache.get(ParameterIdentity(owner, 0)) is not None
        assert cache.get(ParameterIdentity(owner, 1)) is None

    def test_empty_owner(self, profiler, owner):
        report = profiler.analyze_owner(owner, host, 0)
        assert report.profiles == []
        assert report.type_distribution() == []

    def test_negative_count(self, profiler, owner):
        with pytest.raises(ValueError):
            profiler.analyze_owner(owner, host, -1)

    def test_uses_cache_between_runs(self, profiler, owner):
        counting = CountingQuery(lambda x: linear_query(x))

        def query(o, i, x):
            return counting(x)

        profiler.analyze_owner(owner, query, 2)
        calls = counting.calls
        profiler.analyze_owner(owner, query, 2)
        assert counting.calls == calls

        profiler.analyze_owner(owner, query, 2, refresh=True)
        assert counting.calls == 2 * calls


class TestAnalysisReport:
    def test_log_summary(self, owner, caplog):
        report = AnalysisReport(owner=owner, failed={4: "disk full"})
        with caplog.at_level(logging.INFO, logger="fxprofile.profiler"):
            report.log_summary()
        assert "Total parameters analyzed: 0" in caplog.text
        assert "Failed parameters: [4]" in caplog.text
