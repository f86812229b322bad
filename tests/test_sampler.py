"""Tests for sample plans, numeric extraction and the sequential sampler."""

import math
import threading

import pytest
from hypothesis import given, strategies as st

from fxprofile.constants import DEFAULT_SAMPLE_POINTS, DENSE_SAMPLE_POINTS
from fxprofile.errors import InvalidSamplePointsError, SamplingAborted
from fxprofile.sampling import (
    DefaultPlan,
    DensePlan,
    Sampler,
    StepPlan,
    TogglePlan,
    extract_numeric_value,
    plan_by_name,
    plan_for_parameter,
    validate_points,
)


class TestExtractNumericValue:
    """Tests for parsing numbers out of display strings."""

    @pytest.mark.parametrize("text,expected", [
        ("6.8 dB", 6.8),
        ("-12 dB", -12.0),
        ("−3.5 dB", -3.5),
        ("100", 100.0),
        ("0.25", 0.25),
        ("1.5 kHz", 1.5),
        ("Ratio 4:1", 4.0),
        ("+6.0 dB", 6.0),
    ])
    def test_numeric_strings(self, text, expected):
        """Test the first number in the string is extracted with its sign."""
        value, is_numeric = extract_numeric_value(text)
        assert is_numeric
        assert value == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "Off", "Sine", "inf", "nan", "-"])
    def test_non_numeric_strings(self, text):
        """Test labels yield (0.0, False)."""
        assert extract_numeric_value(text) == (0.0, False)

    def test_minus_must_touch_digits(self):
        """Test a dash separated from the number is not a sign."""
        value, is_numeric = extract_numeric_value("Mix - 50 %")
        assert is_numeric
        assert value == 50.0

    def test_single_decimal_point(self):
        """Test scanning stops at a second decimal point."""
        value, _ = extract_numeric_value("v1.2.3")
        assert value == pytest.approx(1.2)

    @given(st.text(max_size=20))
    def test_never_raises(self, text):
        """Test extraction is total over arbitrary text."""
        value, is_numeric = extract_numeric_value(text)
        assert math.isfinite(value)
        if not is_numeric:
            assert value == 0.0


class TestValidatePoints:
    """Tests for sample point validation."""

    def test_valid_points(self):
        assert validate_points([0, 0.5, 1]) == (0.0, 0.5, 1.0)

    @pytest.mark.parametrize("points", [
        [],
        [0.0, 0.5],
        [0.1, 1.0],
        [0.0, 0.6, 0.4, 1.0],
        [0.0, 0.5, 0.5, 1.0],
        [0.0, 1.5],
        [0.0, float("nan"), 1.0],
    ])
    def test_invalid_points(self, points):
        """Test malformed point sets raise InvalidSamplePointsError."""
        with pytest.raises(InvalidSamplePointsError):
            validate_points(points)

    def test_error_is_value_error(self):
        """Test callers catching ValueError also see invalid points."""
        with pytest.raises(ValueError):
            validate_points([])


class TestSamplePlans:
    """Tests for the sample plans."""

    def test_default_plan(self):
        points = DefaultPlan().points()
        assert len(points) == 15
        assert points[0] == 0.0 and points[-1] == 1.0
        assert validate_points(points) == points

    def test_dense_plan(self):
        points = DensePlan().points()
        assert len(points) == 33
        assert validate_points(points) == DENSE_SAMPLE_POINTS

    def test_toggle_plan(self):
        assert TogglePlan().points() == (0.0, 1.0)

    def test_step_plan_exact_division(self):
        """Test a step of 0.25 samples every quarter."""
        assert StepPlan(0.25).points() == (0.0, 0.25, 0.5, 0.75, 1.0)

    def test_step_plan_appends_end(self):
        """Test 1.0 is added when the step does not divide the range."""
        points = StepPlan(0.3).points()
        assert points == pytest.approx((0.0, 0.3, 0.6, 0.9, 1.0))
        assert points[-1] == 1.0

    def test_step_plan_tenths(self):
        """Test float accumulation does not duplicate the end point."""
        points = StepPlan(0.1).points()
        assert len(points) == 11
        assert points[-1] == 1.0

    def test_step_plan_thins_large_grids(self):
        points = StepPlan(1e-5, max_samples=64).points()
        assert len(points) == 64
        assert points[0] == 0.0 and points[-1] == 1.0

    @pytest.mark.parametrize("step", [0.0, -0.1, 1.5])
    def test_step_plan_rejects_bad_step(self, step):
        with pytest.raises(ValueError, match="Step must be"):
            StepPlan(step)

    def test_plan_by_name(self):
        assert plan_by_name("default").method_name() == "default"
        assert plan_by_name("dense").method_name() == "dense"
        with pytest.raises(ValueError, match="Unknown sample plan"):
            plan_by_name("sobol")

    def test_plan_for_parameter(self):
        """Test plan choice from host step metadata."""
        assert isinstance(plan_for_parameter(is_toggle=True), TogglePlan)
        assert isinstance(plan_for_parameter(small_step=0.1), StepPlan)
        assert isinstance(plan_for_parameter(small_step=0.0), DefaultPlan)
        assert isinstance(plan_for_parameter(fallback="dense"), DensePlan)


class TestSampler:
    """Tests for the sequential sampler."""

    def test_samples_every_point_in_order(self):
        calls = []

        def query(x):
            calls.append(x)
            return f"{x * 10:.1f} dB"

        samples = Sampler().sample(query)

        assert calls == list(DEFAULT_SAMPLE_POINTS)
        assert [s.normalized_value for s in samples] == list(DEFAULT_SAMPLE_POINTS)
        assert samples[-1].formatted_value == "10.0 dB"
        assert samples[-1].numeric_value == 10.0
        assert samples[-1].is_numeric

    def test_explicit_points_override_plan(self):
        samples = Sampler(DensePlan()).sample(lambda x: "x", points=[0.0, 1.0])
        assert len(samples) == 2

    def test_failed_query_becomes_gap(self):
        """Test a raising query yields an empty, non-numeric sample."""
        def query(x):
            if x == 0.5:
                raise RuntimeError("host busy")
            return f"{x:.2f}"

        samples = Sampler().sample(query)
        gap = next(s for s in samples if s.normalized_value == 0.5)

        assert gap.formatted_value == ""
        assert gap.is_gap
        assert not gap.is_numeric
        assert len(samples) == len(DEFAULT_SAMPLE_POINTS)

    def test_none_becomes_gap(self):
        samples = Sampler().sample(lambda x: None)
        assert all(s.is_gap for s in samples)

    def test_invalid_points_raise_before_querying(self):
        calls = []
        with pytest.raises(InvalidSamplePointsError):
            Sampler().sample(calls.append, points=[0.5, 1.0])
        assert calls == []

    def test_abort_discards_partial_samples(self):
        """Test a set abort event cancels the sweep between points."""
        abort = threading.Event()
        calls = []

        def query(x):
            calls.append(x)
            if len(calls) == 3:
                abort.set()
            return "1"

        with pytest.raises(SamplingAborted) as exc_info:
            Sampler().sample(query, abort=abort)

        assert exc_info.value.completed == 3
        assert len(calls) == 3

    def test_abort_before_start(self):
        abort = threading.Event()
        abort.set()
        with pytest.raises(SamplingAborted):
            Sampler().sample(lambda x: "1", abort=abort)

    def test_timeout(self):
        """Test an elapsed timeout cancels the sweep."""
        with pytest.raises(SamplingAborted, match="timeout"):
            Sampler().sample(lambda x: "1", timeout=-1.0)
