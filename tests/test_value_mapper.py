"""Tests for normalized ↔ display value translation."""

import pytest
from hypothesis import given, strategies as st

from fxprofile.analysis import classify
from fxprofile.constants import DEFAULT_SAMPLE_POINTS
from fxprofile.mapping import ValueMapper, format_number
from fxprofile.parameters import (
    Classification,
    OwnerIdentity,
    ParameterIdentity,
    ParameterProfile,
    ParameterType,
    ScalingType,
)
from fxprofile.profiler import build_profile

from conftest import (
    binary_query,
    enum_query,
    inverted_query,
    linear_query,
    log_query,
    make_sample,
    make_samples,
)


def mapper_for(identity, query):
    samples = make_samples(query)
    return ValueMapper(build_profile(identity, samples, classify(samples)))


class TestFormatNumber:
    @pytest.mark.parametrize("value,expected", [
        (5.0, "5"),
        (6.25, "6.25"),
        (-0.00001, "0"),
        (1 / 3, "0.3333"),
        (-12.5, "-12.5"),
    ])
    def test_format(self, value, expected):
        assert format_number(value) == expected


class TestTableMapping:
    """Tests for binary and enumerated parameters."""

    def test_binary_round_trip(self, identity):
        mapper = mapper_for(identity, binary_query)
        assert mapper.to_formatted(0.0) == "Off"
        assert mapper.to_formatted(1.0) == "On"

        on = mapper.to_normalized("On")
        assert on is not None and on >= 0.5
        assert mapper.to_formatted(on) == "On"

    def test_binary_off_grid_uses_nearest(self, identity):
        mapper = mapper_for(identity, binary_query)
        assert mapper.to_formatted(0.97) == "On"
        assert mapper.to_formatted(0.02) == "Off"

    def test_enum_lookup(self, identity):
        """Test each mode maps to a point inside its own span."""
        mapper = mapper_for(identity, enum_query)
        for mode in ("Sine", "Saw", "Square", "Noise"):
            point = mapper.to_normalized(mode)
            assert point is not None
            assert enum_query(point) == mode
            assert mapper.to_formatted(point) == mode

    def test_unknown_string(self, identity):
        mapper = mapper_for(identity, enum_query)
        assert mapper.to_normalized("Triangle") is None

    def test_table_requires_exact_match(self, identity):
        mapper = mapper_for(identity, binary_query)
        assert mapper.to_normalized("on") is None


class TestContinuousMapping:
    """Tests for continuous parameters."""

    def test_captured_point_returns_captured_string(self, identity):
        mapper = mapper_for(identity, linear_query)
        assert mapper.to_formatted(0.5) == "5.0 dB"

    def test_interpolated_display(self, identity):
        """Test off-grid points interpolate the numeric value without unit."""
        mapper = mapper_for(identity, linear_query)
        assert mapper.to_formatted(0.55) == "5.5"
        assert mapper.to_formatted(0.625) == "6.25"

    def test_parse_and_interpolate(self, identity):
        mapper = mapper_for(identity, linear_query)
        assert mapper.to_normalized("5.0 dB") == 0.5
        assert mapper.to_normalized("6.8 dB") == pytest.approx(0.68)
        assert mapper.to_normalized("6.8") == pytest.approx(0.68)

    def test_out_of_range_display(self, identity):
        mapper = mapper_for(identity, linear_query)
        assert mapper.to_normalized("12 dB") is None
        assert mapper.to_normalized("-1 dB") is None
        assert mapper.to_normalized("loud") is None

    def test_inverted_parameter(self, identity):
        """Test descending curves invert correctly."""
        mapper = mapper_for(identity, inverted_query)
        assert mapper.is_monotonic
        assert mapper.to_normalized("0.25") == pytest.approx(0.75)
        assert mapper.to_formatted(0.75) == "0.25"

    def test_log_parameter_between_samples(self, identity):
        mapper = mapper_for(identity, log_query)
        value = mapper.to_normalized("1000 Hz")
        assert value is not None
        assert 0.5 < value < 0.6

    def test_non_monotonic_uses_nearest_sample(self, identity):
        points = [0.0, 0.25, 0.5, 0.75, 1.0]
        values = [0, 10, 5, 20, 15]
        samples = [make_sample(x, f"{v}", v) for x, v in zip(points, values)]
        profile = ParameterProfile(
            identity,
            Classification(ParameterType.CONTINUOUS, ScalingType.UNKNOWN, 0.0),
            samples,
        )
        mapper = ValueMapper(profile)

        assert not mapper.is_monotonic
        assert mapper.to_normalized("19") == 0.75

    def test_rejects_out_of_range_normalized(self, identity):
        mapper = mapper_for(identity, linear_query)
        with pytest.raises(ValueError, match="Normalized value"):
            mapper.to_formatted(1.5)
        with pytest.raises(ValueError):
            mapper.to_formatted(float("nan"))


class TestEmptyProfiles:
    def test_no_samples(self, identity):
        mapper = ValueMapper(ParameterProfile(identity, Classification.unknown()))
        assert mapper.to_formatted(0.5) is None
        assert mapper.to_normalized("anything") is None

    def test_gaps_are_not_captured(self, identity):
        samples = [make_sample(0.0, "Off"), make_sample(0.5, ""), make_sample(1.0, "On")]
        profile = ParameterProfile(identity, Classification(ParameterType.BINARY, None, 0.95), samples)
        mapper = ValueMapper(profile)
        assert mapper.to_normalized("") is None
        assert mapper.to_formatted(0.5) in ("Off", "On")


class TestCapturedPoints:
    """Property: every captured point translates back to its own display string."""

    @given(
        st.sampled_from(DEFAULT_SAMPLE_POINTS),
        st.sampled_from([binary_query, enum_query, linear_query, log_query, inverted_query]),
    )
    def test_captured_points_round_trip(self, point, query):
        identity = ParameterIdentity(OwnerIdentity("ReaComp", "VST3"), 0)
        mapper = mapper_for(identity, query)
        captured = query(point)

        assert mapper.to_formatted(point) == captured
        back = mapper.to_normalized(captured)
        assert back is not None
        assert mapper.to_formatted(back) == captured
