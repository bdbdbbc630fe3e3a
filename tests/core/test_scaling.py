# tests/core/test_scaling.py
import pytest

from contextualizer.core.translation.scaling import (
    apply_variance,
    round_half_up,
    scale_value,
    variance_adjustment,
)


class TestRounding:
    def test_half_up_not_bankers(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4999) == 2
        assert round_half_up(-0.5) == 0


class TestScaleValue:
    def test_us_population(self):
        """
        Scenario: 100 protesters scaled to the US (331M) from Iran (85M).
        Expected: round(100 × 331 / 85) = 389.
        """
        scaled = scale_value(100, 331_000_000, 85_000_000)
        assert scaled.value == 389
        assert scaled.explanation == "100 × (331,000,000 / 85,000,000) = 389"

    def test_casualties_to_czechia(self):
        scaled = scale_value(36_500, 10_200_000, 85_000_000)
        assert scaled.value == 4_380
        assert scaled.explanation.endswith("= 4,380")

    def test_dampening(self):
        scaled = scale_value(100, 85_000_000, 85_000_000, dampening=0.5)
        assert scaled.value == 50
        assert "× 0.5" in scaled.explanation

    def test_invalid_source_population(self):
        with pytest.raises(ValueError):
            scale_value(100, 10, 0)


class TestVariance:
    def test_bounded_and_deterministic(self):
        for seed in ("story-001-protesters-CZ", "story-002-protesters-US", "x"):
            adjustment = variance_adjustment(10, seed)
            assert -10 <= adjustment < 10
            assert variance_adjustment(10, seed) == adjustment

    def test_explanation_matches_value(self):
        varied = apply_variance(389, 10, "story-001-protesters-US")
        assert varied.explanation.endswith(f"= {varied.value:,}")
        assert "variance ±10" in varied.explanation
        assert 379 <= varied.value < 399
