"""
Unit tests for pricing calculations.

Tests unit price derivation, rounding behavior and division guards.
"""

import math

from ev_charge_ledger.core.pricing import (
    derive_cost_per_kwh,
    estimate_charge_cost,
    safe_divide
)


class TestCostPerKwh:
    """Test the stored unit price."""

    def test_exact_price(self):
        """Verify a simple division."""
        assert derive_cost_per_kwh(20, 60) == 3.0

    def test_rounded_to_four_places(self):
        """Verify half-up rounding at 4 decimal places."""
        # 10 / 3 = 3.33333...
        assert derive_cost_per_kwh(3, 10) == 3.3333
        # 2 / 3 = 0.66666...
        assert derive_cost_per_kwh(3, 2) == 0.6667

    def test_zero_kwh(self):
        """No energy means no unit price."""
        assert derive_cost_per_kwh(0, 50) == 0.0

    def test_free_session(self):
        """A free session has no unit price."""
        assert derive_cost_per_kwh(25, 0) == 0.0


class TestEstimateChargeCost:
    """Test the quick calculator."""

    def test_estimate(self):
        """Verify kWh times rate."""
        assert estimate_charge_cost(50, 8.5) == 425.0

    def test_rounding_half_up(self):
        """Verify values round half-up to cents."""
        # 1.5 * 0.335 = 0.5025 -> 0.50; 0.005 * 1 -> 0.01
        assert estimate_charge_cost(1.5, 0.335) == 0.50
        assert estimate_charge_cost(0.005, 1) == 0.01

    def test_zero(self):
        assert estimate_charge_cost(0, 8.5) == 0.0


class TestSafeDivide:
    """Test the zero-denominator guard."""

    def test_regular_division(self):
        assert safe_divide(10, 4) == 2.5

    def test_zero_denominator(self):
        """Returns exactly 0, never NaN or infinity."""
        result = safe_divide(10, 0)
        assert result == 0.0
        assert not math.isinf(result)
        assert not math.isnan(safe_divide(0, 0))
