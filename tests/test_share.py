"""
Unit tests for share text composition.

Tests template filling, placeholders, slogan selection and email masking.
"""

from datetime import datetime

import pytest

from ev_charge_ledger.core.share import (
    COST_PER_KM_PLACEHOLDER,
    DEFAULT_SITE_URL,
    DEFAULT_SLOGANS,
    DISTANCE_PLACEHOLDER,
    compose_share_text,
    mask_email
)
from ev_charge_ledger.storage.models import ChargingRecord


def first(options):
    """Deterministic chooser for tests."""
    return options[0]


@pytest.fixture
def record():
    """A typical charging record."""
    return ChargingRecord(
        uid="owner-1",
        user_email="owner@example.com",
        timestamp=int(datetime(2024, 6, 1, 12, 0).timestamp() * 1000),
        location="Harbour Car Park",
        kwh=32.5,
        total_amount=95.0,
        odometer=15400
    )


class TestComposeShareText:
    """Test the share template."""

    def test_full_text(self, record):
        """All values appear when the trip is known."""
        text = compose_share_text(record, 400, 0.2, choose=first)

        assert "Harbour Car Park" in text
        assert "32.5 kWh" in text
        assert "$95" in text
        assert "400 km" in text
        assert "$0.20/km" in text
        assert DEFAULT_SLOGANS[0] in text
        assert DEFAULT_SITE_URL in text

    def test_placeholders_when_no_trip(self, record):
        """Zero values render explicit placeholders."""
        text = compose_share_text(record, 0, 0, choose=first)

        assert DISTANCE_PLACEHOLDER in text
        assert COST_PER_KM_PLACEHOLDER in text
        assert "/km" not in text

    def test_placeholders_when_undefined(self, record):
        """None is treated like a missing trip."""
        text = compose_share_text(record, None, None, choose=first)

        assert DISTANCE_PLACEHOLDER in text
        assert COST_PER_KM_PLACEHOLDER in text

    def test_chooser_receives_slogans(self, record):
        """The injected chooser picks from the given slogans."""
        seen = []

        def pick_last(options):
            seen.append(tuple(options))
            return options[-1]

        slogans = ("Charge smart", "Drive clean")
        text = compose_share_text(record, 100, 1.0, slogans=slogans, choose=pick_last)

        assert seen == [slogans]
        assert "Drive clean" in text
        assert "Charge smart" not in text

    def test_deterministic_with_pinned_chooser(self, record):
        """Same inputs and chooser give the same text."""
        assert (compose_share_text(record, 100, 1.0, choose=first)
                == compose_share_text(record, 100, 1.0, choose=first))

    def test_default_chooser_uses_slogan_list(self, record):
        """The default random choice still picks one of the slogans."""
        text = compose_share_text(record, 100, 1.0)
        assert sum(slogan in text for slogan in DEFAULT_SLOGANS) == 1

    def test_custom_currency_and_link(self, record):
        """Currency and link are configurable."""
        text = compose_share_text(record, 100, 0.95, choose=first,
                                  site_url="https://example.org", currency="HK$")
        assert "HK$95" in text
        assert "HK$0.95/km" in text
        assert "https://example.org" in text

    def test_empty_slogans_rejected(self, record):
        """A slogan list is required."""
        with pytest.raises(ValueError, match="slogans cannot be empty"):
            compose_share_text(record, 100, 1.0, slogans=())


class TestMaskEmail:
    """Test email masking for public feeds."""

    def test_regular_address(self):
        assert mask_email("alice@example.com") == "a***e"

    def test_short_name(self):
        assert mask_email("al@example.com") == "al***"

    def test_missing_email(self):
        assert mask_email("") == "EV driver"
        assert mask_email(None) == "EV driver"

    def test_not_an_address(self):
        assert mask_email("alice") == "anonymous driver"


class TestShareNumbers:
    """Test number rendering in share text."""

    def test_arithmetic_floats_are_rounded(self, record):
        """Values produced by arithmetic render to at most two decimals."""
        noisy = ChargingRecord(
            uid="owner-1",
            user_email="owner@example.com",
            timestamp=record.timestamp,
            location="Home",
            kwh=0.1 + 0.2,
            total_amount=12.5
        )
        text = compose_share_text(noisy, 100.0 / 3, None, choose=first)

        assert "0.3 kWh" in text
        assert "0.30000000000000004" not in text
        assert "$12.5" in text
        assert "33.33 km" in text
