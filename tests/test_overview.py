"""
Unit tests for the fleet overview.

Tests totals, per-owner activity and the featured feed.
"""

import pytest

from ev_charge_ledger.core.overview import (
    compute_fleet_stats,
    featured_feed,
    user_activity
)
from ev_charge_ledger.storage.models import ChargingRecord


def create_record(email: str, timestamp: int, kwh: float = 10.0,
                  amount: float = 30.0, featured: bool = False) -> ChargingRecord:
    """Create a test record."""
    return ChargingRecord(
        uid=email.split("@")[0],
        user_email=email,
        timestamp=timestamp,
        location="Home",
        kwh=kwh,
        total_amount=amount,
        is_featured=featured
    )


class TestFleetStats:
    """Test fleet-wide totals."""

    def test_totals(self):
        records = [
            create_record("a@example.com", 1000, kwh=10, amount=30),
            create_record("b@example.com", 2000, kwh=15, amount=45),
            create_record("a@example.com", 3000, kwh=5, amount=20),
        ]
        stats = compute_fleet_stats(records)
        assert stats.total_kwh == 30
        assert stats.total_amount == 95
        assert stats.unique_users == 2

    def test_empty(self):
        stats = compute_fleet_stats([])
        assert stats.total_kwh == 0
        assert stats.unique_users == 0


class TestUserActivity:
    """Test per-owner activity."""

    def test_counts_and_last_active(self):
        """Each owner appears once, in first-seen order."""
        records = [
            create_record("b@example.com", 5000),
            create_record("a@example.com", 1000),
            create_record("b@example.com", 2000),
        ]
        activity = user_activity(records)

        assert [a.email for a in activity] == ["b@example.com", "a@example.com"]
        assert activity[0].count == 2
        assert activity[0].last_active == 5000
        assert activity[1].count == 1


class TestFeaturedFeed:
    """Test the community feed."""

    def test_only_featured_newest_first(self):
        records = [
            create_record("a@example.com", 1000, featured=True),
            create_record("a@example.com", 3000, featured=False),
            create_record("b@example.com", 2000, featured=True),
        ]
        feed = featured_feed(records)
        assert [r.timestamp for r in feed] == [2000, 1000]

    def test_limit(self):
        records = [create_record("a@example.com", t, featured=True) for t in range(30)]
        feed = featured_feed(records)
        assert len(feed) == 20
        assert feed[0].timestamp == 29
        assert len(featured_feed(records, limit=5)) == 5

    def test_invalid_limit(self):
        with pytest.raises(ValueError, match="limit must be > 0"):
            featured_feed([], limit=0)
