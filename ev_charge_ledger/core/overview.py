"""
Fleet-wide overview for administrators.

Read-only summaries across every owner's records, plus the curated
community feed of featured records.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from ev_charge_ledger.storage.models import ChargingRecord

FEATURED_FEED_LIMIT = 20


@dataclass(frozen=True)
class FleetStats:
    """Totals across all owners."""
    total_kwh: float
    total_amount: float
    unique_users: int


@dataclass(frozen=True)
class UserActivity:
    """How much and how recently one owner has logged."""
    email: str
    count: int
    last_active: int  # epoch ms of the newest record


def compute_fleet_stats(records: Iterable[ChargingRecord]) -> FleetStats:
    """Sum energy and spend and count distinct owners by email."""
    total_kwh = 0.0
    total_amount = 0.0
    emails = set()
    for record in records:
        total_kwh += record.kwh
        total_amount += record.total_amount
        emails.add(record.user_email)
    return FleetStats(
        total_kwh=total_kwh,
        total_amount=total_amount,
        unique_users=len(emails)
    )


def user_activity(records: Iterable[ChargingRecord]) -> List[UserActivity]:
    """Per-owner record counts and last activity, in first-seen order."""
    counts: Dict[str, int] = {}
    last_active: Dict[str, int] = {}
    for record in records:
        counts[record.user_email] = counts.get(record.user_email, 0) + 1
        last_active[record.user_email] = max(
            last_active.get(record.user_email, 0), record.timestamp
        )
    return [
        UserActivity(email=email, count=count, last_active=last_active[email])
        for email, count in counts.items()
    ]


def featured_feed(
    records: Iterable[ChargingRecord],
    limit: int = FEATURED_FEED_LIMIT
) -> List[ChargingRecord]:
    """Featured records, newest first, capped at limit."""
    if limit <= 0:
        raise ValueError("limit must be > 0")
    featured = [r for r in records if r.is_featured]
    featured.sort(key=lambda r: r.timestamp, reverse=True)
    return featured[:limit]
