"""
Monthly aggregation of ledger entries.

Groups the chronological ledger into calendar-month buckets for trend
charts and current-period summary figures.
"""

from dataclasses import dataclass
from datetime import tzinfo
from typing import Dict, List, Optional

from .ledger import LedgerEntry
from .months import month_key, month_label
from .pricing import safe_divide

# Number of most recent months exposed to callers
TRAILING_MONTHS = 6


@dataclass(frozen=True)
class MonthlyBucket:
    """Totals for one calendar month."""
    key: str    # "YYYY-MM"
    label: str  # Month number, e.g. "3"
    kwh: float
    cost: float
    count: int
    distance: float

    @property
    def average_price(self) -> float:
        """Average price paid per kWh, 0 when no energy was recorded."""
        return safe_divide(self.cost, self.kwh)

    @property
    def cost_per_km(self) -> float:
        """Charging cost per km driven, 0 when no distance was recorded."""
        return safe_divide(self.cost, self.distance)

    @property
    def efficiency(self) -> float:
        """Distance driven per kWh, 0 when no energy was recorded."""
        return safe_divide(self.distance, self.kwh)


def aggregate_monthly(
    entries: List[LedgerEntry],
    tz: Optional[tzinfo] = None
) -> List[MonthlyBucket]:
    """Aggregate ledger entries into calendar-month buckets.

    Args:
        entries: Output of build_ledger (ascending, distance-annotated)
        tz: Calendar timezone; None uses the host's local timezone

    Returns:
        At most TRAILING_MONTHS buckets sorted ascending by month key.
        An empty ledger yields an empty list.
    """
    totals: Dict[str, dict] = {}
    for entry in entries:
        record = entry.record
        key = month_key(record.timestamp, tz)
        if key not in totals:
            totals[key] = {
                "label": month_label(record.timestamp, tz),
                "kwh": 0.0,
                "cost": 0.0,
                "count": 0,
                "distance": 0.0,
            }
        bucket = totals[key]
        bucket["kwh"] += record.kwh
        bucket["cost"] += record.total_amount
        bucket["count"] += 1
        bucket["distance"] += entry.trip_distance

    buckets = [
        MonthlyBucket(key=key, **values)
        for key, values in sorted(totals.items())
    ]
    return buckets[-TRAILING_MONTHS:]


def latest_month(buckets: List[MonthlyBucket]) -> Optional[MonthlyBucket]:
    """Most recent bucket, used for the current-period summary.

    Returns:
        The last bucket, or None when there is nothing to display
    """
    if not buckets:
        return None
    return buckets[-1]
