"""
Chronological ledger of charging records.

Orders one owner's records by time and derives the distance driven
between consecutive odometer readings.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ev_charge_ledger.storage.models import ChargingRecord
from .pricing import safe_divide


@dataclass(frozen=True)
class LedgerEntry:
    """A record annotated with the distance driven since the last reading."""
    record: ChargingRecord
    trip_distance: float


@dataclass(frozen=True)
class TripMetrics:
    """Distance and unit cost for a single record's trip."""
    distance: float
    cost_per_km: float


def build_ledger(records: Iterable[ChargingRecord]) -> List[LedgerEntry]:
    """Build the ascending, distance-annotated ledger.

    The derivation runs from scratch on every call so that edits and
    out-of-order inserts never leave stale distances behind.

    Rules for each record, oldest first:
    - odometer > 0 and greater than the last known reading: the trip is
      the difference
    - odometer > 0 otherwise (first reading, reset, out of sequence):
      trip is 0
    - odometer == 0 (not recorded): trip is 0 and the last known
      reading is left untouched

    Args:
        records: One owner's records in any order

    Returns:
        Ledger entries sorted by timestamp (stable for equal timestamps)
    """
    ordered = sorted(records, key=lambda r: r.timestamp)

    entries = []
    last_odometer = 0.0
    for record in ordered:
        trip_distance = 0.0
        if record.odometer > 0:
            if last_odometer > 0 and record.odometer > last_odometer:
                trip_distance = record.odometer - last_odometer
            last_odometer = record.odometer
        entries.append(LedgerEntry(record=record, trip_distance=trip_distance))

    return entries


def total_distance(entries: Iterable[LedgerEntry]) -> float:
    """Sum of all trip distances in a ledger."""
    return sum(entry.trip_distance for entry in entries)


def most_recent_first(entries: List[LedgerEntry]) -> List[LedgerEntry]:
    """Ledger in display order, newest record first."""
    return list(reversed(entries))


def find_predecessor(
    record: ChargingRecord,
    records: Iterable[ChargingRecord]
) -> Optional[ChargingRecord]:
    """Find the nearest earlier record that has an odometer reading.

    Looks at the owner's full record set, not a filtered view, so the
    predecessor is the same whatever the list currently shows.

    Args:
        record: Record whose predecessor is wanted
        records: All of the owner's records, in any order

    Returns:
        The predecessor, or None when no earlier reading exists
    """
    ordered = sorted(records, key=lambda r: r.timestamp)

    position = _index_of(record, ordered)
    if position is None:
        # Not part of the set: everything strictly earlier precedes it
        earlier = [r for r in ordered if r.timestamp < record.timestamp]
    else:
        earlier = ordered[:position]

    for candidate in reversed(earlier):
        if candidate.odometer > 0:
            return candidate
    return None


def trip_metrics(entry: LedgerEntry) -> TripMetrics:
    """Trip metrics of a ledger entry built from the owner's full set.

    Agrees with compute_trip for that record, without another sort.
    """
    return TripMetrics(
        distance=entry.trip_distance,
        cost_per_km=safe_divide(entry.record.total_amount, entry.trip_distance)
    )


def compute_trip(
    record: ChargingRecord,
    records: Iterable[ChargingRecord]
) -> TripMetrics:
    """Compute the trip distance and cost per km for one record.

    Args:
        record: Record to evaluate
        records: All of the owner's records, in any order

    Returns:
        TripMetrics; both values are 0 when no valid predecessor exists
    """
    if record.odometer <= 0:
        return TripMetrics(distance=0.0, cost_per_km=0.0)

    predecessor = find_predecessor(record, records)
    if predecessor is None or record.odometer <= predecessor.odometer:
        return TripMetrics(distance=0.0, cost_per_km=0.0)

    distance = record.odometer - predecessor.odometer
    return TripMetrics(
        distance=distance,
        cost_per_km=safe_divide(record.total_amount, distance)
    )


def _index_of(record: ChargingRecord, ordered: List[ChargingRecord]) -> Optional[int]:
    for i, candidate in enumerate(ordered):
        if candidate is record:
            return i
    for i, candidate in enumerate(ordered):
        if candidate == record:
            return i
    return None
