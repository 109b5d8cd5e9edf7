"""
Facet filtering for record list views.

Every facet is an independent predicate; a record is kept only when all
active facets accept it.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import tzinfo
from typing import Iterable, List, Optional, Tuple

from ev_charge_ledger.storage.models import ChargingRecord
from .months import ALL, month_key, to_local_datetime

# Record attributes the free-text facet may search
SEARCHABLE_FIELDS = ("location", "user_email", "notes", "license_plate")


@dataclass(frozen=True)
class RecordFilter:
    """Filter criteria for a list view.

    Empty search text and the "all" sentinel disable their facet.
    """
    search_text: str = ""
    license_plate: str = ALL
    month: str = ALL
    user_email: str = ALL
    text_fields: Tuple[str, ...] = ("location",)

    def __post_init__(self):
        """Validate text fields name searchable attributes."""
        if not self.text_fields:
            raise ValueError("text_fields cannot be empty")
        unknown = set(self.text_fields) - set(SEARCHABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown text fields: {unknown}")

    @property
    def is_active(self) -> bool:
        """True when at least one facet narrows the result."""
        return bool(self.search_text) or any(
            value != ALL for value in (self.license_plate, self.month, self.user_email)
        )


def filter_records(
    records: Iterable[ChargingRecord],
    record_filter: RecordFilter,
    tz: Optional[tzinfo] = None
) -> List[ChargingRecord]:
    """Return the records accepted by every active facet.

    Pure and order preserving: the result is a new list holding the
    matching records in their input order.

    Args:
        records: Records in display order
        record_filter: Facets to apply
        tz: Calendar timezone for the month facet; None is local time

    Returns:
        Matching records
    """
    query = record_filter.search_text.lower()
    plate = record_filter.license_plate.upper()
    email = record_filter.user_email.lower()

    def accepts(record: ChargingRecord) -> bool:
        if query and not any(
            query in (getattr(record, name) or "").lower()
            for name in record_filter.text_fields
        ):
            return False
        if record_filter.license_plate != ALL and (record.license_plate or "").upper() != plate:
            return False
        if record_filter.user_email != ALL and record.user_email.lower() != email:
            return False
        if record_filter.month != ALL and month_key(record.timestamp, tz) != record_filter.month:
            return False
        return True

    return [record for record in records if accepts(record)]


def unique_plates(records: Iterable[ChargingRecord]) -> List[str]:
    """Distinct license plates, upper-cased and sorted, for the plate facet."""
    return sorted({r.license_plate.upper() for r in records if r.license_plate})


def unique_months(
    records: Iterable[ChargingRecord],
    tz: Optional[tzinfo] = None
) -> List[Tuple[str, str]]:
    """Months that have records, newest first, as (key, label) pairs.

    Labels read like "Mar 2024".
    """
    months = {}
    for record in records:
        moment = to_local_datetime(record.timestamp, tz)
        months[month_key(record.timestamp, tz)] = moment.strftime("%b %Y")
    return sorted(months.items(), reverse=True)


def frequent_locations(records: Iterable[ChargingRecord], limit: int = 4) -> List[str]:
    """Most used charging locations, for quick-pick suggestions.

    Ties keep the order in which locations were first seen.
    """
    counts = Counter(record.location for record in records)
    return [location for location, _ in counts.most_common(limit)]
