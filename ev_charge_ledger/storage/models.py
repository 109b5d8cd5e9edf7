"""
Data models for storage layer.

Defines the charging and expense entities shared by storage and core.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ev_charge_ledger.core.pricing import derive_cost_per_kwh


class ChargingMode(Enum):
    """How the charging session was billed."""
    METERED = "kWh"  # Billed per kWh delivered
    TIMED = "Time"   # Billed per minute plugged in


class ExpenseCategory(Enum):
    """Categories for ad-hoc, non-charging expenses."""
    PARKING = "parking"
    TOLL = "toll"
    MAINTENANCE = "maintenance"
    DETAILING = "detailing"
    FINE = "fine"
    OTHER = "other"


@dataclass(frozen=True)
class ChargingRecord:
    """Immutable snapshot of one charging event.

    Timestamps are epoch milliseconds and are the only ordering key.
    An odometer of 0 means the reading was not recorded.
    """
    uid: str
    user_email: str
    timestamp: int
    location: str
    kwh: float
    total_amount: float
    mode: ChargingMode = ChargingMode.METERED
    cost_per_kwh: float = 0.0
    odometer: float = 0.0
    license_plate: Optional[str] = None
    duration_minutes: int = 0
    rating: Optional[int] = None
    notes: Optional[str] = None
    is_featured: bool = False
    id: Optional[str] = None

    def __post_init__(self):
        """Validate numeric fields are in range."""
        if self.kwh < 0:
            raise ValueError("kwh cannot be negative")
        if self.total_amount < 0:
            raise ValueError("total_amount cannot be negative")
        if self.odometer < 0:
            raise ValueError("odometer cannot be negative")
        if self.duration_minutes < 0:
            raise ValueError("duration_minutes cannot be negative")
        if self.rating is not None and not 1 <= self.rating <= 5:
            raise ValueError("rating must be between 1 and 5")

    @classmethod
    def create(
        cls,
        uid: str,
        user_email: str,
        timestamp: int,
        location: str,
        kwh: float,
        total_amount: float,
        mode: ChargingMode = ChargingMode.METERED,
        odometer: float = 0.0,
        license_plate: Optional[str] = None,
        duration_minutes: int = 0,
        rating: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> "ChargingRecord":
        """Build a new record the way it is written to storage.

        Trims free text, upper-cases the plate and derives cost_per_kwh.
        """
        plate = license_plate.strip().upper() if license_plate else None
        return cls(
            uid=uid,
            user_email=user_email,
            timestamp=timestamp,
            location=location.strip(),
            kwh=kwh,
            total_amount=total_amount,
            mode=mode,
            cost_per_kwh=derive_cost_per_kwh(kwh, total_amount),
            odometer=odometer,
            license_plate=plate or None,
            duration_minutes=duration_minutes,
            rating=rating,
            notes=notes.strip() if notes else None,
        )


@dataclass(frozen=True)
class VariableExpense:
    """Ad-hoc expense outside of charging (parking, tolls, repairs)."""
    uid: str
    user_email: str
    timestamp: int
    category: ExpenseCategory
    amount: float
    notes: Optional[str] = None
    id: Optional[str] = None

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError("amount cannot be negative")


@dataclass(frozen=True)
class FixedExpenses:
    """Recurring vehicle costs; at most one per owner.

    Monthly items are charged as-is, annual items are amortized over
    twelve months by the breakdown calculator.
    """
    uid: str
    user_email: str
    monthly_loan: float = 0.0
    monthly_loan_pay_day: Optional[int] = None
    monthly_parking: float = 0.0
    monthly_parking_pay_day: Optional[int] = None
    insurance_expiry: Optional[int] = None
    insurance_annual_cost: float = 0.0
    license_expiry: Optional[int] = None
    license_annual_cost: float = 0.0
    last_updated: int = 0

    def __post_init__(self):
        """Validate amounts and pay days."""
        for name in ("monthly_loan", "monthly_parking",
                     "insurance_annual_cost", "license_annual_cost"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")
        for name in ("monthly_loan_pay_day", "monthly_parking_pay_day"):
            day = getattr(self, name)
            if day is not None and not 1 <= day <= 31:
                raise ValueError(f"{name} must be between 1 and 31")
