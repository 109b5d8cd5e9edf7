"""
Unit tests for storage layer.

Tests schema creation, record insertion, owner scoping and upserts.
"""

import os
import sqlite3
import tempfile

import pytest

from ev_charge_ledger.storage.db import get_connection
from ev_charge_ledger.storage.models import (
    ChargingMode,
    ChargingRecord,
    ExpenseCategory,
    FixedExpenses,
    VariableExpense
)
from ev_charge_ledger.storage.repository import (
    ChargeRepository,
    get_repository,
    initialize_schema,
    insert_expense,
    insert_record,
    insert_records,
    upsert_fixed_expenses
)


def create_record(uid: str = "owner-1", timestamp: int = 1_000, **overrides) -> ChargingRecord:
    """Create a test charging record."""
    values = dict(
        uid=uid,
        user_email=f"{uid}@example.com",
        timestamp=timestamp,
        location="Home",
        kwh=20.0,
        total_amount=60.0,
        cost_per_kwh=3.0
    )
    values.update(overrides)
    return ChargingRecord(**values)


@pytest.fixture
def db_path():
    """Initialized database in a temporary directory."""
    with tempfile.TemporaryDirectory() as temp_dir:
        path = os.path.join(temp_dir, "test.db")
        initialize_schema(path)
        yield path


class TestStorageSchema:
    """Test database schema creation and structure."""

    def test_schema_creation(self, db_path):
        """Verify tables are created."""
        conn = get_connection(db_path)
        try:
            cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
            tables = [row[0] for row in cursor.fetchall()]
            assert tables == ["charging_record", "fixed_expenses", "variable_expense"]
        finally:
            conn.close()

    def test_schema_is_idempotent(self, db_path):
        """Running initialization twice is harmless."""
        initialize_schema(db_path)

    def test_missing_schema_raises(self):
        """Reading before initialization surfaces the sqlite error."""
        with tempfile.TemporaryDirectory() as temp_dir:
            repository = ChargeRepository(os.path.join(temp_dir, "empty.db"))
            with pytest.raises(sqlite3.OperationalError, match="no such table"):
                repository.get_records("owner-1")


class TestRecords:
    """Test charging record storage."""

    def test_round_trip_all_fields(self, db_path):
        """Every field survives storage and the store assigns an id."""
        record = create_record(
            mode=ChargingMode.TIMED,
            odometer=15400.5,
            license_plate="TE5LA",
            duration_minutes=45,
            rating=4,
            notes="fast charger"
        )
        record_id = insert_record(record, db_path)

        stored = ChargeRepository(db_path).get_record(record_id)
        assert stored.id == record_id
        assert stored.mode == ChargingMode.TIMED
        assert stored.odometer == 15400.5
        assert stored.license_plate == "TE5LA"
        assert stored.duration_minutes == 45
        assert stored.rating == 4
        assert stored.notes == "fast charger"
        assert stored.is_featured is False

    def test_records_scoped_to_owner_newest_first(self, db_path):
        """Owners only see their own records, newest first."""
        insert_records([
            create_record("owner-1", 1_000),
            create_record("owner-2", 2_000),
            create_record("owner-1", 3_000),
        ], db_path)

        records = ChargeRepository(db_path).get_records("owner-1")
        assert [r.timestamp for r in records] == [3_000, 1_000]
        assert all(r.uid == "owner-1" for r in records)

    def test_get_records_limit(self, db_path):
        insert_records([create_record(timestamp=t) for t in range(5)], db_path)
        assert len(ChargeRepository(db_path).get_records("owner-1", limit=2)) == 2

    def test_get_all_records(self, db_path):
        insert_records([create_record("owner-1", 1), create_record("owner-2", 2)], db_path)
        assert len(ChargeRepository(db_path).get_all_records()) == 2

    def test_insert_records_empty(self, db_path):
        assert insert_records([], db_path) == []

    def test_insert_records_is_atomic(self, db_path):
        """A failing batch leaves nothing behind."""
        good = create_record()
        bad = object()
        with pytest.raises(AttributeError):
            insert_records([good, bad], db_path)
        assert ChargeRepository(db_path).get_records("owner-1") == []

    def test_delete_only_own_record(self, db_path):
        """Deleting requires the owner's id."""
        record_id = insert_record(create_record("owner-1"), db_path)
        repository = ChargeRepository(db_path)

        assert repository.delete_record("owner-2", record_id) is False
        assert repository.delete_record("owner-1", record_id) is True
        assert repository.get_record(record_id) is None

    def test_set_featured(self, db_path):
        record_id = insert_record(create_record(), db_path)
        repository = ChargeRepository(db_path)

        assert repository.set_featured(record_id, True) is True
        assert repository.get_record(record_id).is_featured is True
        assert repository.set_featured("missing", True) is False


class TestExpenses:
    """Test expense storage."""

    def test_variable_expenses(self, db_path):
        insert_expense(VariableExpense(
            uid="owner-1", user_email="owner-1@example.com", timestamp=5,
            category=ExpenseCategory.TOLL, amount=48.0, notes="tunnel"
        ), db_path)

        expenses = ChargeRepository(db_path).get_expenses("owner-1")
        assert len(expenses) == 1
        assert expenses[0].category == ExpenseCategory.TOLL
        assert expenses[0].amount == 48.0
        assert expenses[0].id is not None

    def test_fixed_expenses_missing(self, db_path):
        assert ChargeRepository(db_path).get_fixed_expenses("owner-1") is None

    def test_fixed_expenses_upsert(self, db_path):
        """Saving twice keeps a single row with the latest values."""
        upsert_fixed_expenses(FixedExpenses(
            uid="owner-1", user_email="e", monthly_loan=2000, last_updated=1
        ), db_path)
        upsert_fixed_expenses(FixedExpenses(
            uid="owner-1", user_email="e", monthly_loan=1800,
            monthly_loan_pay_day=15, insurance_expiry=1_700_000_000_000, last_updated=2
        ), db_path)

        fixed = ChargeRepository(db_path).get_fixed_expenses("owner-1")
        assert fixed.monthly_loan == 1800
        assert fixed.monthly_loan_pay_day == 15
        assert fixed.insurance_expiry == 1_700_000_000_000

        conn = get_connection(db_path)
        try:
            count = conn.execute("SELECT COUNT(*) FROM fixed_expenses").fetchone()[0]
        finally:
            conn.close()
        assert count == 1


class TestGetRepository:
    """Test the shared repository instance."""

    def test_reused_for_same_path(self):
        assert get_repository("a.db") is get_repository("a.db")

    def test_replaced_for_new_path(self):
        assert get_repository("b.db").db_path == "b.db"
