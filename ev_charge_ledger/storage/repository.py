"""
Repository pattern for data access.

Stores charging records and expenses keyed by owner id. Every read is a
point-in-time snapshot that the core engine can consume directly.
"""

import logging
import uuid
from typing import List, Optional

from .db import DEFAULT_DB_PATH, get_connection
from .models import (
    ChargingMode,
    ChargingRecord,
    ExpenseCategory,
    FixedExpenses,
    VariableExpense
)

_logger = logging.getLogger(__name__)

_RECORD_COLUMNS = """
    id, uid, user_email, timestamp, location, kwh, total_amount, mode,
    cost_per_kwh, odometer, license_plate, duration_minutes, rating,
    notes, is_featured
"""

_EXPENSE_COLUMNS = "id, uid, user_email, timestamp, category, amount, notes"

_FIXED_COLUMNS = """
    uid, user_email, monthly_loan, monthly_loan_pay_day, monthly_parking,
    monthly_parking_pay_day, insurance_expiry, insurance_annual_cost,
    license_expiry, license_annual_cost, last_updated
"""


class ChargeRepository:
    """Repository for reading an owner's charging data.

    This class provides a higher-level interface to the database operations,
    returning typed, immutable snapshots.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """Initialize the repository with a database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path

    def get_records(self, uid: str, limit: Optional[int] = None) -> List[ChargingRecord]:
        """Get one owner's charging records.

        Args:
            uid: Owner id
            limit: Optional maximum number of records to return

        Returns:
            Records ordered by timestamp (newest first)
        """
        query = f"SELECT {_RECORD_COLUMNS} FROM charging_record WHERE uid = ? ORDER BY timestamp DESC"
        params: list = [uid]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        return self._fetch_records(query, params)

    def get_all_records(self) -> List[ChargingRecord]:
        """Get every owner's records, newest first, for administrative views."""
        query = f"SELECT {_RECORD_COLUMNS} FROM charging_record ORDER BY timestamp DESC"
        return self._fetch_records(query, [])

    def get_record(self, record_id: str) -> Optional[ChargingRecord]:
        """Get a single record by id, or None if it does not exist."""
        query = f"SELECT {_RECORD_COLUMNS} FROM charging_record WHERE id = ?"
        records = self._fetch_records(query, [record_id])
        return records[0] if records else None

    def get_expenses(self, uid: str) -> List[VariableExpense]:
        """Get one owner's variable expenses, newest first."""
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                f"SELECT {_EXPENSE_COLUMNS} FROM variable_expense "
                "WHERE uid = ? ORDER BY timestamp DESC",
                (uid,)
            )
            return [_row_to_expense(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_fixed_expenses(self, uid: str) -> Optional[FixedExpenses]:
        """Get an owner's fixed expenses, or None if never configured."""
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                f"SELECT {_FIXED_COLUMNS} FROM fixed_expenses WHERE uid = ?",
                (uid,)
            )
            row = cursor.fetchone()
            return _row_to_fixed(row) if row else None
        finally:
            conn.close()

    def delete_record(self, uid: str, record_id: str) -> bool:
        """Delete one of an owner's records.

        Args:
            uid: Owner id; records of other owners are never touched
            record_id: Id of the record to delete

        Returns:
            True if a record was deleted
        """
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "DELETE FROM charging_record WHERE id = ? AND uid = ?",
                (record_id, uid)
            )
            conn.commit()
            _logger.debug("Deleted %d record(s) with id %s", cursor.rowcount, record_id)
            return cursor.rowcount > 0
        finally:
            conn.close()

    def set_featured(self, record_id: str, featured: bool) -> bool:
        """Mark or unmark a record for the community feed.

        Returns:
            True if the record exists
        """
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "UPDATE charging_record SET is_featured = ? WHERE id = ?",
                (int(featured), record_id)
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def _fetch_records(self, query: str, params: list) -> List[ChargingRecord]:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(query, params)
            return [_row_to_record(row) for row in cursor.fetchall()]
        finally:
            conn.close()


# Global repository instance
_default_repository: Optional[ChargeRepository] = None


def get_repository(db_path: str = DEFAULT_DB_PATH) -> ChargeRepository:
    """Get a repository instance.

    Reuses the previous instance while the database path is unchanged.

    Args:
        db_path: Path to SQLite database file

    Returns:
        An instance of ChargeRepository
    """
    global _default_repository
    if _default_repository is None or _default_repository.db_path != db_path:
        _default_repository = ChargeRepository(db_path)
    return _default_repository


def initialize_schema(db_path: str = DEFAULT_DB_PATH) -> None:
    """Create the record and expense tables if they don't exist.

    Args:
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS charging_record (
                id TEXT PRIMARY KEY,
                uid TEXT NOT NULL,
                user_email TEXT NOT NULL,
                timestamp INTEGER NOT NULL,
                location TEXT NOT NULL,
                kwh REAL NOT NULL,
                total_amount REAL NOT NULL,
                mode TEXT NOT NULL,
                cost_per_kwh REAL NOT NULL DEFAULT 0,
                odometer REAL NOT NULL DEFAULT 0,
                license_plate TEXT,
                duration_minutes INTEGER NOT NULL DEFAULT 0,
                rating INTEGER,
                notes TEXT,
                is_featured INTEGER NOT NULL DEFAULT 0
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_charging_record_uid
            ON charging_record (uid, timestamp)
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS variable_expense (
                id TEXT PRIMARY KEY,
                uid TEXT NOT NULL,
                user_email TEXT NOT NULL,
                timestamp INTEGER NOT NULL,
                category TEXT NOT NULL,
                amount REAL NOT NULL,
                notes TEXT
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS fixed_expenses (
                uid TEXT PRIMARY KEY,
                user_email TEXT NOT NULL,
                monthly_loan REAL NOT NULL DEFAULT 0,
                monthly_loan_pay_day INTEGER,
                monthly_parking REAL NOT NULL DEFAULT 0,
                monthly_parking_pay_day INTEGER,
                insurance_expiry INTEGER,
                insurance_annual_cost REAL NOT NULL DEFAULT 0,
                license_expiry INTEGER,
                license_annual_cost REAL NOT NULL DEFAULT 0,
                last_updated INTEGER NOT NULL
            )
        """)
        conn.commit()
        _logger.debug("Schema ready in %s", db_path)
    finally:
        conn.close()


def insert_record(record: ChargingRecord, db_path: str = DEFAULT_DB_PATH) -> str:
    """Insert a single charging record.

    Args:
        record: The record to store; its id is ignored
        db_path: Path to SQLite database file

    Returns:
        The id assigned by the store
    """
    conn = get_connection(db_path)
    try:
        record_id = _insert_record(conn, record)
        conn.commit()
        return record_id
    finally:
        conn.close()


def insert_records(records: List[ChargingRecord], db_path: str = DEFAULT_DB_PATH) -> List[str]:
    """Insert multiple charging records atomically.

    All records are inserted in a single transaction to ensure consistency.

    Args:
        records: Records to store
        db_path: Path to SQLite database file

    Returns:
        Assigned ids, in input order
    """
    if not records:
        return []

    conn = get_connection(db_path)
    try:
        conn.execute("BEGIN TRANSACTION")
        ids = [_insert_record(conn, record) for record in records]
        conn.commit()
        _logger.debug("Inserted %d records", len(ids))
        return ids
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def insert_expense(expense: VariableExpense, db_path: str = DEFAULT_DB_PATH) -> str:
    """Insert a variable expense and return its assigned id."""
    expense_id = uuid.uuid4().hex
    conn = get_connection(db_path)
    try:
        conn.execute(f"""
            INSERT INTO variable_expense ({_EXPENSE_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            expense_id,
            expense.uid,
            expense.user_email,
            expense.timestamp,
            expense.category.value,
            expense.amount,
            expense.notes
        ))
        conn.commit()
        return expense_id
    finally:
        conn.close()


def upsert_fixed_expenses(fixed: FixedExpenses, db_path: str = DEFAULT_DB_PATH) -> None:
    """Create or replace the owner's single fixed-expenses row.

    Args:
        fixed: Fixed expenses; uid is the key
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        conn.execute(f"""
            INSERT OR REPLACE INTO fixed_expenses ({_FIXED_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            fixed.uid,
            fixed.user_email,
            fixed.monthly_loan,
            fixed.monthly_loan_pay_day,
            fixed.monthly_parking,
            fixed.monthly_parking_pay_day,
            fixed.insurance_expiry,
            fixed.insurance_annual_cost,
            fixed.license_expiry,
            fixed.license_annual_cost,
            fixed.last_updated
        ))
        conn.commit()
        _logger.debug("Saved fixed expenses for %s", fixed.uid)
    finally:
        conn.close()


def _insert_record(conn, record: ChargingRecord) -> str:
    record_id = uuid.uuid4().hex
    conn.execute(f"""
        INSERT INTO charging_record ({_RECORD_COLUMNS})
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, (
        record_id,
        record.uid,
        record.user_email,
        record.timestamp,
        record.location,
        record.kwh,
        record.total_amount,
        record.mode.value,
        record.cost_per_kwh,
        record.odometer,
        record.license_plate,
        record.duration_minutes,
        record.rating,
        record.notes,
        int(record.is_featured)
    ))
    return record_id


def _row_to_record(row) -> ChargingRecord:
    return ChargingRecord(
        id=row[0],
        uid=row[1],
        user_email=row[2],
        timestamp=row[3],
        location=row[4],
        kwh=row[5],
        total_amount=row[6],
        mode=ChargingMode(row[7]),
        cost_per_kwh=row[8],
        odometer=row[9],
        license_plate=row[10],
        duration_minutes=row[11],
        rating=row[12],
        notes=row[13],
        is_featured=bool(row[14])
    )


def _row_to_expense(row) -> VariableExpense:
    return VariableExpense(
        id=row[0],
        uid=row[1],
        user_email=row[2],
        timestamp=row[3],
        category=ExpenseCategory(row[4]),
        amount=row[5],
        notes=row[6]
    )


def _row_to_fixed(row) -> FixedExpenses:
    return FixedExpenses(
        uid=row[0],
        user_email=row[1],
        monthly_loan=row[2],
        monthly_loan_pay_day=row[3],
        monthly_parking=row[4],
        monthly_parking_pay_day=row[5],
        insurance_expiry=row[6],
        insurance_annual_cost=row[7],
        license_expiry=row[8],
        license_annual_cost=row[9],
        last_updated=row[10]
    )
