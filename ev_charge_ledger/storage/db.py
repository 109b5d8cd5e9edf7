"""
Database connection management.

Provides the SQLite connection backing the local record store.
"""

import logging
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = "ev_charge_ledger.db"

_logger = logging.getLogger(__name__)


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Create and return a SQLite database connection with foreign keys enabled.
    
    Args:
        db_path: Path to SQLite database file
        
    Returns:
        SQLite connection with foreign key constraints enabled
    """
    path = Path(db_path)
    _logger.debug("Opening SQLite database at %s", path)
    conn = sqlite3.connect(str(path))
    conn.execute("PRAGMA foreign_keys = ON")
    return conn
