"""
Opens the preview catalog: the SQLite file holding users, configuration
values and the record of every preview written so far.
"""
import sqlite3
import logging
from pathlib import Path
from typing import Optional

from ..exceptions import DatabaseError
from .schema import init_schema


class DBManager:
    """One catalog connection per process, used as `with DBManager(path) as conn`."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        """Opens the catalog file, creating the tables on first use."""
        if self._conn:
            return self._conn

        logging.debug(f"Opening preview catalog {self.db_path}")
        try:
            conn = sqlite3.connect(self.db_path)
            # WAL lets admin commands read while a sweep records previews
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            conn.execute("PRAGMA foreign_keys=ON;")
            init_schema(conn)
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot open preview catalog {self.db_path}: {e}") from e

        self._conn = conn
        return conn

    def close(self, commit: bool = True):
        if not self._conn:
            return
        if commit:
            self._conn.commit()
        else:
            self._conn.rollback()
        self._conn.close()
        self._conn = None

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb):
        # a failed block keeps nothing it had not committed yet
        self.close(commit=exc_type is None)
