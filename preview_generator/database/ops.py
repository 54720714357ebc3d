import sqlite3
from datetime import datetime, UTC
from pathlib import Path
from typing import Optional, List, Tuple

from ..exceptions import DatabaseError


class DBOperations:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # --- Users ---

    def insert_user(self, uid: str, display_name: Optional[str] = None):
        now_iso = datetime.now(UTC).isoformat()
        try:
            with self.conn:
                self.conn.execute(
                    "INSERT INTO users (uid, display_name, created_at) VALUES (?, ?, ?)",
                    (uid, display_name, now_iso),
                )
        except sqlite3.IntegrityError as e:
            raise DatabaseError(f"User {uid} already exists") from e

    def fetch_user(self, uid: str) -> Optional[Tuple[str, Optional[str], int]]:
        cur = self.conn.cursor()
        cur.execute("SELECT uid, display_name, last_login FROM users WHERE uid = ?", (uid,))
        return cur.fetchone()

    def fetch_users(self, seen_only: bool = False) -> List[Tuple[str, Optional[str], int]]:
        cur = self.conn.cursor()
        if seen_only:
            cur.execute("SELECT uid, display_name, last_login FROM users WHERE last_login > 0 ORDER BY uid")
        else:
            cur.execute("SELECT uid, display_name, last_login FROM users ORDER BY uid")
        return cur.fetchall()

    def update_last_login(self, uid: str, timestamp: int) -> bool:
        with self.conn:
            cur = self.conn.execute("UPDATE users SET last_login = ? WHERE uid = ?", (timestamp, uid))
        return cur.rowcount > 0

    def delete_user(self, uid: str) -> bool:
        with self.conn:
            cur = self.conn.execute("DELETE FROM users WHERE uid = ?", (uid,))
        return cur.rowcount > 0

    # --- Configuration ---

    def get_config_value(self, appid: str, key: str) -> Optional[str]:
        cur = self.conn.cursor()
        cur.execute("SELECT configvalue FROM appconfig WHERE appid = ? AND configkey = ?", (appid, key))
        row = cur.fetchone()
        return row[0] if row else None

    def set_config_value(self, appid: str, key: str, value: Optional[str]):
        with self.conn:
            self.conn.execute("""
                INSERT INTO appconfig (appid, configkey, configvalue) VALUES (?, ?, ?)
                ON CONFLICT(appid, configkey) DO UPDATE SET configvalue = excluded.configvalue
            """, (appid, key, value))

    def delete_config_value(self, appid: str, key: str):
        with self.conn:
            self.conn.execute("DELETE FROM appconfig WHERE appid = ? AND configkey = ?", (appid, key))

    # --- Previews ---

    def fetch_preview(self, source_path: str, width: int, height: int,
                      crop: bool, is_max: bool = False) -> Optional[Tuple[float, int, str]]:
        """Returns (source_mtime, source_size, preview_path) for a recorded preview."""
        cur = self.conn.cursor()
        cur.execute("""
            SELECT source_mtime, source_size, preview_path FROM previews
            WHERE source_path = ? AND width = ? AND height = ? AND crop = ? AND is_max = ?
        """, (source_path, width, height, int(crop), int(is_max)))
        return cur.fetchone()

    def record_preview(self, source_path: str, source_mtime: float, source_size: int,
                       width: int, height: int, crop: bool, preview_path: Path,
                       is_max: bool = False):
        now_iso = datetime.now(UTC).isoformat()
        with self.conn:
            self.conn.execute("""
                INSERT INTO previews (
                    source_path, source_mtime, source_size, width, height, crop,
                    is_max, preview_path, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(source_path, width, height, crop, is_max) DO UPDATE SET
                    source_mtime = excluded.source_mtime,
                    source_size = excluded.source_size,
                    preview_path = excluded.preview_path,
                    created_at = excluded.created_at
            """, (
                source_path, source_mtime, source_size, width, height, int(crop),
                int(is_max), str(preview_path), now_iso,
            ))

    def fetch_previews_for(self, source_path: str) -> List[Tuple[int, int, bool, str]]:
        cur = self.conn.cursor()
        cur.execute("""
            SELECT width, height, crop, preview_path FROM previews
            WHERE source_path = ? AND is_max = 0 ORDER BY id
        """, (source_path,))
        return [(w, h, bool(c), p) for w, h, c, p in cur.fetchall()]

    def count_previews(self) -> int:
        cur = self.conn.cursor()
        cur.execute("SELECT COUNT(*) FROM previews")
        return cur.fetchone()[0]
