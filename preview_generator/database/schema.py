"""
Catalog schema definitions.
"""
import sqlite3

CURRENT_SCHEMA_VERSION = 1

def init_schema(conn: sqlite3.Connection):
    """
    Applies the catalog schema to the database.
    Idempotent: safe to run on every startup.
    """
    with conn:
        # 1. Version Tracking (For future migrations)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            );
        """)

        cur = conn.cursor()
        cur.execute("SELECT version FROM schema_version")
        if not cur.fetchone():
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (CURRENT_SCHEMA_VERSION,))

        # 2. Identity Directory
        # last_login = 0 means the user never authenticated ("unseen")
        conn.execute("""
        CREATE TABLE IF NOT EXISTS users (
            uid             TEXT PRIMARY KEY,
            display_name    TEXT,
            last_login      INTEGER NOT NULL DEFAULT 0,
            created_at      TEXT NOT NULL
        );
        """)

        # 3. Runtime Configuration
        # appid 'system' holds instance wide values, 'core' holds flags such as encryption
        conn.execute("""
        CREATE TABLE IF NOT EXISTS appconfig (
            appid           TEXT NOT NULL,
            configkey       TEXT NOT NULL,
            configvalue     TEXT,
            PRIMARY KEY (appid, configkey)
        );
        """)

        # 4. Generated Previews
        # One row per (source, geometry); source_mtime/size detect stale renditions
        conn.execute("""
        CREATE TABLE IF NOT EXISTS previews (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            source_path     TEXT NOT NULL,
            source_mtime    REAL NOT NULL,
            source_size     INTEGER NOT NULL,
            width           INTEGER NOT NULL,
            height          INTEGER NOT NULL,
            crop            INTEGER NOT NULL DEFAULT 0,
            is_max          INTEGER NOT NULL DEFAULT 0,
            preview_path    TEXT NOT NULL,
            created_at      TEXT NOT NULL,
            UNIQUE (source_path, width, height, crop, is_max)
        );
        """)
        conn.execute("CREATE INDEX IF NOT EXISTS idx_previews_source ON previews(source_path);")
