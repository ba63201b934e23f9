from __future__ import annotations

import sqlite3
from pathlib import Path

from db import schema


MEMORY_DB = ":memory:"


def get_connection(db_path: str, timeout: float = 30.0) -> sqlite3.Connection:
    """Open the local row store.

    The store is shared by the CLI and the HTTP server threads, so the
    connection runs in WAL mode with foreign keys enforced; users own their
    connections through ``connections.user_id``.
    """
    if db_path != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
    if db_path != MEMORY_DB:
        conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


def open_database(db_path: str) -> sqlite3.Connection:
    """Connection with the users/connections tables guaranteed to exist."""
    conn = get_connection(db_path)
    try:
        schema.bootstrap(conn)
    except sqlite3.Error:
        conn.close()
        raise
    return conn
