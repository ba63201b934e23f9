from __future__ import annotations

import sqlite3


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create users/connections tables and indexes (idempotent)."""
    cur = conn.cursor()

    # Local identities; access_token stands in for the hosted auth session
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS users (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  email TEXT NOT NULL UNIQUE,\n"
            "  access_token TEXT NOT NULL UNIQUE,\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now'))\n"
            ")"
        )
    )

    # One row per professional contact, owned by exactly one user
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS connections (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  user_id INTEGER NOT NULL,\n"
            "  first_name TEXT NOT NULL DEFAULT '',\n"
            "  last_name TEXT NOT NULL DEFAULT '',\n"
            "  email TEXT,\n"
            "  company TEXT,\n"
            "  position TEXT,\n"
            "  location TEXT,\n"
            "  connected_on TEXT,\n"
            "  profile_url TEXT,\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_connections_user_id ON connections(user_id);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_connections_company ON connections(company);")

    conn.commit()
