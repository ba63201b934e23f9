from __future__ import annotations

import secrets
import sqlite3
from typing import Optional, Tuple


class UsersRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def create(self, email: str) -> Tuple[int, str]:
        """Insert a user with a freshly issued access token; returns (id, token)."""
        token = secrets.token_urlsafe(32)
        cur = self.conn.cursor()
        cur.execute(
            "INSERT INTO users (email, access_token) VALUES (?, ?) RETURNING id;",
            (email.strip().lower(), token),
        )
        row = cur.fetchone()
        self.conn.commit()
        return int(row[0]), token

    def find_id_by_token(self, access_token: str) -> Optional[int]:
        cur = self.conn.cursor()
        cur.execute("SELECT id FROM users WHERE access_token = ?", (access_token,))
        row = cur.fetchone()
        return int(row[0]) if row else None

    def find_by_email(self, email: str) -> Optional[Tuple[int, str]]:
        """Return (id, access_token) for ``email`` or None."""
        cur = self.conn.cursor()
        cur.execute("SELECT id, access_token FROM users WHERE email = ?", (email.strip().lower(),))
        row = cur.fetchone()
        return (int(row[0]), row[1]) if row else None
