from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional

from models import ConnectionRecord


COLUMNS = [
    "id", "user_id", "first_name", "last_name", "email", "company",
    "position", "location", "connected_on", "profile_url", "created_at",
]


class ConnectionsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def insert_many(self, user_id: int, rows: List[Dict[str, Any]]) -> int:
        """Insert connection rows owned by ``user_id``; returns inserted count."""
        sql = (
            "INSERT INTO connections (user_id, first_name, last_name, email, company, position, location, connected_on, profile_url) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);"
        )
        params = [
            (
                user_id,
                r.get("first_name") or "",
                r.get("last_name") or "",
                r.get("email") or None,
                r.get("company") or None,
                r.get("position") or None,
                r.get("location") or None,
                r.get("connected_on") or None,
                r.get("profile_url") or None,
            )
            for r in rows
        ]
        self.conn.executemany(sql, params)
        self.conn.commit()
        return len(params)

    def list_for_user(self, user_id: int, limit: Optional[int] = None) -> List[ConnectionRecord]:
        """Connections owned by ``user_id`` in insertion order."""
        sql = f"SELECT {', '.join(COLUMNS)} FROM connections WHERE user_id = ? ORDER BY id"
        params: list = [user_id]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        cur = self.conn.cursor()
        cur.execute(sql, params)
        return [ConnectionRecord.model_validate(dict(zip(COLUMNS, row))) for row in cur.fetchall()]

    def count_for_user(self, user_id: int) -> int:
        cur = self.conn.cursor()
        cur.execute("SELECT COUNT(*) FROM connections WHERE user_id = ?", (user_id,))
        return int(cur.fetchone()[0])
