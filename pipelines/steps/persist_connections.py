from __future__ import annotations

import sqlite3

from db.repos.connections_repo import ConnectionsRepo
from pipelines.runner import RunContext


class PersistConnections:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.repo = ConnectionsRepo(conn)

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.user_id is None:
            raise ValueError("PersistConnections requires ctx.user_id")
        inserted = self.repo.insert_many(ctx.user_id, ctx.connections or [])
        ctx.meta["processed_connections"] = inserted
        ctx.meta["total_connections"] = self.repo.count_for_user(ctx.user_id)
        return ctx
