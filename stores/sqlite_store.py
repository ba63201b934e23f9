from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator, List

from config.settings import Settings
from db.connection import open_database
from db.repos.connections_repo import ConnectionsRepo
from db.repos.users_repo import UsersRepo
from models import ConnectionRecord
from services.errors import AuthError, DataFetchError


class SqliteConnectionsSession:
    def __init__(self, conn: sqlite3.Connection, user_id: int):
        self.conn = conn
        self.user_id = str(user_id)
        self._repo = ConnectionsRepo(conn)
        self._user_pk = user_id

    def fetch_connections(self) -> List[ConnectionRecord]:
        try:
            return self._repo.list_for_user(self._user_pk)
        except sqlite3.Error as e:
            raise DataFetchError("Failed to fetch user connections", details=str(e)) from e


class SqliteRowStore:
    """Local row store: access tokens resolve through the ``users`` table."""

    name = "sqlite"

    def __init__(self, db_path: str):
        self.db_path = db_path

    @classmethod
    def from_settings(cls, settings: Settings) -> "SqliteRowStore":
        return cls(settings.db_path)

    @contextmanager
    def open_session(self, access_token: str) -> Iterator[SqliteConnectionsSession]:
        try:
            conn = open_database(self.db_path)
        except (sqlite3.Error, OSError) as e:
            raise DataFetchError("Failed to fetch user connections", details=str(e)) from e
        try:
            user_id = UsersRepo(conn).find_id_by_token(access_token) if access_token else None
            if user_id is None:
                raise AuthError("Your session has expired. Please sign in again.", details="unknown access token")
            yield SqliteConnectionsSession(conn, user_id)
        finally:
            conn.close()
