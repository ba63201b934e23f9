from __future__ import annotations

from typing import ContextManager, List, Protocol

from models import ConnectionRecord


class ConnectionsSessionPort(Protocol):
    """Row store access bound to one authenticated caller for one request."""

    user_id: str

    def fetch_connections(self) -> List[ConnectionRecord]:
        ...


class RowStorePort(Protocol):
    def open_session(self, access_token: str) -> ContextManager[ConnectionsSessionPort]:
        """Authenticate ``access_token``; raises ``AuthError`` if it is rejected."""
        ...
