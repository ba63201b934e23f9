from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import requests

from config.settings import Settings
from models import ConnectionRecord
from services.errors import AuthError, DataFetchError


CONNECTIONS_TABLE = "connections"


class SupabaseConnectionsSession:
    """PostgREST reads on behalf of one authenticated user.

    Requests carry the caller's JWT so row level security applies in addition
    to the explicit ``user_id`` filter.
    """

    def __init__(self, http: requests.Session, base_url: str, user_id: str, timeout: float):
        self.http = http
        self.base_url = base_url
        self.user_id = user_id
        self.timeout = timeout

    def fetch_connections(self) -> List[ConnectionRecord]:
        url = f"{self.base_url}/rest/v1/{CONNECTIONS_TABLE}"
        params = {"select": "*", "user_id": f"eq.{self.user_id}"}
        try:
            response = self.http.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise DataFetchError("Failed to fetch user connections", details=str(e)) from e
        if not 200 <= response.status_code < 300:
            raise DataFetchError(
                "Failed to fetch user connections",
                details=f"row store returned {response.status_code}: {response.text}",
            )
        try:
            rows = response.json()
        except ValueError as e:
            raise DataFetchError("Failed to fetch user connections", details=f"invalid JSON: {e}") from e
        if not isinstance(rows, list):
            raise DataFetchError("Failed to fetch user connections", details="unexpected payload shape")
        return [ConnectionRecord.model_validate(r) for r in rows]


class SupabaseRowStore:
    """Hosted row store reached over its REST (PostgREST) and auth (GoTrue) APIs."""

    name = "supabase"

    def __init__(self, base_url: str, anon_key: str, timeout: float = 20.0):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseRowStore":
        return cls(settings.supabase_url, settings.supabase_anon_key or "", settings.http_timeout_seconds)

    def _authenticate(self, http: requests.Session) -> str:
        try:
            response = http.get(f"{self.base_url}/auth/v1/user", timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise AuthError("Could not verify your session. Please sign in again.", details=str(e)) from e
        if response.status_code != 200:
            raise AuthError(
                "Your session has expired. Please sign in again.",
                details=f"auth returned {response.status_code}: {response.text}",
            )
        try:
            user: Optional[Dict[str, Any]] = response.json()
        except ValueError:
            user = None
        user_id = (user or {}).get("id")
        if not user_id:
            raise AuthError("Your session has expired. Please sign in again.", details="auth payload missing user id")
        return str(user_id)

    @contextmanager
    def open_session(self, access_token: str) -> Iterator[SupabaseConnectionsSession]:
        http = requests.Session()
        http.headers.update({
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        })
        try:
            user_id = self._authenticate(http)
            yield SupabaseConnectionsSession(http, self.base_url, user_id, self.timeout)
        finally:
            http.close()
