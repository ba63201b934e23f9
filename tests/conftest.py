from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'services.chat_service'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


def make_settings(**overrides):
    from config.settings import Settings

    values: Dict[str, Any] = dict(
        openai_api_key="sk-test-openai",
        openai_model="gpt-4o-mini",
        anthropic_api_key="sk-test-anthropic",
        anthropic_model="claude-3-haiku-20240307",
        row_store="sqlite",
        supabase_url="https://example.supabase.co",
        supabase_anon_key=None,
        db_path=":memory:",
        run_env="test",
        log_level="WARNING",
        http_timeout_seconds=5.0,
    )
    values.update(overrides)
    return Settings(**values)


class FakeProvider:
    """Scripted chat provider: each call pops the next outcome (text or exception)."""

    def __init__(self, name: str, outcomes: Optional[List[Any]] = None):
        self.name = name
        self.outcomes = list(outcomes or [])
        self.calls: List[Dict[str, Any]] = []

    def complete(self, system_prompt, user_message, *, max_tokens, temperature=None, request_id=None):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_message": user_message,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeSession:
    def __init__(self, store: "FakeStore"):
        self.store = store
        self.user_id = "user-1"

    def fetch_connections(self):
        self.store.fetch_calls += 1
        if self.store.fetch_error is not None:
            raise self.store.fetch_error
        return list(self.store.rows)


class FakeStore:
    """In-memory row store accepting a single valid token."""

    def __init__(self, rows=None, valid_token: str = "good-token", fetch_error: Optional[Exception] = None):
        self.rows = rows or []
        self.valid_token = valid_token
        self.fetch_error = fetch_error
        self.open_calls = 0
        self.fetch_calls = 0
        self.closed = 0

    @contextmanager
    def open_session(self, access_token):
        from services.errors import AuthError

        self.open_calls += 1
        if access_token != self.valid_token:
            raise AuthError("Your session has expired. Please sign in again.", details="bad token")
        try:
            yield FakeSession(self)
        finally:
            self.closed += 1


@pytest.fixture
def settings():
    return make_settings()
