from __future__ import annotations

from typing import List, Optional


class ChatError(Exception):
    """Base for every failure the chat handler converts into an error envelope.

    ``message`` is the short, user-facing sentence; ``details`` carries the
    technical diagnostic (provider bodies, exception text) for logs and debugging.
    """

    kind: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class BadRequest(ChatError):
    kind = "bad_request"
    status_code = 400


class ConfigError(ChatError):
    kind = "config_error"
    status_code = 500


class AuthError(ChatError):
    kind = "auth_error"
    status_code = 401


class DataFetchError(ChatError):
    kind = "data_fetch_error"
    status_code = 500


class ProviderError(ChatError):
    """A single provider attempt failed.

    ``reason`` is one of: transport, http, application, empty.
    """

    kind = "provider_error"
    status_code = 502

    TRANSPORT = "transport"
    HTTP = "http"
    APPLICATION = "application"
    EMPTY = "empty"

    def __init__(
        self,
        provider: str,
        reason: str,
        details: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__("The assistant could not generate a response.", details=details)
        self.provider = provider
        self.reason = reason
        self.status = status

    def describe(self) -> str:
        text = f"{self.provider} {self.reason}"
        if self.status is not None:
            text += f" ({self.status})"
        if self.details:
            text += f": {self.details}"
        return text


class AllProvidersFailed(ChatError):
    kind = "all_providers_failed"
    status_code = 503

    def __init__(self, failures: List[ProviderError]) -> None:
        super().__init__(
            "The assistant is unavailable right now. Please try again later.",
            details="; ".join(f.describe() for f in failures),
        )
        self.failures = failures
