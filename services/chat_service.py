from __future__ import annotations

import logging
import time
import uuid
from typing import Dict, List, Optional

from config.llm_routes import chat_route
from config.settings import Settings
from models import ChatResult
from ports import ChatProviderPort, RowStorePort
from services.errors import (
    AllProvidersFailed,
    AuthError,
    BadRequest,
    ChatError,
    ConfigError,
    DataFetchError,
    ProviderError,
)
from services.llm_client import known_providers
from services.prompts import build_system_prompt
from services.summarizer import summarize_connections


logger = logging.getLogger(__name__)


class ChatService:
    """Turns ``(query, access token)`` into an assistant reply about the caller's network.

    Per request: validate, authenticate against the row store, fetch the caller's
    connections, summarize them, then ask the primary provider. A failure of the
    preferred provider gets exactly one attempt on the fallback provider.
    No state is kept between requests.
    """

    def __init__(
        self,
        settings: Settings,
        store: RowStorePort,
        providers: Dict[str, ChatProviderPort],
        *,
        preferred_provider: Optional[str] = None,
        fallback_provider: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> None:
        route = chat_route()
        self.settings = settings
        self.store = store
        self.providers = providers
        self.preferred_provider = (preferred_provider or route["provider"]).lower()
        self.fallback_provider = (fallback_provider or route.get("fallback_provider") or "").lower() or None
        self.max_tokens = max_tokens or route.get("max_tokens", 300)
        self.temperature = temperature if temperature is not None else route.get("temperature")

    def handle(self, query: str, access_token: str, primary_provider: Optional[str] = None) -> ChatResult:
        """Run one chat exchange; every failure comes back as an error ``ChatResult``."""
        request_id = uuid.uuid4().hex[:12]
        primary = (primary_provider or self.preferred_provider).strip().lower()
        try:
            text, answered_by = self._run(query, access_token, primary, request_id)
        except ChatError as e:
            log = logger.warning if e.status_code < 500 else logger.error
            log(
                "chat request failed: %s",
                e.message,
                extra={"step": "chat", "status": e.kind, "error": e.details or "-", "request_id": request_id},
            )
            return ChatResult(error=e.message, details=e.details, kind=e.kind, status_code=e.status_code)
        except Exception as e:
            logger.exception(
                "unexpected chat failure",
                extra={"step": "chat", "status": "internal_error", "error": str(e), "request_id": request_id},
            )
            return ChatResult(
                error="Something went wrong. Please try again later.",
                details=str(e),
                kind=ChatError.kind,
                status_code=500,
            )
        return ChatResult(response=text, provider=answered_by)

    def _run(self, query: str, access_token: str, primary: str, request_id: str) -> tuple[str, str]:
        if not (query or "").strip() or not (access_token or "").strip():
            raise BadRequest("Missing query or access token")
        if primary not in self.providers and primary not in known_providers():
            raise BadRequest("Unknown provider", details=f"Unsupported provider: {primary}")
        provider = self.providers.get(primary)
        if provider is None:
            raise ConfigError(
                "The assistant is not configured.",
                details=f"No API key configured for provider: {primary}",
            )

        t0 = time.time()
        with self.store.open_session(access_token) as session:
            logger.info(
                "caller authenticated",
                extra={"step": "authenticate", "status": "ok", "request_id": request_id},
            )
            try:
                connections = session.fetch_connections()
            except DataFetchError:
                raise
            except Exception as e:
                raise DataFetchError("Failed to fetch user connections", details=str(e)) from e
        logger.info(
            "fetched %d connections",
            len(connections),
            extra={
                "step": "fetch_connections",
                "status": "ok",
                "duration_ms": int((time.time() - t0) * 1000),
                "request_id": request_id,
            },
        )

        system_prompt = build_system_prompt(summarize_connections(connections))

        try:
            return self._attempt(provider, system_prompt, query, request_id), provider.name
        except ProviderError as primary_failure:
            fallback = self._fallback_for(primary)
            if fallback is None:
                raise
            logger.warning(
                "primary provider failed; falling back to %s",
                fallback.name,
                extra={
                    "step": "fallback",
                    "status": primary_failure.reason,
                    "provider": primary,
                    "error": primary_failure.describe(),
                    "request_id": request_id,
                },
            )
            try:
                return self._attempt(fallback, system_prompt, query, request_id), fallback.name
            except ProviderError as fallback_failure:
                raise AllProvidersFailed([primary_failure, fallback_failure]) from fallback_failure

    def _fallback_for(self, primary: str) -> Optional[ChatProviderPort]:
        """Return the single fallback hop, only when the preferred provider failed."""
        if primary != self.preferred_provider:
            return None
        if not self.fallback_provider or self.fallback_provider == primary:
            return None
        return self.providers.get(self.fallback_provider)

    def _attempt(self, provider: ChatProviderPort, system_prompt: str, query: str, request_id: str) -> str:
        t0 = time.time()
        try:
            text = provider.complete(
                system_prompt,
                query,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                request_id=request_id,
            )
        except ProviderError as e:
            logger.warning(
                "provider call failed",
                extra={
                    "step": "provider_call",
                    "status": e.reason,
                    "provider": provider.name,
                    "duration_ms": int((time.time() - t0) * 1000),
                    "error": e.describe(),
                    "request_id": request_id,
                },
            )
            raise
        logger.info(
            "provider call succeeded",
            extra={
                "step": "provider_call",
                "status": "ok",
                "provider": provider.name,
                "duration_ms": int((time.time() - t0) * 1000),
                "request_id": request_id,
            },
        )
        return text

    def available_providers(self) -> List[str]:
        return sorted(self.providers)


def build_chat_service(settings: Settings) -> ChatService:
    from services.llm_client import build_providers
    from stores.registry import get_row_store

    return ChatService(settings, get_row_store(settings), build_providers(settings))
