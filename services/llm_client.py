from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from config.llm_routes import chat_route
from config.settings import Settings
from services.errors import ProviderError
from utils.llm_logger import log_call, sha256_text


logger = logging.getLogger(__name__)


def _field(obj: Any, name: str) -> Any:
    """Read ``name`` from an SDK model or a plain dict payload."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _error_text(err: Any) -> str:
    message = _field(err, "message")
    if message:
        return str(message)
    return str(err)


class ChatProvider:
    """One chat-completion vendor behind a uniform ``complete`` call.

    Subclasses build the vendor request and pull the text out of the vendor
    envelope; this class owns timing, trace logging and failure classification.
    Exactly one request is made per call; SDK clients are built with retries off.
    """

    name: str = "base"

    def __init__(self, settings: Settings, *, model: str, client: Any = None) -> None:
        self.settings = settings
        self.model = model
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def _build_client(self) -> Any:
        raise NotImplementedError

    def _create(self, system_prompt: str, user_message: str, max_tokens: int, temperature: Optional[float]) -> Any:
        raise NotImplementedError

    def _application_error(self, resp: Any) -> Optional[str]:
        raise NotImplementedError

    def _extract_text(self, resp: Any) -> Optional[str]:
        raise NotImplementedError

    def _usage(self, resp: Any) -> Optional[Dict[str, Any]]:
        return None

    def _classify_exception(self, exc: Exception) -> Optional[ProviderError]:
        raise NotImplementedError

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: int,
        temperature: Optional[float] = None,
        request_id: Optional[str] = None,
    ) -> str:
        t0 = time.time()
        try:
            try:
                resp = self._create(system_prompt, user_message, max_tokens, temperature)
            except Exception as exc:
                # Undecodable bodies surface as JSON/validation errors from the SDK
                failure = self._classify_exception(exc) or ProviderError(
                    self.name, ProviderError.APPLICATION, details=f"malformed response: {exc}"
                )
                raise failure from exc

            try:
                app_error = self._application_error(resp)
                text = None if app_error else self._extract_text(resp)
            except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
                raise ProviderError(
                    self.name, ProviderError.APPLICATION, details=f"malformed response: {exc}"
                ) from exc
            if app_error:
                raise ProviderError(self.name, ProviderError.APPLICATION, details=app_error)
            if text is not None and not isinstance(text, str):
                raise ProviderError(
                    self.name,
                    ProviderError.APPLICATION,
                    details=f"malformed response: content is {type(text).__name__}",
                )
            if not text or not text.strip():
                raise ProviderError(self.name, ProviderError.EMPTY, details="empty response")
        except ProviderError as failure:
            self._trace("error", t0, request_id, system_prompt, error=failure.describe())
            raise
        self._trace("ok", t0, request_id, system_prompt, usage=self._usage(resp))
        return text

    def _trace(
        self,
        status: str,
        t0: float,
        request_id: Optional[str],
        prompt_text: str,
        *,
        error: Optional[str] = None,
        usage: Optional[Dict[str, Any]] = None,
    ) -> None:
        route = chat_route()
        log_call(
            caller=f"llm_client.{self.name}.complete",
            provider=self.name,
            model=self.model,
            operation=route.get("operation", "network_chat"),
            prompt_name="network_chat_system",
            prompt_hash=sha256_text(prompt_text),
            duration_ms=int((time.time() - t0) * 1000),
            status=status,
            error=error,
            usage=usage,
            request_id=request_id,
            settings=self.settings,
        )


class OpenAIChatProvider(ChatProvider):
    name = "openai"

    def _build_client(self) -> Any:
        from openai import OpenAI
        return OpenAI(
            api_key=self.settings.openai_api_key,
            timeout=self.settings.http_timeout_seconds,
            max_retries=0,
        )

    def _create(self, system_prompt: str, user_message: str, max_tokens: int, temperature: Optional[float]) -> Any:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "max_tokens": max_tokens,
        }
        # Only pass temperature if explicitly provided (some models only accept default)
        if temperature is not None:
            kwargs["temperature"] = temperature
        return self.client.chat.completions.create(**kwargs)

    def _classify_exception(self, exc: Exception) -> Optional[ProviderError]:
        import openai

        if isinstance(exc, openai.APIStatusError):
            return ProviderError(self.name, ProviderError.HTTP, details=_status_body(exc), status=exc.status_code)
        if isinstance(exc, openai.APIConnectionError):
            return ProviderError(self.name, ProviderError.TRANSPORT, details=str(exc))
        return None

    def _application_error(self, resp: Any) -> Optional[str]:
        err = _field(resp, "error")
        return _error_text(err) if err else None

    def _extract_text(self, resp: Any) -> Optional[str]:
        choices = _field(resp, "choices") or []
        if not choices:
            return None
        message = _field(choices[0], "message")
        return _field(message, "content") if message is not None else None

    def _usage(self, resp: Any) -> Optional[Dict[str, Any]]:
        usage = _field(resp, "usage")
        if not usage:
            return None
        return {
            "prompt_tokens": _field(usage, "prompt_tokens"),
            "completion_tokens": _field(usage, "completion_tokens"),
            "total_tokens": _field(usage, "total_tokens"),
        }


class AnthropicChatProvider(ChatProvider):
    name = "anthropic"

    def _build_client(self) -> Any:
        from anthropic import Anthropic
        return Anthropic(
            api_key=self.settings.anthropic_api_key,
            timeout=self.settings.http_timeout_seconds,
            max_retries=0,
        )

    def _create(self, system_prompt: str, user_message: str, max_tokens: int, temperature: Optional[float]) -> Any:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_message}],
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        return self.client.messages.create(**kwargs)

    def _classify_exception(self, exc: Exception) -> Optional[ProviderError]:
        import anthropic

        if isinstance(exc, anthropic.APIStatusError):
            return ProviderError(self.name, ProviderError.HTTP, details=_status_body(exc), status=exc.status_code)
        if isinstance(exc, anthropic.APIConnectionError):
            return ProviderError(self.name, ProviderError.TRANSPORT, details=str(exc))
        return None

    def _application_error(self, resp: Any) -> Optional[str]:
        if _field(resp, "type") == "error":
            return _error_text(_field(resp, "error") or "provider returned an error payload")
        err = _field(resp, "error")
        return _error_text(err) if err else None

    def _extract_text(self, resp: Any) -> Optional[str]:
        blocks = _field(resp, "content") or []
        texts = [_field(b, "text") for b in blocks if _field(b, "type") in (None, "text")]
        texts = [t for t in texts if t]
        return "".join(texts) if texts else None

    def _usage(self, resp: Any) -> Optional[Dict[str, Any]]:
        usage = _field(resp, "usage")
        if not usage:
            return None
        prompt_tokens = _field(usage, "input_tokens")
        completion_tokens = _field(usage, "output_tokens")
        total = None
        if prompt_tokens is not None and completion_tokens is not None:
            total = prompt_tokens + completion_tokens
        return {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": total,
        }


def _status_body(exc: Any) -> str:
    response = getattr(exc, "response", None)
    body = getattr(response, "text", None) if response is not None else None
    return body or str(exc)


PROVIDER_CLASSES = {
    OpenAIChatProvider.name: OpenAIChatProvider,
    AnthropicChatProvider.name: AnthropicChatProvider,
}


def build_providers(settings: Settings) -> Dict[str, ChatProvider]:
    """Instantiate every provider whose API key is configured."""
    route = chat_route()
    models = {
        "openai": route.get("openai_model") or settings.openai_model,
        "anthropic": route.get("anthropic_model") or settings.anthropic_model,
    }
    providers: Dict[str, ChatProvider] = {}
    for name, cls in PROVIDER_CLASSES.items():
        if settings.provider_key(name):
            providers[name] = cls(settings, model=models[name])
        else:
            logger.info("provider disabled: no API key", extra={"provider": name, "status": "disabled"})
    return providers


def known_providers() -> List[str]:
    return list(PROVIDER_CLASSES)
