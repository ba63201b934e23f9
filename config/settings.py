from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


DEFAULT_SUPABASE_URL = "https://xixicikohbspyfdkatwv.supabase.co"


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Providers
    openai_api_key: str | None
    openai_model: str
    anthropic_api_key: str | None
    anthropic_model: str

    # Row store
    row_store: str  # sqlite | supabase
    supabase_url: str
    supabase_anon_key: str | None
    db_path: str

    # Core/runtime
    run_env: str
    log_level: str
    http_timeout_seconds: float

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 8000

    # Logging/tracing
    llm_trace: bool = False
    llm_log_path: str = "logs/llm_calls.jsonl"

    # Include technical detail in error envelopes
    expose_error_details: bool = True

    def provider_key(self, provider: str) -> str | None:
        if provider == "openai":
            return self.openai_api_key
        if provider == "anthropic":
            return self.anthropic_api_key
        return None

    def missing_provider_keys(self) -> list[str]:
        missing = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if not self.anthropic_api_key:
            missing.append("ANTHROPIC_API_KEY")
        return missing


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    run_env = os.getenv("RUN_ENV", "local")
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        anthropic_model=os.getenv("ANTHROPIC_MODEL", "claude-3-haiku-20240307"),
        row_store=os.getenv("ROW_STORE", "sqlite").lower(),
        supabase_url=os.getenv("SUPABASE_URL") or DEFAULT_SUPABASE_URL,
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY") or None,
        db_path=os.getenv("DB_PATH", "nubble.db"),
        run_env=run_env,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "20")),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        llm_trace=_as_bool(os.getenv("LLM_TRACE")),
        llm_log_path=os.getenv("LLM_LOG_PATH", "logs/llm_calls.jsonl"),
        expose_error_details=_as_bool(
            os.getenv("EXPOSE_ERROR_DETAILS"),
            default=run_env.lower() != "production",
        ),
    )


def validate_settings(settings: Settings) -> None:
    """Fail fast on configuration that cannot serve any chat request.

    The fallback provider may lack a key (that hop is simply skipped); the
    preferred provider may not, and a Supabase row store needs its anon key.
    """
    from config.llm_routes import chat_route
    from services.errors import ConfigError
    from stores.registry import available_row_stores

    if not settings.openai_api_key and not settings.anthropic_api_key:
        raise ConfigError(
            "The assistant is not configured.",
            details="OPENAI_API_KEY or ANTHROPIC_API_KEY required",
        )
    preferred = chat_route()["provider"]
    if not settings.provider_key(preferred):
        raise ConfigError(
            "The assistant is not configured.",
            details=f"API key for preferred provider '{preferred}' required (LLM_CHAT_PROVIDER)",
        )
    if settings.row_store not in available_row_stores():
        raise ConfigError(
            "The assistant is not configured.",
            details=f"Unknown ROW_STORE: {settings.row_store}",
        )
    if settings.row_store == "supabase" and not settings.supabase_anon_key:
        raise ConfigError(
            "The assistant is not configured.",
            details="SUPABASE_ANON_KEY required when ROW_STORE=supabase",
        )
