"""
HTTP entry point for the Nubble network assistant.

Serves the chat proxy behind a permissive CORS policy so the browser client
can call it directly. Run with: python cli.py serve
"""
from __future__ import annotations

import logging
from json import JSONDecodeError
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from starlette.datastructures import Headers

from config.settings import Settings, get_settings, validate_settings
from models import ChatRequest, ChatResult
from services.chat_service import ChatService, build_chat_service
from services.errors import BadRequest
from utils.logging_setup import init_logging


logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
}

# Legacy per-provider endpoints pin the primary provider; /chat uses the route default.
CHAT_ENDPOINTS = {
    "/chat": None,
    "/chatbot": "openai",
    "/anthropic-chat": "anthropic",
}


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """CORS handling whose preflight answers carry no body, matching plain OPTIONS."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        headers = {
            k: v for k, v in response.headers.items() if k not in ("content-length", "content-type")
        }
        return Response(status_code=response.status_code, headers=headers)


def _json(result: ChatResult, settings: Settings) -> JSONResponse:
    return JSONResponse(
        status_code=result.status_code,
        content=result.to_body(include_details=settings.expose_error_details),
        headers=CORS_HEADERS,
    )


def create_app(settings: Optional[Settings] = None, service: Optional[ChatService] = None) -> FastAPI:
    settings = settings or get_settings()
    init_logging(settings.log_level)
    if service is None:
        validate_settings(settings)
        service = build_chat_service(settings)
    missing = settings.missing_provider_keys()
    if missing:
        logger.warning(
            "chat providers unavailable: %s",
            ", ".join(missing),
            extra={"step": "startup", "status": "degraded"},
        )

    app = FastAPI(title="Nubble Assistant")
    app.add_middleware(
        EmptyPreflightCORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS", "GET"],
        allow_headers=CORS_ALLOW_HEADERS,
    )
    app.state.settings = settings
    app.state.chat_service = service

    def _make_chat_endpoint(primary: Optional[str]):
        async def chat_endpoint(request: Request) -> JSONResponse:
            try:
                payload = await request.json()
                body = ChatRequest.model_validate(payload if isinstance(payload, dict) else {})
            except (JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
                err = BadRequest("Missing query or access token", details=f"invalid request body: {e}")
                return _json(
                    ChatResult(error=err.message, details=err.details, kind=err.kind, status_code=err.status_code),
                    settings,
                )
            result = await run_in_threadpool(service.handle, body.query, body.access_token, primary or body.provider)
            return _json(result, settings)

        return chat_endpoint

    async def preflight() -> Response:
        return Response(status_code=200, headers=CORS_HEADERS)

    for path, primary in CHAT_ENDPOINTS.items():
        app.add_api_route(path, _make_chat_endpoint(primary), methods=["POST"])
        app.add_api_route(path, preflight, methods=["OPTIONS"])

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "providers": service.available_providers()}

    return app

