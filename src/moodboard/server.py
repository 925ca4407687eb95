"""MCP server generating Three.js mood scenes, with one cached instance per caller."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
import uvicorn
from mcp.server.stdio import stdio_server
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from moodboard.auth import (
    Identity,
    ResolveFn,
    StaticCredentialResolver,
    extract_bearer,
    parse_credential_map,
)
from moodboard.cache import BoundedInstanceCache
from moodboard.dispatcher import RequestDispatcher
from moodboard.errors import AuthError, ConfigError
from moodboard.generator import DEFAULT_MODEL, ChatCompletionsGenerator, GenerateFn, unconfigured_generator
from moodboard.instance import InstanceFactory, LoadAssetFn, ProtocolServerInstance
from moodboard.resources import FileAssetLoader

logger = logging.getLogger("moodboard")


def _int_env(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


MAX_CACHED_SERVERS = _int_env("MOODBOARD_MAX_CACHED_SERVERS", "100")
TRANSPORT = os.environ.get("MOODBOARD_TRANSPORT", "http").strip().lower() or "http"
HOST = os.environ.get("MOODBOARD_HOST", "127.0.0.1")
PORT = _int_env("MOODBOARD_PORT", "8787")
LOCAL_USER = os.environ.get("MOODBOARD_LOCAL_USER", "").strip() or "local"
ASSETS_DIR = os.environ.get("MOODBOARD_ASSETS_DIR", os.path.join("web", "dist", "widgets"))
AI_BASE_URL = os.environ.get("MOODBOARD_AI_BASE_URL", "").strip()
AI_API_KEY = os.environ.get("MOODBOARD_AI_API_KEY") or None
AI_MODEL = os.environ.get("MOODBOARD_AI_MODEL", "").strip() or DEFAULT_MODEL
GENERATION_TIMEOUT = _int_env("MOODBOARD_GENERATION_TIMEOUT", "60")


def _configure_logging() -> None:
    level = os.environ.get("MOODBOARD_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_generator() -> GenerateFn:
    if not AI_BASE_URL:
        logger.warning("MOODBOARD_AI_BASE_URL is not set; generate_mood_scene will return errors")
        return unconfigured_generator
    if GENERATION_TIMEOUT <= 0:
        raise ConfigError("MOODBOARD_GENERATION_TIMEOUT must be positive")
    return ChatCompletionsGenerator(
        AI_BASE_URL,
        api_key=AI_API_KEY,
        model=AI_MODEL,
        timeout=float(GENERATION_TIMEOUT),
    )


def build_dispatcher(
    *,
    capacity: int | None = None,
    generate: GenerateFn | None = None,
    load_asset: LoadAssetFn | None = None,
) -> RequestDispatcher:
    """Construct the process-wide cache and the dispatcher that owns it.

    Raises:
        ConfigError: On invalid cache capacity or collaborator settings.
    """
    cache: BoundedInstanceCache[str, ProtocolServerInstance] = BoundedInstanceCache(
        MAX_CACHED_SERVERS if capacity is None else capacity
    )
    factory = InstanceFactory(
        generate=generate or _build_generator(),
        load_asset=load_asset or FileAssetLoader(ASSETS_DIR),
    )
    return RequestDispatcher(cache, factory)


def build_resolvers() -> tuple[ResolveFn, ResolveFn]:
    """API-key and OAuth resolvers from ``MOODBOARD_API_KEYS`` / ``MOODBOARD_OAUTH_TOKENS``."""
    api_keys = parse_credential_map(
        os.environ.get("MOODBOARD_API_KEYS"), setting="MOODBOARD_API_KEYS"
    )
    oauth_tokens = parse_credential_map(
        os.environ.get("MOODBOARD_OAUTH_TOKENS"), setting="MOODBOARD_OAUTH_TOKENS"
    )
    if not api_keys and not oauth_tokens:
        logger.warning("No credentials configured; every HTTP request will be rejected")
    return (
        StaticCredentialResolver(api_keys, method="api_key"),
        StaticCredentialResolver(oauth_tokens, method="oauth"),
    )


async def _handle_mcp(
    request: Request,
    dispatcher: RequestDispatcher,
    resolver: ResolveFn,
) -> Response:
    try:
        identity = await resolver(extract_bearer(request.headers.get("authorization")))
    except AuthError as exc:
        return JSONResponse({"error": str(exc)}, status_code=401)
    except Exception as exc:
        logger.error("Identity resolution failed: %s", exc, extra={"event": "server_error"})
        return JSONResponse({"error": f"Internal server error: {exc}"}, status_code=500)

    body = await request.body()
    response = await dispatcher.dispatch(body, identity)
    if response is None:
        return Response(status_code=202)
    return JSONResponse(response)


def create_app(
    dispatcher: RequestDispatcher,
    *,
    api_key_resolver: ResolveFn,
    oauth_resolver: ResolveFn,
) -> Starlette:
    """ASGI app with the API-key (``/mcp``) and OAuth (``/oauth/mcp``) bindings.

    Both bindings share ``dispatcher`` and therefore one instance cache; they
    differ only in how the caller identity is resolved.
    """

    async def api_key_endpoint(request: Request) -> Response:
        return await _handle_mcp(request, dispatcher, api_key_resolver)

    async def oauth_endpoint(request: Request) -> Response:
        return await _handle_mcp(request, dispatcher, oauth_resolver)

    async def health(request: Request) -> Response:
        return JSONResponse({"status": "ok", "cache": dispatcher.cache.stats()})

    app = Starlette(
        routes=[
            Route("/mcp", api_key_endpoint, methods=["POST"]),
            Route("/oauth/mcp", oauth_endpoint, methods=["POST"]),
            Route("/health", health, methods=["GET"]),
        ]
    )
    app.state.dispatcher = dispatcher
    return app


async def run_stdio(dispatcher: RequestDispatcher) -> None:
    """Serve the local identity's instance over stdio until the client disconnects."""
    instance = dispatcher.resolve_instance(Identity(key=LOCAL_USER, auth_method="local"))
    async with stdio_server() as (read_stream, write_stream):
        await instance.server.run(
            read_stream,
            write_stream,
            instance.server.create_initialization_options(),
        )


def main() -> None:
    """CLI entry point: validate configuration, then serve over HTTP or stdio."""
    _configure_logging()
    if TRANSPORT not in {"http", "stdio"}:
        message = f"MOODBOARD_TRANSPORT must be 'http' or 'stdio', got {TRANSPORT!r}"
        logger.error(message)
        print(message, file=sys.stderr)
        sys.exit(1)
    try:
        dispatcher = build_dispatcher()
        api_key_resolver, oauth_resolver = build_resolvers()
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if TRANSPORT == "stdio":
        asyncio.run(run_stdio(dispatcher))
        return

    app = create_app(dispatcher, api_key_resolver=api_key_resolver, oauth_resolver=oauth_resolver)
    logger.info(
        "Serving on %s:%d (max cached servers: %d)",
        HOST,
        PORT,
        dispatcher.cache.capacity,
        extra={"event": "server_started", "auth_mode": "dual"},
    )
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
