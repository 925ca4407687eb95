"""JSON-RPC request dispatch on top of the per-identity instance cache.

A request moves through: parse and validate the envelope (malformed input is
rejected before the cache is touched), resolve the caller's instance through
the cache, route the method, run it, and serialize exactly one response that
echoes the request id. Notifications (no ``id``) produce no response.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from mcp.types import LATEST_PROTOCOL_VERSION
from pydantic import BaseModel

from moodboard import __version__
from moodboard.auth import Identity
from moodboard.cache import BoundedInstanceCache
from moodboard.descriptions import SERVER_INSTRUCTIONS
from moodboard.errors import (
    INTERNAL_ERROR,
    MethodNotFoundError,
    MoodboardError,
    ParseError,
    ProtocolError,
    ValidationError,
)
from moodboard.instance import SERVER_NAME, InstanceFactory, ProtocolServerInstance
from moodboard.resources import has_ui_support
from moodboard.telemetry import annotate, generate_request_id, trace_span

logger = logging.getLogger("moodboard.dispatcher")

JSONRPC_VERSION = "2.0"

RequestId = str | int | float | None
MethodHandler = Callable[
    [ProtocolServerInstance, dict[str, Any]],
    Awaitable[dict[str, Any]],
]

SERVER_CAPABILITIES: dict[str, Any] = {
    "tools": {},
    "prompts": {"listChanged": True},
    "resources": {"listChanged": True},
}


@dataclass(frozen=True)
class Envelope:
    """A validated JSON-RPC request or notification."""

    id: RequestId
    method: str
    params: dict[str, Any]
    is_notification: bool = False


def jsonrpc_result(request_id: RequestId, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def jsonrpc_error(request_id: RequestId, code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, exclude_none=True, mode="json")


def _valid_id(value: Any) -> bool:
    if value is None or isinstance(value, str):
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def decode_message(raw: str | bytes | dict[str, Any]) -> Any:
    """Decode a raw request body.

    Raises:
        ParseError: If ``raw`` is not valid JSON.
    """
    if isinstance(raw, dict):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Parse error: {exc}") from exc
    except RecursionError as exc:
        raise ParseError("Parse error: request nested too deeply") from exc


def parse_envelope(message: Any) -> Envelope:
    """Validate a decoded JSON-RPC message.

    Raises:
        ProtocolError: Not an object, wrong ``jsonrpc`` marker, bad ``id``,
            missing ``method``, or non-object ``params``.
    """
    if not isinstance(message, dict):
        raise ProtocolError("Invalid Request: expected a JSON object")
    if message.get("jsonrpc") != JSONRPC_VERSION:
        raise ProtocolError("Invalid Request: jsonrpc must be \"2.0\"")
    request_id = message.get("id")
    if not _valid_id(request_id):
        raise ProtocolError("Invalid Request: id must be a string, number, or null")
    method = message.get("method")
    if not isinstance(method, str) or not method:
        raise ProtocolError("Invalid Request: method is required")
    params = message.get("params")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise ProtocolError("Invalid Request: params must be an object")
    return Envelope(
        id=request_id,
        method=method,
        params=params,
        is_notification="id" not in message,
    )


def _require_str(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise ValidationError(f"params.{key} must be a non-empty string")
    return value


class RequestDispatcher:
    """Routes JSON-RPC messages to the caller's cached server instance.

    Args:
        cache: Instance cache owned by the process; shared by all transports.
        factory: Builds an instance on a cache miss.
    """

    def __init__(
        self,
        cache: BoundedInstanceCache[str, ProtocolServerInstance],
        factory: InstanceFactory,
    ) -> None:
        self.cache = cache
        self.factory = factory
        self._routes: dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "resources/list": self._resources_list,
            "resources/read": self._resources_read,
            "prompts/list": self._prompts_list,
            "prompts/get": self._prompts_get,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._routes)

    def resolve_instance(self, identity: Identity) -> ProtocolServerInstance:
        """Return the cached instance for ``identity``, creating it on first use."""
        return self.cache.get_or_create(identity.key, lambda: self.factory.create(identity))

    async def dispatch(
        self,
        raw: str | bytes | dict[str, Any],
        identity: Identity,
    ) -> dict[str, Any] | None:
        """Handle one inbound message and return its response.

        Returns None for notifications. Every other input, including malformed
        ones, yields a well-formed JSON-RPC response.
        """
        try:
            message = decode_message(raw)
        except ParseError as exc:
            logger.warning("Rejected unparseable request: %s", exc)
            return jsonrpc_error(None, exc.code, str(exc))

        request_id = message.get("id") if isinstance(message, dict) else None
        if not _valid_id(request_id):
            request_id = None
        try:
            envelope = parse_envelope(message)
        except ProtocolError as exc:
            logger.warning("Rejected malformed request: %s", exc)
            return jsonrpc_error(request_id, exc.code, str(exc))

        if envelope.is_notification:
            logger.debug("Notification %s from %s", envelope.method, identity.key)
            return None

        trace_id = generate_request_id()
        with trace_span(
            f"dispatch/{envelope.method}",
            attributes={
                "moodboard.method": envelope.method,
                "moodboard.request_id": trace_id,
                "moodboard.user_id": identity.key,
            },
        ) as span:
            response = await self._execute(envelope, identity)
            annotate(span, error=int("error" in response))
            return response

    async def _execute(self, envelope: Envelope, identity: Identity) -> dict[str, Any]:
        try:
            handler = self._routes.get(envelope.method)
            if handler is None:
                raise MethodNotFoundError(f"Method not found: {envelope.method}")
            instance = self.resolve_instance(identity)
            result = await handler(instance, envelope.params)
            return jsonrpc_result(envelope.id, result)
        except MoodboardError as exc:
            logger.warning(
                "%s failed for %s: %s",
                envelope.method,
                identity.key,
                exc,
                extra={"event": "request_failed", "method": envelope.method, **identity.log_fields()},
            )
            return jsonrpc_error(envelope.id, exc.code, str(exc))
        except Exception as exc:
            logger.error(
                "Unhandled error in %s for %s: %s",
                envelope.method,
                identity.key,
                exc,
                extra={"event": "server_error", "method": envelope.method, **identity.log_fields()},
            )
            return jsonrpc_error(envelope.id, INTERNAL_ERROR, f"Internal error: {exc}")

    async def _initialize(
        self, instance: ProtocolServerInstance, params: dict[str, Any]
    ) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION
        logger.debug(
            "Initialize from %s (protocol %s, ui support: %s)",
            instance.identity.key,
            version,
            has_ui_support(params.get("capabilities")),
        )
        return {
            "protocolVersion": version,
            "capabilities": SERVER_CAPABILITIES,
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
            "instructions": SERVER_INSTRUCTIONS,
        }

    async def _ping(self, instance: ProtocolServerInstance, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    async def _tools_list(
        self, instance: ProtocolServerInstance, params: dict[str, Any]
    ) -> dict[str, Any]:
        return {"tools": [_dump(tool) for tool in instance.list_tools()]}

    async def _tools_call(
        self, instance: ProtocolServerInstance, params: dict[str, Any]
    ) -> dict[str, Any]:
        name = _require_str(params, "name")
        result = await instance.call_tool(name, params.get("arguments"))
        return _dump(result)

    async def _resources_list(
        self, instance: ProtocolServerInstance, params: dict[str, Any]
    ) -> dict[str, Any]:
        return {"resources": [_dump(resource) for resource in instance.list_resources()]}

    async def _resources_read(
        self, instance: ProtocolServerInstance, params: dict[str, Any]
    ) -> dict[str, Any]:
        uri = _require_str(params, "uri")
        return _dump(await instance.read_resource(uri))

    async def _prompts_list(
        self, instance: ProtocolServerInstance, params: dict[str, Any]
    ) -> dict[str, Any]:
        return {"prompts": [_dump(prompt) for prompt in instance.list_prompts()]}

    async def _prompts_get(
        self, instance: ProtocolServerInstance, params: dict[str, Any]
    ) -> dict[str, Any]:
        name = _require_str(params, "name")
        arguments = params.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            raise ValidationError("params.arguments must be an object")
        return _dump(instance.get_prompt(name, arguments))


__all__ = [
    "Envelope",
    "RequestDispatcher",
    "decode_message",
    "jsonrpc_error",
    "jsonrpc_result",
    "parse_envelope",
]
