"""Exception taxonomy shared by the cache, registry, and dispatcher."""

from __future__ import annotations

# JSON-RPC 2.0 error codes.
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
# MCP resource-not-found code.
RESOURCE_NOT_FOUND = -32002


class MoodboardError(Exception):
    """Base class for errors surfaced as structured responses."""

    code = INTERNAL_ERROR


class ProtocolError(MoodboardError):
    """Malformed JSON-RPC envelope, rejected before any cache interaction."""

    code = INVALID_REQUEST


class ParseError(ProtocolError):
    """Request body is not valid JSON."""

    code = PARSE_ERROR


class AuthError(MoodboardError):
    """Credential could not be resolved to an identity."""


class NotFoundError(MoodboardError):
    """Unknown tool, resource, prompt, or static asset."""

    code = INVALID_PARAMS


class MethodNotFoundError(NotFoundError):
    code = METHOD_NOT_FOUND


class ResourceNotFoundError(NotFoundError):
    code = RESOURCE_NOT_FOUND


class ValidationError(MoodboardError, ValueError):
    """Arguments violate a declared input schema."""

    code = INVALID_PARAMS


class CollaboratorError(MoodboardError):
    """An external collaborator (generation, assets) failed."""


class GenerationError(CollaboratorError):
    """The scene-code generation call failed or returned nothing usable."""


class ConfigError(MoodboardError, ValueError):
    """Invalid startup configuration. Fatal."""


__all__ = [
    "AuthError",
    "CollaboratorError",
    "ConfigError",
    "GenerationError",
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "MethodNotFoundError",
    "MoodboardError",
    "NotFoundError",
    "PARSE_ERROR",
    "ParseError",
    "ProtocolError",
    "RESOURCE_NOT_FOUND",
    "ResourceNotFoundError",
    "ValidationError",
]
