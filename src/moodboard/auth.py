"""Caller identity and the credential resolvers used by the HTTP bindings."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass

from moodboard.errors import AuthError, ConfigError

logger = logging.getLogger("moodboard.auth")


@dataclass(frozen=True)
class Identity:
    """Authenticated caller. ``key`` selects the cached server instance."""

    key: str
    email: str = ""
    auth_method: str = ""

    def log_fields(self) -> dict[str, str]:
        return {"user_id": self.key, "user_email": self.email}


ResolveFn = Callable[[str], Awaitable[Identity]]


def extract_bearer(header: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        AuthError: If the header is missing or not a bearer credential.
    """
    if not header:
        raise AuthError("Missing Authorization header")
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Authorization header must use the Bearer scheme")
    return token.strip()


def parse_credential_map(raw: str | None, *, setting: str) -> dict[str, Identity]:
    """Parse ``token=user_id[:email]`` entries separated by commas.

    Raises:
        ConfigError: If an entry is malformed or a token repeats.
    """
    credentials: dict[str, Identity] = {}
    if not raw:
        return credentials
    for chunk in raw.split(","):
        entry = chunk.strip()
        if not entry:
            continue
        token, sep, owner = entry.partition("=")
        user_id, _, email = owner.partition(":")
        token, user_id = token.strip(), user_id.strip()
        if not sep or not token or not user_id:
            raise ConfigError(f"{setting} entries must look like token=user_id[:email]")
        if token in credentials:
            raise ConfigError(f"{setting} lists the same token twice")
        credentials[token] = Identity(key=user_id, email=email.strip())
    return credentials


class StaticCredentialResolver:
    """Resolves credentials against a fixed token table.

    Comparison is constant-time per entry. ``method`` tags the resulting
    identity and the auth log lines (``api_key`` or ``oauth``).
    """

    def __init__(self, credentials: Mapping[str, Identity], *, method: str) -> None:
        self._credentials = dict(credentials)
        self.method = method

    async def __call__(self, credential: str) -> Identity:
        for token, identity in self._credentials.items():
            if hmac.compare_digest(token.encode(), credential.encode()):
                logger.info(
                    "Authenticated %s via %s",
                    identity.key,
                    self.method,
                    extra={"event": "auth_attempt", "success": True, **identity.log_fields()},
                )
                return Identity(key=identity.key, email=identity.email, auth_method=self.method)
        logger.warning(
            "Rejected %s credential",
            self.method,
            extra={"event": "auth_attempt", "success": False},
        )
        raise AuthError("Invalid or expired credential")


__all__ = [
    "Identity",
    "ResolveFn",
    "StaticCredentialResolver",
    "extract_bearer",
    "parse_credential_map",
]
