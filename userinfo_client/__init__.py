# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Userinfo Client — cookie-session client for a user information service."""

from __future__ import annotations

from .config import BASE_URL_ENV, DEFAULT_BASE_URL, DEFAULT_TIMEOUT, get_base_url
from .errors import (
    CredentialEncodingError,
    MissingSessionCookieError,
    SessionRequiredError,
    UnexpectedStatusError,
    UserInfoDecodeError,
    UserInfoError,
    UserInfoProtocolError,
    UserInfoTimeoutError,
    UserInfoTransportError,
)
from .resolver import UserInfoResolver
from .service import SessionClient, SessionService, UserInfo
from .session import NO_SESSION, ActiveSession, NoSession, SessionState
from .transport import (
    Dispatch,
    HttpRequest,
    HttpResponse,
    HttpxTransport,
    Transport,
)
from . import protocol

__version__ = "0.1.0"

__all__ = [
    # Top-level functions
    "fetch_user_information",
    "get_base_url",
    # Classes
    "UserInfoResolver",
    "SessionClient",
    "SessionService",
    "UserInfo",
    "SessionState",
    "NoSession",
    "ActiveSession",
    "NO_SESSION",
    "Transport",
    "Dispatch",
    "HttpxTransport",
    "HttpRequest",
    "HttpResponse",
    # Configuration
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "BASE_URL_ENV",
    # Errors
    "UserInfoError",
    "CredentialEncodingError",
    "UserInfoTransportError",
    "UserInfoTimeoutError",
    "UserInfoProtocolError",
    "UnexpectedStatusError",
    "MissingSessionCookieError",
    "SessionRequiredError",
    "UserInfoDecodeError",
]


def fetch_user_information(
    identity: str,
    secret: str,
    *,
    base_url: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Transport | None = None,
) -> UserInfo | None:
    """Log in, read the user's information and log out, blocking until done.

    Args:
        identity: The username to log in with.
        secret: The password to log in with.
        base_url: Service base URL. Defaults to :func:`get_base_url`.
        timeout: Per-request timeout in seconds.
        transport: Transport to use. An :class:`HttpxTransport` is created
            and closed when omitted.

    Returns:
        The user's information, or None if any step failed.
    """
    owned = transport is None
    client = SessionClient(
        transport if transport is not None else HttpxTransport(),
        base_url=base_url,
        timeout=timeout,
    )
    try:
        return UserInfoResolver(client).resolve_user(identity, secret).result()
    finally:
        if owned:
            client.close()
