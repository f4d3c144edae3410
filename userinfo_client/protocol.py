# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Request builders for the userinfo service endpoints."""

from __future__ import annotations

from urllib.parse import quote

from .config import DEFAULT_TIMEOUT
from .errors import CredentialEncodingError
from .transport import HttpRequest

LOGIN_PATH = "/login.asp"
USER_INFORMATION_PATH = "/user_information.asp"
LOGOUT_PATH = "/logout.asp"

USER_PARAMETER = "user"
PASSWORD_PARAMETER = "password"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def encode_field(value: str) -> str:
    """Percent-encode a form value as UTF-8.

    Raises:
        CredentialEncodingError: If ``value`` is not encodable (for example
            it contains a lone surrogate).
    """
    try:
        return quote(value, safe="")
    except UnicodeEncodeError as e:
        raise CredentialEncodingError(f"cannot encode credential: {e.reason}") from e


def login_form(identity: str, secret: str) -> bytes:
    """Build the ``user=...&password=...`` login body."""
    user = encode_field(identity)
    password = encode_field(secret)
    return f"{USER_PARAMETER}={user}&{PASSWORD_PARAMETER}={password}".encode("ascii")


def login_request(
    base_url: str,
    identity: str,
    secret: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> HttpRequest:
    """Build a LOGIN request."""
    return HttpRequest(
        method="POST",
        url=base_url + LOGIN_PATH,
        headers={"Content-Type": FORM_CONTENT_TYPE},
        body=login_form(identity, secret),
        timeout=timeout,
    )


def user_information_request(
    base_url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> HttpRequest:
    """Build a USER_INFORMATION request."""
    return HttpRequest(
        method="GET",
        url=base_url + USER_INFORMATION_PATH,
        headers=dict(headers or {}),
        timeout=timeout,
    )


def logout_request(
    base_url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> HttpRequest:
    """Build a LOGOUT request."""
    return HttpRequest(
        method="GET",
        url=base_url + LOGOUT_PATH,
        headers=dict(headers or {}),
        timeout=timeout,
    )
