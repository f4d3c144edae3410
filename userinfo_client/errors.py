# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Exception types for the userinfo client.

These never escape a :class:`~userinfo_client.service.SessionClient` future;
they are raised while a response is interpreted and collapse to ``False`` or
``None`` at that boundary.
"""


class UserInfoError(Exception):
    """Base exception for all userinfo client errors."""


class CredentialEncodingError(UserInfoError):
    """A credential could not be encoded into the login form."""


class UserInfoTransportError(UserInfoError):
    """The transport failed to deliver a response."""


class UserInfoTimeoutError(UserInfoTransportError):
    """The request timed out."""


class UserInfoProtocolError(UserInfoError):
    """The transport returned something that is not an HTTP response."""


class UnexpectedStatusError(UserInfoProtocolError):
    """The service answered with a status other than 200."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"unexpected HTTP status {status_code}")
        self.status_code = status_code


class MissingSessionCookieError(UserInfoProtocolError):
    """Login succeeded at the HTTP level but set no cookie."""


class SessionRequiredError(UserInfoError):
    """An authenticated operation was attempted without a session."""


class UserInfoDecodeError(UserInfoError):
    """The response body was empty or not a flat JSON object of strings."""
