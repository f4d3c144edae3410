# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Cookie-authenticated access to the userinfo service."""

from __future__ import annotations

import dataclasses
import json
import logging
from concurrent.futures import Future, InvalidStateError
from typing import Any, Callable, Optional, Protocol, TypeVar

from . import protocol
from .config import DEFAULT_TIMEOUT, get_base_url
from .cookies import cookie_header, extract_cookies
from .errors import (
    CredentialEncodingError,
    MissingSessionCookieError,
    SessionRequiredError,
    UnexpectedStatusError,
    UserInfoDecodeError,
    UserInfoError,
    UserInfoProtocolError,
    UserInfoTransportError,
)
from .session import NO_SESSION, ActiveSession, SessionState
from .transport import HttpRequest, HttpResponse, HttpxTransport, Transport

logger = logging.getLogger(__name__)

HTTP_OK = 200

T = TypeVar("T")

UserInfo = dict[str, str]


class SessionService(Protocol):
    """The three session operations a resolver depends on."""

    def authenticate(self, identity: str, secret: str) -> Future[bool]:
        ...

    def fetch_resource(self) -> Future[Optional[UserInfo]]:
        ...

    def terminate(self) -> Future[bool]:
        ...


class SessionClient:
    """Logs in, reads user information and logs out over one cookie session.

    Every operation returns a :class:`~concurrent.futures.Future` that
    completes exactly once. Failures never raise through the future: they
    resolve to ``False`` or ``None`` and are logged.

    Example::

        client = SessionClient()
        if client.authenticate("me", "pw").result():
            info = client.fetch_resource().result()
            client.terminate().result()
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._transport = transport if transport is not None else HttpxTransport()
        self._base_url = (base_url or get_base_url()).rstrip("/")
        self._timeout = timeout
        self._state: SessionState = NO_SESSION

    @property
    def session(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self._state, ActiveSession)

    @property
    def base_url(self) -> str:
        return self._base_url

    def authenticate(self, identity: str, secret: str) -> Future[bool]:
        """Log in as ``identity``.

        Resolves to ``True`` only for a 200 response that sets at least one
        cookie; those cookies replace the current session. Any other outcome
        resolves to ``False`` and leaves the session as it was.
        """
        try:
            request = protocol.login_request(
                self._base_url, identity, secret, timeout=self._timeout
            )
        except CredentialEncodingError as e:
            logger.info("Login for %r not sent: %s", identity, e)
            return _completed(False)

        def interpret(response: HttpResponse) -> bool:
            _require_ok(response)
            cookies = extract_cookies(response)
            if not cookies:
                raise MissingSessionCookieError("login response set no cookie")
            self._state = ActiveSession(cookies=tuple(cookies))
            return True

        return self._dispatch(request, interpret, failure=False)

    def fetch_resource(self) -> Future[Optional[UserInfo]]:
        """Read the current user's information.

        Resolves to the decoded mapping, or ``None`` when there is no session
        or the request fails in any way. The session is never modified.
        """
        try:
            session = self._active_session()
        except SessionRequiredError as e:
            logger.info("User information not requested: %s", e)
            return _completed(None)

        request = self._with_cookies(
            protocol.user_information_request(self._base_url, timeout=self._timeout),
            session,
        )

        def interpret(response: HttpResponse) -> UserInfo:
            _require_ok(response)
            return decode_user_info(response.body)

        return self._dispatch(request, interpret, failure=None)

    def terminate(self) -> Future[bool]:
        """Log out.

        Resolves to ``True`` and clears the session only on a 200 response.
        On failure the session is kept, since the server may still hold it.
        """
        try:
            session = self._active_session()
        except SessionRequiredError as e:
            logger.info("Logout not sent: %s", e)
            return _completed(False)

        request = self._with_cookies(
            protocol.logout_request(self._base_url, timeout=self._timeout),
            session,
        )

        def interpret(response: HttpResponse) -> bool:
            _require_ok(response)
            self._state = NO_SESSION
            return True

        return self._dispatch(request, interpret, failure=False)

    def close(self) -> None:
        """Close the transport if it supports closing."""
        close = getattr(self._transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> SessionClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------

    def _active_session(self) -> ActiveSession:
        state = self._state
        if not isinstance(state, ActiveSession):
            raise SessionRequiredError("no active session")
        return state

    @staticmethod
    def _with_cookies(request: HttpRequest, session: ActiveSession) -> HttpRequest:
        headers = {**request.headers, **cookie_header(session.cookies, request.url)}
        return dataclasses.replace(request, headers=headers)

    def _dispatch(
        self,
        request: HttpRequest,
        interpret: Callable[[HttpResponse], T],
        *,
        failure: Any,
    ) -> Future[Any]:
        future: Future[Any] = Future()

        def on_complete(
            response: HttpResponse | None, error: BaseException | None
        ) -> None:
            if future.done():
                _warn_duplicate(request)
                return
            try:
                result = interpret(_checked_response(response, error))
            except UserInfoError as e:
                logger.info("%s %s failed: %s", request.method, request.url, e)
                result = failure
            except Exception as e:
                _settle(future, request, exception=e)
                return
            _settle(future, request, result=result)

        self._transport.submit(request, on_complete).begin()
        return future


def decode_user_info(body: bytes | None) -> UserInfo:
    """Decode a flat JSON object of strings.

    Raises:
        UserInfoDecodeError: If ``body`` is empty, not JSON, not an object,
            or holds a non-string value.
    """
    if not body:
        raise UserInfoDecodeError("empty body")
    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as e:
        raise UserInfoDecodeError(f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise UserInfoDecodeError(f"expected a JSON object, got {type(data).__name__}")
    if not all(isinstance(v, str) for v in data.values()):
        raise UserInfoDecodeError("user information values must be strings")
    return data


def _checked_response(
    response: HttpResponse | None, error: BaseException | None
) -> HttpResponse:
    if error is not None:
        if isinstance(error, UserInfoError):
            raise error
        raise UserInfoTransportError(str(error)) from error
    if not isinstance(response, HttpResponse):
        raise UserInfoProtocolError(
            f"expected an HTTP response, got {type(response).__name__}"
        )
    return response


def _require_ok(response: HttpResponse) -> None:
    if response.status_code != HTTP_OK:
        raise UnexpectedStatusError(response.status_code)


def _settle(
    future: Future[Any],
    request: HttpRequest,
    *,
    result: Any = None,
    exception: BaseException | None = None,
) -> None:
    try:
        if exception is not None:
            future.set_exception(exception)
        else:
            future.set_result(result)
    except InvalidStateError:
        _warn_duplicate(request)


def _warn_duplicate(request: HttpRequest) -> None:
    logger.warning(
        "Ignoring duplicate completion for %s %s", request.method, request.url
    )


def _completed(result: T) -> Future[T]:
    future: Future[T] = Future()
    future.set_result(result)
    return future
