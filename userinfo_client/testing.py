# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Deterministic doubles for the transport and the session service.

Both complete synchronously, so every future they feed is already done
when the call that produced it returns.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlsplit

from .service import UserInfo
from .transport import CompletionHandler, HttpRequest, HttpResponse

_NO_RAW = object()


@dataclass
class Reply:
    """Scripted outcome for a request.

    ``raw`` replaces the response with an arbitrary object to simulate a
    transport that returns something that is not an HTTP response.
    """

    status_code: int = 200
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes | None = None
    error: BaseException | None = None
    raw: Any = _NO_RAW

    def outcome(self, request: HttpRequest) -> tuple[Any, BaseException | None]:
        if self.error is not None:
            return None, self.error
        if self.raw is not _NO_RAW:
            return self.raw, None
        return (
            HttpResponse(
                url=request.url,
                status_code=self.status_code,
                headers=list(self.headers),
                body=self.body,
            ),
            None,
        )


class FakeDispatch:
    def __init__(
        self,
        transport: FakeTransport,
        request: HttpRequest,
        on_complete: CompletionHandler,
    ) -> None:
        self._transport = transport
        self._request = request
        self._on_complete = on_complete
        self.began = False

    def begin(self) -> None:
        self.began = True
        self._transport.dispatched.append(self._request)
        response, error = self._transport.reply_for(self._request).outcome(self._request)
        for _ in range(self._transport.completions):
            self._on_complete(response, error)


class FakeTransport:
    """Transport double recording what was submitted and what was sent.

    Replies are chosen by URL path (see :meth:`route`), falling back to
    :attr:`default`.
    """

    def __init__(self, default: Reply | None = None) -> None:
        self.default = default if default is not None else Reply()
        self.routes: dict[str, Reply] = {}
        self.submitted: list[HttpRequest] = []
        self.dispatched: list[HttpRequest] = []
        # More than one simulates a misbehaving network stack.
        self.completions = 1

    def route(self, path: str, reply: Reply) -> None:
        self.routes[path] = reply

    def reply_for(self, request: HttpRequest) -> Reply:
        return self.routes.get(urlsplit(request.url).path, self.default)

    def submit(self, request: HttpRequest, on_complete: CompletionHandler) -> FakeDispatch:
        self.submitted.append(request)
        return FakeDispatch(self, request, on_complete)

    @property
    def was_dispatched(self) -> bool:
        return bool(self.dispatched)

    @property
    def last_request(self) -> HttpRequest | None:
        return self.dispatched[-1] if self.dispatched else None

    @property
    def dispatched_paths(self) -> list[str]:
        return [urlsplit(r.url).path for r in self.dispatched]


class FakeSessionService:
    """Session service double with scripted results and call counters."""

    def __init__(
        self,
        *,
        login_result: bool = False,
        user_info: UserInfo | None = None,
        logout_result: bool = False,
    ) -> None:
        self.login_result = login_result
        self.user_info = user_info
        self.logout_result = logout_result
        self.login_calls: list[tuple[str, str]] = []
        self.fetch_calls = 0
        self.logout_calls = 0

    def authenticate(self, identity: str, secret: str) -> Future[bool]:
        self.login_calls.append((identity, secret))
        return _done(self.login_result)

    def fetch_resource(self) -> Future[Optional[UserInfo]]:
        self.fetch_calls += 1
        return _done(self.user_info)

    def terminate(self) -> Future[bool]:
        self.logout_calls += 1
        return _done(self.logout_result)

    @property
    def total_calls(self) -> int:
        return len(self.login_calls) + self.fetch_calls + self.logout_calls


def _done(value: Any) -> Future[Any]:
    future: Future[Any] = Future()
    future.set_result(value)
    return future
