# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Request dispatch, decoupled from the network stack.

A :class:`Transport` turns an :class:`HttpRequest` into a :class:`Dispatch`
handle. Nothing is sent until :meth:`Dispatch.begin` is called; the
completion callback then receives exactly one of a response or an error.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

import httpx

from .errors import UserInfoTimeoutError, UserInfoTransportError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True)
class HttpRequest:
    """A request ready to hand to a transport."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None
    timeout: float | None = None


@dataclass(frozen=True)
class HttpResponse:
    """A received response.

    ``headers`` is a list of ``(name, value)`` pairs so repeated fields such
    as ``Set-Cookie`` are preserved.
    """

    url: str
    status_code: int
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes | None = None

    def header(self, name: str) -> str | None:
        """Return the first value for ``name`` (case-insensitive)."""
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None


CompletionHandler = Callable[[Optional[HttpResponse], Optional[BaseException]], None]


class Dispatch(Protocol):
    """Handle for a submitted request."""

    def begin(self) -> None:
        """Send the request. Completion is reported to the submit callback."""
        ...


class Transport(Protocol):
    """Capability to send a request and report the outcome asynchronously."""

    def submit(self, request: HttpRequest, on_complete: CompletionHandler) -> Dispatch:
        ...


class HttpxTransport:
    """Transport backed by :class:`httpx.Client` running on a worker pool.

    Requests are built directly rather than through the client, so cookies
    the client may collect are never attached; the caller owns session
    cookies and sends them explicitly.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="userinfo-transport"
        )
        self._closed = False

    def submit(self, request: HttpRequest, on_complete: CompletionHandler) -> Dispatch:
        return _HttpxDispatch(self, request, on_complete)

    def send(self, request: HttpRequest) -> HttpResponse:
        """Perform ``request`` synchronously on the calling thread.

        Raises:
            UserInfoTimeoutError: If the request timed out.
            UserInfoTransportError: On any other httpx failure.
        """
        if self._client.is_closed:
            raise UserInfoTransportError("HTTP client is closed")
        outgoing = httpx.Request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.body,
            extensions={"timeout": httpx.Timeout(request.timeout).as_dict()},
        )
        try:
            resp = self._client.send(outgoing)
        except httpx.TimeoutException as e:
            raise UserInfoTimeoutError(f"Timeout on {request.method} {request.url}") from e
        except httpx.HTTPError as e:
            raise UserInfoTransportError(
                f"{request.method} {request.url} failed: {e}"
            ) from e

        return HttpResponse(
            url=str(resp.url),
            status_code=resp.status_code,
            headers=list(resp.headers.multi_items()),
            body=resp.content,
        )

    def close(self) -> None:
        """Stop the worker pool and close the client if it was created here."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True)
        if self._owns_client:
            self._client.close()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class _HttpxDispatch:
    def __init__(
        self,
        transport: HttpxTransport,
        request: HttpRequest,
        on_complete: CompletionHandler,
    ) -> None:
        self._transport = transport
        self._request = request
        self._on_complete = on_complete
        self._lock = threading.Lock()
        self._started = False

    def begin(self) -> None:
        with self._lock:
            if self._started:
                logger.debug("Ignoring repeated begin() for %s", self._request.url)
                return
            self._started = True

        logger.debug("Dispatching %s %s", self._request.method, self._request.url)
        try:
            self._transport._executor.submit(self._run)
        except RuntimeError:
            # Executor refuses new work once shut down.
            self._on_complete(None, UserInfoTransportError("transport is closed"))

    def _run(self) -> None:
        try:
            response = self._transport.send(self._request)
        except Exception as e:
            # on_complete runs exactly once whatever send() raised.
            self._complete(None, e)
        else:
            self._complete(response, None)

    def _complete(
        self, response: HttpResponse | None, error: BaseException | None
    ) -> None:
        try:
            self._on_complete(response, error)
        except Exception:
            logger.exception(
                "Completion handler failed for %s %s",
                self._request.method,
                self._request.url,
            )
