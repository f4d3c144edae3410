# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Cached user information lookup on top of a session service."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from functools import partial
from typing import Optional

from .service import SessionClient, SessionService, UserInfo

logger = logging.getLogger(__name__)


class UserInfoResolver:
    """Resolve user information by identity, remembering every success.

    A lookup logs in, fetches, then always logs out. Records are cached
    forever; a failed lookup is not cached, so it is retried next time.
    """

    def __init__(self, service: SessionService | None = None) -> None:
        self._service = service if service is not None else SessionClient()
        self._cache: dict[str, UserInfo] = {}
        self._lock = threading.Lock()

    @property
    def service(self) -> SessionService:
        return self._service

    @property
    def cached(self) -> dict[str, UserInfo]:
        """Snapshot of the cached records keyed by identity."""
        with self._lock:
            return dict(self._cache)

    def resolve_user(self, identity: str, secret: str) -> Future[Optional[UserInfo]]:
        """Return the information for ``identity``.

        A cached record is returned without any network activity, whatever
        ``secret`` is. Otherwise resolves to the fetched record, or ``None``
        if login or fetch failed.
        """
        future: Future[Optional[UserInfo]] = Future()
        with self._lock:
            info = self._cache.get(identity)
        if info is not None:
            logger.debug("User information for %r served from cache", identity)
            future.set_result(info)
            return future

        self._service.authenticate(identity, secret).add_done_callback(
            partial(self._on_authenticated, identity, future)
        )
        return future

    def _on_authenticated(
        self,
        identity: str,
        future: Future[Optional[UserInfo]],
        login: Future[bool],
    ) -> None:
        error = login.exception()
        if error is not None:
            future.set_exception(error)
            return
        if not login.result():
            logger.warning("Unable to login as %r", identity)
            future.set_result(None)
            return

        try:
            fetch = self._service.fetch_resource()
        except Exception as e:
            # Still logged in, so the fetch failure goes through the logout path.
            fetch = Future()
            fetch.set_exception(e)
        fetch.add_done_callback(partial(self._on_fetched, identity, future))

    def _on_fetched(
        self,
        identity: str,
        future: Future[Optional[UserInfo]],
        fetch: Future[Optional[UserInfo]],
    ) -> None:
        # Logout runs whatever the fetch produced; its outcome is only logged.
        try:
            self._service.terminate().add_done_callback(
                partial(self._on_terminated, identity)
            )
        except Exception as e:
            logger.warning("Logout for %r raised: %s", identity, e)

        error = fetch.exception()
        if error is not None:
            future.set_exception(error)
            return
        info = fetch.result()
        if info is None:
            logger.info("No user information returned for %r", identity)
        else:
            with self._lock:
                self._cache[identity] = info
        future.set_result(info)

    @staticmethod
    def _on_terminated(identity: str, logout: Future[bool]) -> None:
        error = logout.exception()
        if error is not None:
            logger.warning("Logout for %r raised: %s", identity, error)
        elif not logout.result():
            logger.warning("Unable to logout %r", identity)
