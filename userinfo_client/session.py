# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Session state held by a :class:`~userinfo_client.service.SessionClient`."""

from __future__ import annotations

from dataclasses import dataclass
from http.cookiejar import Cookie
from typing import Union


@dataclass(frozen=True)
class NoSession:
    """No authenticated session is active."""

    def __repr__(self) -> str:
        return "NoSession()"


@dataclass(frozen=True)
class ActiveSession:
    """An authenticated session proven by the cookies set at login.

    Example::

        state = ActiveSession(cookies=(cookie,))
        state.cookie_names  # ("Login",)
    """

    cookies: tuple[Cookie, ...]

    @property
    def cookie_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.cookies)

    def __repr__(self) -> str:
        # Cookie values are credentials; keep them out of logs.
        return f"ActiveSession(cookies={list(self.cookie_names)!r})"


SessionState = Union[NoSession, ActiveSession]

NO_SESSION = NoSession()
