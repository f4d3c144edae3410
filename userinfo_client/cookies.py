# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Cookie extraction and ``Cookie`` header serialization.

Both directions go through :class:`httpx.Cookies`, so the standard
``http.cookiejar`` domain, path and expiry rules apply.
"""

from __future__ import annotations

from http.cookiejar import Cookie
from typing import Iterable

import httpx

from .transport import HttpResponse


def extract_cookies(response: HttpResponse) -> list[Cookie]:
    """Return the cookies set by ``response`` for its URL.

    Cookies the jar policy rejects for that URL are dropped.
    """
    if not response.headers:
        return []
    jar = httpx.Cookies()
    jar.extract_cookies(
        httpx.Response(
            response.status_code,
            headers=response.headers,
            request=httpx.Request("GET", response.url),
        )
    )
    return list(jar.jar)


def cookie_header(cookies: Iterable[Cookie], url: str) -> dict[str, str]:
    """Build request headers carrying the cookies that apply to ``url``.

    Returns an empty dict when no cookie matches.
    """
    jar = httpx.Cookies()
    for cookie in cookies:
        jar.jar.set_cookie(cookie)
    request = httpx.Request("GET", url)
    jar.set_cookie_header(request)
    value = request.headers.get("Cookie")
    return {"Cookie": value} if value else {}
