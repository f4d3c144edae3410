# Copyright 2026 Userinfo Client Contributors
# SPDX-License-Identifier: Apache-2.0
"""Service location and request defaults."""

from __future__ import annotations

import os

DEFAULT_BASE_URL = "https://www.example.com"
DEFAULT_TIMEOUT = 10.0
BASE_URL_ENV = "USERINFO_BASE_URL"


def get_base_url() -> str:
    """Return the service base URL.

    ``USERINFO_BASE_URL`` wins when set and non-empty; otherwise
    :data:`DEFAULT_BASE_URL`. A trailing slash is removed so endpoint
    paths can be appended directly.
    """
    url = os.getenv(BASE_URL_ENV) or DEFAULT_BASE_URL
    return url.rstrip("/")
