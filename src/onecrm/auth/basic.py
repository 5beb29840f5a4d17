"""HTTP Basic authentication.

The ``username:password`` pair is Base64-encoded and sent as an
``Authorization: Basic <encoded>`` header per :rfc:`7617`.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field

import httpx

from onecrm.auth.base import Auth


@dataclass(frozen=True)
class BasicAuth(Auth):
    """Authenticate via HTTP Basic credentials. Never fails."""

    username: str
    password: str = field(repr=False)

    def apply(self, request: httpx.Request) -> None:
        raw = f"{self.username}:{self.password}"
        encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        request.headers["Authorization"] = f"Basic {encoded}"
