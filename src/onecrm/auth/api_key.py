"""Static API key sent in a request header.

Not used by any built-in flow; it exists for deployments that front the
API with a key-checking gateway.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx

from onecrm.auth.base import Auth
from onecrm.exceptions import AuthError


@dataclass(frozen=True)
class APIKeyAuth(Auth):
    """Send *key* in the *header* header (``X-API-Key`` by default)."""

    key: str = field(repr=False)
    header: str = "X-API-Key"

    def apply(self, request: httpx.Request) -> None:
        """Set the key header.

        Raises:
            AuthError: If the key or the header name is empty.
        """
        if not self.header:
            raise AuthError("API key auth requires a header name")
        if not self.key:
            raise AuthError(f"No API key configured for header '{self.header}'")
        request.headers[self.header] = self.key
