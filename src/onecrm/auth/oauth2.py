"""OAuth2 access token, usable directly as an auth strategy.

:class:`OAuth2AccessToken` is what every :class:`~onecrm.auth.flow.AuthFlow`
grant returns. Because it also implements :class:`~onecrm.auth.base.Auth`,
the token can be handed straight to a :class:`~onecrm.client.Client`::

    token = flow.init_client_credentials()
    client = Client(url, auth=token)

Token validity is the server's concern: an empty or expired token is still
applied, and the API answers with an :class:`~onecrm.exceptions.APIError`.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from onecrm.auth.base import Auth


class OAuth2AccessToken(BaseModel, Auth):
    """An OAuth2 token response ``{access_token, token_type, expires_in, refresh_token}``.

    Missing or ``null`` fields fall back to empty values; unknown fields
    are ignored.

    Example::

        token = OAuth2AccessToken(access_token="tok123")
        token.apply(request)  # Authorization: Bearer tok123
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(default="", repr=False)
    token_type: str = ""
    expires_in: int = 0
    refresh_token: str = Field(default="", repr=False)

    @field_validator("access_token", "token_type", "refresh_token", mode="before")
    @classmethod
    def null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("expires_in", mode="before")
    @classmethod
    def null_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    def apply(self, request: httpx.Request) -> None:
        """Set ``Authorization: Bearer <access_token>``. Never fails."""
        request.headers["Authorization"] = f"Bearer {self.access_token}"
