"""OAuth2 flows against the 1CRM authorization endpoints.

:class:`AuthFlow` obtains an :class:`~onecrm.auth.oauth2.OAuth2AccessToken`
with one of three grant types:

- **Authorization code** (interactive, two steps):
  :meth:`AuthFlow.init_auth_code` builds the URL the end user is redirected
  to; once the authorization server redirects back with ``code``,
  :meth:`AuthFlow.finalize_auth_code` exchanges it for a token.
- **Resource owner password** (:meth:`AuthFlow.init_resource_owner`):
  username and password of a user or contact.
- **Client credentials** (:meth:`AuthFlow.init_client_credentials`).

Every token request is a JSON ``POST`` to
``{url}/auth/{owner_type}/access_token`` sent through an unauthenticated
:class:`~onecrm.client.Client`. Tokens are never refreshed automatically;
a caller that gets an expired-token :class:`~onecrm.exceptions.APIError`
runs the flow again.

See Also:
    :func:`onecrm.config.load_flow_config` for how the configuration is
    resolved from the environment and the settings file.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel

from onecrm.auth.oauth2 import OAuth2AccessToken
from onecrm.client.options import RequestOptions
from onecrm.client.sync_client import Client
from onecrm.context import Context
from onecrm.exceptions import TransportError
from onecrm.models import (
    AuthCodeRequest,
    ClientCredentialsRequest,
    FlowConfig,
    ResourceOwnerRequest,
)

logger = logging.getLogger(__name__)


class AuthFlow:
    """OAuth2 engine bound to one API base URL and one resolved configuration.

    Immutable after construction; one instance may run several flows.

    Args:
        url: API base URL (trailing slashes are stripped).
        config: Fully resolved flow parameters. Defaults to an empty
            :class:`~onecrm.models.FlowConfig` (``scope="profile"``,
            ``owner_type="user"``).
        timeout: Per-call timeout for token requests, in seconds.
        transport: Optional httpx transport for the internal client.

    Example::

        flow = AuthFlow(url, FlowConfig(client_id="abc", client_secret="xyz"))
        token = flow.init_client_credentials()
        client = Client(url, auth=token)
    """

    def __init__(
        self,
        url: str,
        config: Optional[FlowConfig] = None,
        *,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._config = config or FlowConfig()
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_env(
        cls,
        url: str,
        environ: Optional[Mapping[str, str]] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        **overrides: Any,
    ) -> AuthFlow:
        """Resolve the configuration from ``ONECRM_*`` variables, then build a flow.

        Args:
            url: API base URL.
            environ: Environment mapping; ``os.environ`` when omitted.
            transport: Optional httpx transport for the internal client.
            **overrides: Explicit values that win over the environment,
                e.g. ``scope="profile email"``.
        """
        from onecrm.config import load_flow_config

        return cls(url, load_flow_config(environ, **overrides), transport=transport)

    @property
    def url(self) -> str:
        return self._url

    @property
    def config(self) -> FlowConfig:
        return self._config

    @property
    def token_path(self) -> str:
        """Token endpoint path relative to :attr:`url`."""
        return f"auth/{self._config.owner_type}/access_token"

    # ------------------------------------------------------------------ #
    # Authorization code
    # ------------------------------------------------------------------ #

    def init_auth_code(self) -> str:
        """Build the authorization URL for the authorization code flow.

        Pure URL construction; no request is sent. The query carries
        ``client_id``, ``redirect_uri``, ``response_type=code`` and
        ``state`` exactly as configured.

        Returns:
            The URL to redirect the end user to.

        Raises:
            TransportError: If the configured base URL is malformed.
        """
        endpoint = f"{self._url}/auth/{self._config.owner_type}/authorize"
        try:
            httpx.URL(endpoint)
        except httpx.InvalidURL as exc:
            raise TransportError(f"Invalid authorization URL {endpoint!r}: {exc}") from exc

        query = {
            "client_id": self._config.client_id,
            "redirect_uri": self._config.redirect_uri,
            "response_type": "code",
            "state": self._config.state,
        }
        return f"{endpoint}?{urlencode(sorted(query.items()))}"

    def finalize_auth_code(
        self, code: str, context: Optional[Context] = None
    ) -> OAuth2AccessToken:
        """Exchange the authorization *code* for a token.

        Args:
            code: The ``code`` query parameter the authorization server
                appended to the redirect URI.
            context: Optional cancellation context for the token request.

        Raises:
            APIError: The token endpoint rejected the request.
            EncodingError: The token response is not valid JSON.
            TransportError: The token endpoint could not be reached.
        """
        body = AuthCodeRequest(
            client_id=self._config.client_id,
            client_secret=self._config.client_secret,
            scope=self._config.scope,
            code=code,
            redirect_uri=self._config.redirect_uri,
        )
        return self._request_token(body, context)

    # ------------------------------------------------------------------ #
    # Single-step grants
    # ------------------------------------------------------------------ #

    def init_resource_owner(self, context: Optional[Context] = None) -> OAuth2AccessToken:
        """Obtain a token for the configured resource owner (user or contact)
        with the password grant."""
        body = ResourceOwnerRequest(
            client_id=self._config.client_id,
            client_secret=self._config.client_secret,
            scope=self._config.scope,
            username=self._config.username,
            password=self._config.password,
        )
        return self._request_token(body, context)

    def init_client_credentials(self, context: Optional[Context] = None) -> OAuth2AccessToken:
        """Obtain a token with the client credentials grant."""
        body = ClientCredentialsRequest(
            client_id=self._config.client_id,
            client_secret=self._config.client_secret,
            scope=self._config.scope,
        )
        return self._request_token(body, context)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _request_token(
        self, body: BaseModel, context: Optional[Context]
    ) -> OAuth2AccessToken:
        grant_type = getattr(body, "grant_type", "")
        logger.debug("Requesting %s token from %s/%s", grant_type, self._url, self.token_path)
        with Client(
            self._url,
            None,
            context,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            response = client.post(self.token_path, RequestOptions().json_body(body))
            return response.parse(OAuth2AccessToken)

    def __repr__(self) -> str:
        return (
            f"AuthFlow(url={self._url!r}, client_id={self._config.client_id!r}, "
            f"owner_type={self._config.owner_type!r}, scope={self._config.scope!r})"
        )
