"""Synchronous HTTP client for the 1CRM API.

:class:`Client` turns a ``(method, path, options)`` triple into exactly one
HTTP round trip:

1. Start from defaults: ``Content-Type: application/json`` and the
   client's cancellation context.
2. Take the caller's :class:`~onecrm.client.options.RequestOptions`
   (already applied in call order).
3. Resolve ``base_url + "/" + path`` with the accumulated query string.
4. Build the request, set ``Content-Type`` and let the bound
   :class:`~onecrm.auth.base.Auth` decorate it.
5. Send it through :class:`httpx.Client`.
6. Map transport failures to :class:`~onecrm.exceptions.TransportError`
   (or :class:`~onecrm.exceptions.RequestCancelled`).
7. Map a status outside [200, 300) to
   :class:`~onecrm.exceptions.APIError` after draining and closing the
   body; otherwise return an unread :class:`~onecrm.client.response.Response`.

Nothing is retried, cached or logged at error level.

See Also:
    :class:`~onecrm.auth.flow.AuthFlow`, which drives this client to
    exchange OAuth2 grants for tokens.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import httpx

from onecrm.client.options import RequestOptions
from onecrm.client.response import Response
from onecrm.context import Context
from onecrm.exceptions import APIError, RequestCancelled, TransportError

if TYPE_CHECKING:
    from onecrm.auth.base import Auth

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/json"


class Client:
    """Synchronous client bound to one base URL and one auth strategy.

    The client's own fields are read-only after construction, and every
    call builds its own request, so a single instance may be shared across
    threads. It owns an :class:`httpx.Client`; close it with
    :meth:`close` or use the client as a context manager.

    Args:
        base_url: API root; trailing slashes are stripped.
        auth: Optional strategy applied to every request.
        context: Default cancellation context; a background context when
            omitted.
        timeout: Per-call transport timeout in seconds (``None`` disables
            it). Always clamped to the remaining context deadline.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Example::

        with Client("https://crm.example.com/api.php", auth=token) as client:
            info = client.get("me").json()
    """

    def __init__(
        self,
        base_url: str,
        auth: Optional[Auth] = None,
        context: Optional[Context] = None,
        *,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth = auth
        self._context = context or Context.background()
        self._timeout = timeout
        self._http = httpx.Client(transport=transport)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def auth(self) -> Optional[Auth]:
        return self._auth

    @property
    def context(self) -> Context:
        return self._context

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        path: str,
        options: Optional[RequestOptions] = None,
    ) -> Response:
        """Send one request and return the unread response.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, ...).
            path: Path relative to the base URL, without a leading slash.
            options: Per-call options. The attached body is released once
                the request has been sent or aborted.

        Returns:
            A :class:`~onecrm.client.response.Response` for a 2xx status.

        Raises:
            APIError: The status is outside [200, 300).
            TransportError: No response was received, or the URL is malformed.
            RequestCancelled: The call context was cancelled or expired.
            AuthError: The auth strategy could not decorate the request.
        """
        opts = options or RequestOptions()
        ctx = opts.context_value or self._context
        try:
            ctx.check()
            request = self._build_request(method, path, opts, ctx)
            if self._auth is not None:
                self._auth.apply(request)
            ctx.check()
            logger.debug("%s %s", request.method, request.url)
            raw = self._send(request, ctx)
        finally:
            opts.release()

        if ctx.done:
            raw.close()
            ctx.check()

        if not 200 <= raw.status_code < 300:
            raise self._api_error(raw, ctx)
        return Response(raw, ctx)

    def get(self, path: str, options: Optional[RequestOptions] = None) -> Response:
        """Send a GET request. See :meth:`request`."""
        return self.request("GET", path, options)

    def post(self, path: str, options: Optional[RequestOptions] = None) -> Response:
        """Send a POST request. See :meth:`request`."""
        return self.request("POST", path, options)

    def put(self, path: str, options: Optional[RequestOptions] = None) -> Response:
        """Send a PUT request. See :meth:`request`."""
        return self.request("PUT", path, options)

    def patch(self, path: str, options: Optional[RequestOptions] = None) -> Response:
        """Send a PATCH request. See :meth:`request`."""
        return self.request("PATCH", path, options)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _build_request(
        self,
        method: str,
        path: str,
        opts: RequestOptions,
        ctx: Context,
    ) -> httpx.Request:
        url = f"{self._base_url}/{path}"
        try:
            request = self._http.build_request(
                method,
                url,
                params=opts.query_params,
                headers=opts.headers,
                content=opts.body_value,
                timeout=ctx.timeout(self._timeout),
            )
        except httpx.InvalidURL as exc:
            raise TransportError(f"Invalid request URL {url!r}: {exc}") from exc

        request.headers["Content-Type"] = opts.content_type_value or DEFAULT_CONTENT_TYPE
        return request

    def _send(self, request: httpx.Request, ctx: Context) -> httpx.Response:
        try:
            return self._http.send(request, stream=True)
        except httpx.TransportError as exc:
            if ctx.done:
                raise RequestCancelled(
                    f"{request.method} {request.url} cancelled: {exc}"
                ) from exc
            raise TransportError(f"{request.method} {request.url} failed: {exc}") from exc

    def _api_error(self, raw: httpx.Response, ctx: Context) -> APIError:
        """Drain and close a non-2xx response and wrap its body."""
        try:
            raw.read()
        except httpx.TransportError as exc:
            if ctx.done:
                raise RequestCancelled(f"Request cancelled while reading error body: {exc}") from exc
            raise TransportError(f"Failed to read error response body: {exc}") from exc
        finally:
            raw.close()
        return APIError(raw.status_code, raw.text)
