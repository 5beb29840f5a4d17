"""Single-use wrapper around a streamed :class:`httpx.Response`.

A :class:`Response` is only ever built for a 2xx status, with the body not
yet read. Exactly one of :meth:`Response.text`, :meth:`Response.json`,
:meth:`Response.parse` or :meth:`Response.iter_bytes` may consume it;
each of them closes the underlying stream when done (also on failure),
and any later read raises :class:`~onecrm.exceptions.ResponseConsumedError`.

Example::

    with client.get("me") as res:
        info = res.parse(UserInfo)
"""

from __future__ import annotations

import json
from typing import Any, Iterator, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from onecrm.context import Context
from onecrm.exceptions import EncodingError, RequestCancelled, ResponseConsumedError, TransportError

ModelT = TypeVar("ModelT", bound=BaseModel)


class Response:
    """A successful API response whose body can be read exactly once.

    Args:
        http_response: The raw response, opened with ``stream=True``.
        context: The cancellation context of the call; it is checked
            between body chunks.
    """

    def __init__(self, http_response: httpx.Response, context: Optional[Context] = None) -> None:
        self._raw = http_response
        self._context = context or Context.background()
        self._consumed = False
        self._closed = False

    # ------------------------------------------------------------------ #
    # Metadata (always available)
    # ------------------------------------------------------------------ #

    @property
    def http_response(self) -> httpx.Response:
        """The underlying :class:`httpx.Response` (body not buffered)."""
        return self._raw

    @property
    def status_code(self) -> int:
        return self._raw.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._raw.headers

    @property
    def consumed(self) -> bool:
        """``True`` once a read method has been called."""
        return self._consumed

    # ------------------------------------------------------------------ #
    # Body access (single use)
    # ------------------------------------------------------------------ #

    def iter_bytes(self) -> Iterator[bytes]:
        """Yield the body in chunks and close the stream at the end.

        The body counts as consumed as soon as this is called. An iterator
        that is dropped before it is exhausted leaves the stream open, so
        call :meth:`close` or use the response as a context manager::

            with client.get("files/download/Note/n1") as res:
                first = next(res.iter_bytes())

        Raises:
            ResponseConsumedError: If the body was already consumed.
            RequestCancelled: If the call context is cancelled mid-body.
            TransportError: If the connection fails while reading.
        """
        self._claim()
        return self._chunks()

    def read(self) -> bytes:
        """Read the whole body as bytes and close the stream."""
        return b"".join(self.iter_bytes())

    def text(self) -> str:
        """Read the whole body decoded as text and close the stream."""
        content = self.read()
        encoding = self._raw.charset_encoding or "utf-8"
        return content.decode(encoding, errors="replace")

    def json(self) -> Any:
        """Read the whole body and decode it as JSON.

        Raises:
            EncodingError: If the body is not valid JSON.
        """
        content = self.read()
        try:
            return json.loads(content)
        except ValueError as exc:
            raise EncodingError(f"Response body is not valid JSON: {exc}") from exc

    def parse(self, model: type[ModelT]) -> ModelT:
        """Read the whole body as JSON and validate it into *model*.

        Raises:
            EncodingError: If the body is not valid JSON or does not match
                *model*. No partial object is returned.
        """
        data = self.json()
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise EncodingError(f"Unexpected response shape for {model.__name__}: {exc}") from exc

    def close(self) -> None:
        """Close the stream without reading it. Safe to call more than once."""
        if not self._closed:
            self._closed = True
            self._raw.close()

    def __enter__(self) -> Response:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}]{' consumed' if self._consumed else ''}>"

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _claim(self) -> None:
        if self._consumed or self._closed:
            raise ResponseConsumedError("Response body has already been consumed")
        self._consumed = True

    def _chunks(self) -> Iterator[bytes]:
        try:
            for chunk in self._raw.iter_bytes():
                self._context.check()
                yield chunk
        except RequestCancelled:
            raise
        except httpx.TransportError as exc:
            if self._context.done:
                raise RequestCancelled(f"Request cancelled while reading body: {exc}") from exc
            raise TransportError(f"Failed to read response body: {exc}") from exc
        finally:
            self.close()
