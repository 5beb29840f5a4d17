"""Per-call request options.

:class:`RequestOptions` is a builder with chained mutators that collects
everything a single request needs besides its method and path: body,
query parameters, headers, content type and cancellation context.

Mutators apply in call order. Singular fields (content type, body, a query
key set without ``append``) take the last value; headers and appended
query values accumulate. ``None`` marks a singular field as unset so that
the client's defaults (``application/json``, the client context) apply.

Only one body source is active at a time. Replacing a closable body
(anything with a ``close()`` method, such as an open file) closes the
previous one first, unless it is the very same object.

Example::

    opts = (
        RequestOptions()
        .query_value("filter", "active")
        .query_value("fields", "name", append=True)
        .query_value("fields", "email", append=True)
        .json_body({"name": "ACME"})
    )
    client.post("data/Account", opts)
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from onecrm.context import Context
from onecrm.exceptions import EncodingError

Body = Union[bytes, str, Iterable[bytes], Any]


def _close_body(body: Any) -> None:
    close = getattr(body, "close", None)
    if callable(close):
        close()


class RequestOptions:
    """Builder for the ephemeral per-call request specification.

    A fresh instance should be used for every call. The client releases
    the attached body once the request has been sent or aborted, so a
    body is never reused across calls.
    """

    def __init__(self) -> None:
        self._content_type: Optional[str] = None
        self._body: Optional[Body] = None
        self._query: Optional[dict[str, list[str]]] = None
        self._headers: list[tuple[str, str]] = []
        self._context: Optional[Context] = None

    # ------------------------------------------------------------------ #
    # Mutators
    # ------------------------------------------------------------------ #

    def content_type(self, value: str) -> RequestOptions:
        """Overwrite the ``Content-Type`` header value."""
        self._content_type = value
        return self

    def body(self, content: Body) -> RequestOptions:
        """Attach a raw body: bytes, str, an iterable of bytes or a binary file.

        A previously attached closable body is closed unless it is the same
        object as *content*.
        """
        previous = self._body
        if previous is not None and previous is not content:
            _close_body(previous)
        self._body = content
        return self

    def json_body(self, value: Any) -> RequestOptions:
        """Serialise *value* to JSON and use it as the body.

        Pydantic models are dumped with ``model_dump(mode="json")`` first.

        Raises:
            EncodingError: If *value* is not JSON-serialisable (including
                NaN and infinite floats). The current body is left in place.
        """
        try:
            if isinstance(value, BaseModel):
                value = value.model_dump(mode="json")
            encoded = json.dumps(value, separators=(",", ":"), allow_nan=False).encode("utf-8")
        except (TypeError, ValueError, PydanticSerializationError) as exc:
            raise EncodingError(f"Cannot encode request body as JSON: {exc}") from exc
        return self.body(encoded)

    def query(self, values: Mapping[str, Union[str, Iterable[str]]]) -> RequestOptions:
        """Replace the whole query multi-map.

        Each value may be a single string or an iterable of strings.
        """
        query: dict[str, list[str]] = {}
        for key, value in values.items():
            query[key] = [value] if isinstance(value, str) else list(value)
        self._query = query
        return self

    def query_value(self, key: str, value: str, append: bool = False) -> RequestOptions:
        """Set one query key, or add another value for it when *append* is true."""
        if self._query is None:
            self._query = {}
        if append:
            self._query.setdefault(key, []).append(value)
        else:
            self._query[key] = [value]
        return self

    def header(self, key: str, value: str) -> RequestOptions:
        """Add a request header. Repeated calls accumulate."""
        self._headers.append((key, value))
        return self

    def context(self, ctx: Context) -> RequestOptions:
        """Override the cancellation context for this call only."""
        self._context = ctx
        return self

    # ------------------------------------------------------------------ #
    # Accessors used by the client
    # ------------------------------------------------------------------ #

    @property
    def content_type_value(self) -> Optional[str]:
        return self._content_type

    @property
    def body_value(self) -> Optional[Body]:
        return self._body

    @property
    def query_params(self) -> Optional[list[tuple[str, str]]]:
        """The query as ordered ``(key, value)`` pairs, or ``None`` if never set."""
        if self._query is None:
            return None
        return [(key, v) for key, values in self._query.items() for v in values]

    @property
    def headers(self) -> list[tuple[str, str]]:
        return list(self._headers)

    @property
    def context_value(self) -> Optional[Context]:
        return self._context

    def release(self) -> None:
        """Close the attached body if it is closable and detach it."""
        body = self._body
        self._body = None
        if body is not None:
            _close_body(body)

    def __repr__(self) -> str:
        return (
            f"RequestOptions(content_type={self._content_type!r}, "
            f"query={self._query!r}, headers={len(self._headers)}, "
            f"body={'set' if self._body is not None else 'unset'})"
        )
