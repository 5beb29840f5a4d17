"""Abstract base class for authentication strategies.

An :class:`Auth` value knows how to decorate one outgoing
:class:`httpx.Request` with credentials. The
:class:`~onecrm.client.sync_client.Client` calls :meth:`Auth.apply` after
the request is fully built and before it is sent; if ``apply`` raises, the
request is never sent.

To add a strategy, subclass :class:`Auth` and implement :meth:`apply`.
The client needs no changes.

See Also:
    :mod:`onecrm.auth.basic`, :mod:`onecrm.auth.oauth2`,
    :mod:`onecrm.auth.api_key` for the built-in variants.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx


class Auth(ABC):
    """Capability: apply authentication to an outgoing request.

    Implementations must treat themselves as immutable and must not keep
    per-request state, because one value may decorate requests issued
    concurrently from several threads.
    """

    @abstractmethod
    def apply(self, request: httpx.Request) -> None:
        """Add credentials to *request* in place.

        Args:
            request: The fully built request, including its
                ``Content-Type`` header.

        Raises:
            AuthError: If credentials cannot be applied.
        """
        ...
