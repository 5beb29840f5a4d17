"""Exception hierarchy for onecrm.

All exceptions inherit from :class:`OneCRMError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`onecrm.exit_codes`.
Library code raises these to the immediate caller and never logs or
swallows them; the CLI entry point in :func:`onecrm.app.main` catches
``OneCRMError`` and exits with the matching code.

Subclass hierarchy::

    OneCRMError (exit 1)
    +-- TransportError         (exit 6)
    |   +-- RequestCancelled   (exit 130)
    +-- APIError               (exit 5)
    +-- EncodingError          (exit 7)
    +-- AuthError              (exit 3)
    +-- ResponseConsumedError  (exit 1)
    +-- ConfigError            (exit 2)
"""

from onecrm.exit_codes import (
    EXIT_API_ERROR,
    EXIT_AUTH_FAILURE,
    EXIT_CANCELLED,
    EXIT_CONNECTION_ERROR,
    EXIT_ENCODING_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class OneCRMError(Exception):
    """Base exception for all onecrm errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class TransportError(OneCRMError):
    """Raised when no HTTP response is available: DNS, TLS, refused
    connections, timeouts and malformed URLs."""

    exit_code = EXIT_CONNECTION_ERROR


class RequestCancelled(TransportError):
    """Raised when the cancellation context of a call is cancelled or its
    deadline passes, before or while the request is in flight."""

    exit_code = EXIT_CANCELLED


class APIError(OneCRMError):
    """Raised for a well-formed HTTP exchange whose status is outside [200, 300).

    The message is the raw response body text, so ``str(err)`` returns
    exactly what the server sent.

    Args:
        code: The HTTP status code.
        body: The full response body decoded as text.

    Example::

        try:
            client.get("me")
        except APIError as err:
            if err.code == 401:
                ...  # token expired, run the flow again
    """

    exit_code = EXIT_API_ERROR

    def __init__(self, code: int, body: str):
        super().__init__(body)
        self.code = code
        self.body = body

    def __repr__(self) -> str:
        return f"APIError(code={self.code}, body={self.body!r})"


class EncodingError(OneCRMError):
    """Raised when a request body cannot be JSON-encoded or a response body
    cannot be decoded into the requested shape."""

    exit_code = EXIT_ENCODING_ERROR


class AuthError(OneCRMError):
    """Raised by an :class:`~onecrm.auth.base.Auth` variant that cannot
    decorate a request. The request is never sent."""

    exit_code = EXIT_AUTH_FAILURE


class ResponseConsumedError(OneCRMError):
    """Raised when the body of a :class:`~onecrm.client.response.Response`
    is read a second time."""

    exit_code = EXIT_GENERIC_FAILURE


class ConfigError(OneCRMError):
    """Raised for configuration problems (invalid settings file, unknown keys)."""

    exit_code = EXIT_INVALID_USAGE
