"""Numeric process exit codes used by the ``onecrm`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~onecrm.exceptions.OneCRMError` subclass. Shell
scripts can inspect the exit code to tell failure classes apart without
parsing stderr.

Example::

    $ onecrm me
    $ echo $?
    5   # EXIT_API_ERROR -- the API answered with a non-2xx status
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments or an unusable configuration."""

EXIT_AUTH_FAILURE = 3
"""Credentials could not be applied to the request."""

EXIT_API_ERROR = 5
"""The API returned a status outside the 2xx range."""

EXIT_CONNECTION_ERROR = 6
"""A transport-level error occurred (DNS, TLS, connection refused, bad URL)."""

EXIT_ENCODING_ERROR = 7
"""A request body could not be encoded or a response body could not be decoded."""

EXIT_CANCELLED = 130
"""The request was cancelled or its deadline passed."""
