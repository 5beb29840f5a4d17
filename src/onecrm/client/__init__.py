"""HTTP client module for onecrm.

Provides :class:`Client`, a synchronous client wrapping :mod:`httpx` with
pluggable auth injection and typed error mapping, together with the
per-call :class:`RequestOptions` builder and the single-use
:class:`Response` wrapper.

Example::

    from onecrm.client import Client, RequestOptions

    with Client(base_url, auth=token) as client:
        res = client.get("data/Account", RequestOptions().query_value("limit", "10"))
        accounts = res.json()
"""

from onecrm.client.options import RequestOptions
from onecrm.client.response import Response
from onecrm.client.sync_client import Client

__all__ = ["Client", "RequestOptions", "Response"]
