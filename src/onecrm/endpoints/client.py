"""Client with typed endpoint methods."""

from __future__ import annotations

from typing import Optional

from onecrm.client.options import RequestOptions
from onecrm.client.sync_client import Client
from onecrm.endpoints.files import Files
from onecrm.models import UserInfo


class EndpointClient(Client):
    """A :class:`~onecrm.client.Client` with typed endpoint helpers.

    Example::

        with EndpointClient(url, auth=token) as api:
            print(api.me().email)
            meta = api.files.metadata("Document", doc_id)
    """

    @property
    def files(self) -> Files:
        """File uploads, downloads and metadata."""
        return Files(self)

    def me(self, options: Optional[RequestOptions] = None) -> UserInfo:
        """Return the user the current credentials belong to (``GET me``)."""
        return self.get("me", options).parse(UserInfo)
