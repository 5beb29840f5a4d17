"""File endpoints: download, metadata and upload.

Files are attached to Document, DocumentRevision or Note records and are
addressed by the owning model name and record id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from onecrm.client.options import Body, RequestOptions
from onecrm.client.response import Response
from onecrm.models import FileMetadata, UploadResult

if TYPE_CHECKING:
    from onecrm.client.sync_client import Client

FILENAME_HEADER = "X-OneCRM-Filename"


class Files:
    """File operations bound to a client."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def download(
        self, model: str, id: str, options: Optional[RequestOptions] = None
    ) -> Response:
        """Start a file download.

        The returned response is unread; stream it with
        :meth:`~onecrm.client.response.Response.iter_bytes`::

            with api.files.download("Document", doc_id) as res:
                for chunk in res.iter_bytes():
                    out.write(chunk)
        """
        return self._client.get(f"files/download/{model}/{id}", options)

    def metadata(
        self, model: str, id: str, options: Optional[RequestOptions] = None
    ) -> FileMetadata:
        """Return name, size, MIME type and modification time of a file."""
        return self._client.get(f"files/info/{model}/{id}", options).parse(FileMetadata)

    def upload(
        self, name: str, content: Body, options: Optional[RequestOptions] = None
    ) -> str:
        """Upload *content* as a temporary file and return its id.

        The id is then referenced when creating a Document or Note. If
        *content* is closable (an open file), it is closed once sent.

        Args:
            name: File name sent in the ``X-OneCRM-Filename`` header.
            content: Bytes, an iterable of bytes or a binary file object.
            options: Extra options; the header and body are added to them.
        """
        opts = (options or RequestOptions()).header(FILENAME_HEADER, name).body(content)
        result = self._client.post("files/upload", opts).parse(UploadResult)
        return result.id
