"""Google Cloud Storage object backend.

The `google-cloud-storage` SDK is imported lazily so the memory and file
backends work without it being importable.
"""
from __future__ import annotations
from typing import Any, Iterator, Optional
import logging

from objkv_lib.errors import ObjectNotFound
from .interfaces import ListQuery, ObjectInfo

logger = logging.getLogger(__name__)

NAMES_ONLY_FIELDS = "items(name),nextPageToken"
LISTING_FIELDS = "items(name,size),nextPageToken"


class GCSReader:
    """Reads one blob, pinned to the generation whose size was declared."""

    def __init__(self, blob: Any) -> None:
        self._blob = blob
        self._pos = 0
        self.size = int(blob.size or 0)

    def read(self, n: int = -1) -> bytes:
        if n == 0 or self._pos >= self.size:
            return b""
        # `end` is inclusive in the SDK
        end = None if n is None or n < 0 else self._pos + n - 1
        data = self._blob.download_as_bytes(start=self._pos, end=end, if_generation_match=self._blob.generation)
        self._pos += len(data)
        return data

    def close(self) -> None:
        return


class GCSWriter:
    """Buffers the value and uploads it in a single request on `close`.

    A single-request upload either creates the new generation or leaves
    the old one in place, so readers never see a mix.
    """

    def __init__(self, blob: Any) -> None:
        self._blob = blob
        self._buf = bytearray()
        self._done = False

    def write(self, data: bytes) -> int:
        if self._done:
            raise ValueError("write to closed writer")
        self._buf += data
        return len(data)

    def close(self) -> None:
        if self._done:
            return
        self._done = True
        self._blob.upload_from_string(bytes(self._buf), content_type="application/octet-stream")

    def abort(self) -> None:
        self._done = True
        self._buf.clear()


class GCSObjectBackend:
    def __init__(self, bucket: str, *, project: Optional[str] = None, client: Any = None) -> None:
        if not bucket:
            raise ValueError("GCS backend requires a bucket name")
        if client is None:
            from google.cloud import storage
            client = storage.Client(project=project)
        self._client = client
        self.bucket_name = bucket
        self._bucket = client.bucket(bucket)
        logger.info("Using GCS bucket %s", bucket)

    def open_reader(self, name: str) -> GCSReader:
        blob = self._bucket.get_blob(name)
        if blob is None:
            raise ObjectNotFound(name)
        return GCSReader(blob)

    def open_writer(self, name: str) -> GCSWriter:
        return GCSWriter(self._bucket.blob(name))

    def delete_object(self, name: str) -> None:
        from google.api_core.exceptions import NotFound
        try:
            self._bucket.delete_blob(name)
        except NotFound:
            raise ObjectNotFound(name) from None

    def list_objects(self, query: ListQuery) -> Iterator[ObjectInfo]:
        blobs = self._client.list_blobs(
            self.bucket_name,
            prefix=query.prefix or None,
            start_offset=query.start_offset or None,
            end_offset=query.end_offset or None,
            page_size=query.page_size,
            fields=NAMES_ONLY_FIELDS if query.names_only else LISTING_FIELDS,
        )
        # The iterator fetches further pages lazily; errors surface here.
        for blob in blobs:
            yield ObjectInfo(name=blob.name, size=int(getattr(blob, "size", None) or 0))

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()
