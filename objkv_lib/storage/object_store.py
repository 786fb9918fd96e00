"""Flat key-value store on top of an object-storage backend.

Each key is stored as the name of one object (`basepath + key`) and each
value as that object's content. Range queries and whole-namespace
operations are answered from the backend's name listing, which is the
only way to enumerate keys.
"""
from __future__ import annotations
import logging
from typing import Iterator, List, Optional

from objkv_lib.errors import (
    DeleteError,
    ListError,
    NotFoundError,
    ObjectNotFound,
    ReadError,
    WriteError,
)
from .base import KVStore
from .interfaces import ListQuery, ObjectBackend

logger = logging.getLogger(__name__)


class ObjectKVStore(KVStore):
    """Key-value store scoped to the objects under `basepath`.

    `get` is safe to call from several threads at once. Writes, deletes and
    listings are not isolated from each other; callers serialise them.
    """

    def __init__(self, backend: ObjectBackend, basepath: str = "", *, page_size: Optional[int] = None) -> None:
        self._backend = backend
        self._basepath = basepath
        self._page_size = page_size

    @property
    def basepath(self) -> str:
        return self._basepath

    @property
    def backend(self) -> ObjectBackend:
        return self._backend

    def object_name(self, key: str) -> str:
        return self._basepath + key

    def key_for(self, name: str) -> str:
        """Strip the leading basepath from an object name."""
        if not name.startswith(self._basepath):
            raise ValueError(f"object {name!r} is outside basepath {self._basepath!r}")
        return name[len(self._basepath):]

    def get(self, key: str) -> bytes:
        name = self.object_name(key)
        logger.debug("get %s", name)
        try:
            reader = self._backend.open_reader(name)
        except ObjectNotFound as exc:
            raise NotFoundError("key not found", name=key) from exc
        except Exception as exc:
            raise ReadError("cannot open object", name=key) from exc

        try:
            data = reader.read()
        except Exception as exc:
            raise ReadError("read failed", name=key) from exc
        finally:
            self._cleanup(reader.close, "close", name)

        if len(data) != reader.size:
            logger.warning("Incomplete read of %s: got %d of %d bytes", name, len(data), reader.size)
            raise ReadError("incomplete read", name=key)
        return data

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"value must be bytes, not {type(value).__name__}")
        data = bytes(value)
        name = self.object_name(key)
        logger.debug("set %s (%d bytes)", name, len(data))
        try:
            writer = self._backend.open_writer(name)
        except Exception as exc:
            raise WriteError("cannot open object for writing", name=key) from exc

        try:
            written = writer.write(data)
        except Exception as exc:
            self._cleanup(writer.abort, "abort", name)
            raise WriteError("write failed", name=key) from exc

        if written != len(data):
            # Whatever the backend kept is undefined; do not commit it.
            self._cleanup(writer.abort, "abort", name)
            logger.warning("Incomplete write of %s: %s of %d bytes accepted", name, written, len(data))
            raise WriteError("incomplete write", name=key)

        try:
            writer.close()
        except Exception as exc:
            raise WriteError("commit failed", name=key) from exc

    def delete(self, key: str) -> None:
        name = self.object_name(key)
        logger.debug("delete %s", name)
        try:
            self._backend.delete_object(name)
        except ObjectNotFound as exc:
            raise DeleteError("key not found", name=key, missing=True) from exc
        except Exception as exc:
            raise DeleteError("delete failed", name=key) from exc

    def exists(self, key: str) -> bool:
        name = self.object_name(key)
        query = ListQuery(prefix=name, names_only=True, page_size=1)
        for found in self._names(query):
            return found == name
        return False

    def keys(self, prefix: str = "") -> Iterator[str]:
        """Yield every key starting with `prefix`, in ascending order."""
        query = ListQuery(prefix=self._basepath + prefix, names_only=True, page_size=self._page_size)
        yield from self._keys(query)

    def size(self) -> int:
        count = 0
        for _ in self.keys():
            count += 1
        logger.debug("size of %r is %d", self._basepath, count)
        return count

    def scan(self, prefix: str, start_key: str, end_key: str) -> List[str]:
        """Return keys `k` with `prefix+start_key <= k < prefix+end_key`.

        Returned keys keep `prefix`. An empty or inverted range returns
        `[]` without listing. On a listing failure the keys read so far are
        attached to the raised `ListError` as `partial`.
        """
        scope = self._basepath + prefix
        start = scope + start_key
        end = scope + end_key
        if start >= end:
            return []

        query = ListQuery(
            prefix=scope,
            start_offset=start,
            end_offset=end,
            names_only=True,
            page_size=self._page_size,
        )
        keys: List[str] = []
        try:
            for key in self._keys(query):
                keys.append(key)
        except ListError as exc:
            exc.partial = keys
            raise
        logger.debug("scan %r [%r, %r) returned %d keys", prefix, start_key, end_key, len(keys))
        return keys

    def clear(self) -> int:
        """Delete every object under basepath and return how many were removed.

        Objects that disappear between listing and deletion are skipped, so
        an interrupted clear can simply be run again.
        """
        removed = 0
        query = ListQuery(prefix=self._basepath, names_only=True, page_size=self._page_size)
        for key in self._keys(query):
            name = self.object_name(key)
            try:
                self._backend.delete_object(name)
            except ObjectNotFound:
                logger.debug("clear: %s already gone", name)
                continue
            except Exception as exc:
                raise DeleteError("delete failed", name=key) from exc
            removed += 1
        logger.info("Cleared %d objects under %r", removed, self._basepath)
        return removed

    def close(self) -> None:
        self._backend.close()

    def __enter__(self) -> "ObjectKVStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _names(self, query: ListQuery) -> Iterator[str]:
        try:
            for info in self._backend.list_objects(query):
                yield info.name
        except Exception as exc:
            raise ListError("listing failed", name=query.prefix) from exc

    def _keys(self, query: ListQuery) -> Iterator[str]:
        for name in self._names(query):
            try:
                key = self.key_for(name)
            except ValueError as exc:
                raise ListError("listing returned a name outside basepath", name=name) from exc
            yield key

    @staticmethod
    def _cleanup(action, what: str, name: str) -> None:
        # Runs while another error may be in flight; never replace it.
        try:
            action()
        except Exception:
            logger.warning("%s of %s failed", what, name, exc_info=True)

    def __repr__(self) -> str:
        return f"ObjectKVStore(backend={type(self._backend).__name__}, basepath={self._basepath!r})"
