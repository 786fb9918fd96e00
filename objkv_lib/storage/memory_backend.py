"""Simple memory-backed object backend

Objects live in a dict keyed by name. A sorted list of names next to it
answers range listings, the way a backend without native range listing
has to keep its own ordered index.
"""
from __future__ import annotations
import bisect
from threading import RLock
from typing import Dict, Iterator, List, Optional

from objkv_lib.errors import ObjectNotFound
from .interfaces import ListQuery, ObjectInfo

DEFAULT_PAGE_SIZE = 1000


class MemoryReader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0
        self.size = len(data)

    def read(self, n: int = -1) -> bytes:
        end = self.size if n is None or n < 0 else min(self.size, self._pos + n)
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def close(self) -> None:
        return


class MemoryWriter:
    """Buffers writes and publishes the object on `close`."""

    def __init__(self, backend: "MemoryObjectBackend", name: str) -> None:
        self._backend = backend
        self._name = name
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
        self._backend._put(self._name, bytes(self._buf))

    def abort(self) -> None:
        self._done = True
        self._buf.clear()


class MemoryObjectBackend:
    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._lock = RLock()
        self._objects: Dict[str, bytes] = {}
        self._names: List[str] = []
        self.page_size = page_size

    def _put(self, name: str, data: bytes) -> None:
        with self._lock:
            if name not in self._objects:
                bisect.insort(self._names, name)
            self._objects[name] = data

    def open_reader(self, name: str) -> MemoryReader:
        with self._lock:
            try:
                return MemoryReader(self._objects[name])
            except KeyError:
                raise ObjectNotFound(name) from None

    def open_writer(self, name: str) -> MemoryWriter:
        return MemoryWriter(self, name)

    def delete_object(self, name: str) -> None:
        with self._lock:
            if name not in self._objects:
                raise ObjectNotFound(name)
            del self._objects[name]
            idx = bisect.bisect_left(self._names, name)
            del self._names[idx]

    def list_objects(self, query: ListQuery) -> Iterator[ObjectInfo]:
        page_size = query.page_size or self.page_size
        after: Optional[str] = None
        while True:
            page = self._page(query, after, page_size)
            for info in page:
                yield info
            if len(page) < page_size:
                return
            after = page[-1].name

    def _page(self, query: ListQuery, after: Optional[str], limit: int) -> List[ObjectInfo]:
        # Each page is cut under the lock and resumes after the last name
        # seen, so deletes between pages never skip entries.
        with self._lock:
            lower = max(query.prefix, query.start_offset)
            if after is not None:
                idx = bisect.bisect_right(self._names, after)
            else:
                idx = bisect.bisect_left(self._names, lower)
            page: List[ObjectInfo] = []
            while idx < len(self._names) and len(page) < limit:
                name = self._names[idx]
                # Names sharing the prefix are contiguous from `lower` on.
                if not name.startswith(query.prefix):
                    break
                if query.end_offset and name >= query.end_offset:
                    break
                size = 0 if query.names_only else len(self._objects[name])
                page.append(ObjectInfo(name=name, size=size))
                idx += 1
            return page

    def close(self) -> None:
        return

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)
