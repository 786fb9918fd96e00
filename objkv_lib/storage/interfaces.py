from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol, Iterator, List, Optional, runtime_checkable


@dataclass(frozen=True)
class ObjectInfo:
    """A single listing entry."""

    name: str
    size: int = 0


@dataclass(frozen=True)
class ListQuery:
    """Listing request understood by every `ObjectBackend`.

    Selects names `n` starting with `prefix` such that
    `start_offset <= n < end_offset` in byte-lexicographic order. Empty
    bounds are open.
    """

    prefix: str = ""
    start_offset: str = ""
    end_offset: str = ""
    names_only: bool = False
    page_size: Optional[int] = None

    def matches(self, name: str) -> bool:
        if not name.startswith(self.prefix):
            return False
        if self.start_offset and name < self.start_offset:
            return False
        if self.end_offset and name >= self.end_offset:
            return False
        return True


@runtime_checkable
class ObjectReader(Protocol):
    """Sequential reader over one object with a declared size."""

    size: int

    def read(self, n: int = -1) -> bytes: ...

    def close(self) -> None: ...


@runtime_checkable
class ObjectWriter(Protocol):
    """Sequential writer. `close` commits the object atomically, `abort` discards it."""

    def write(self, data: bytes) -> int: ...

    def close(self) -> None: ...

    def abort(self) -> None: ...


@runtime_checkable
class ObjectBackend(Protocol):
    """Capability interface over an object store.

    `open_reader` and `delete_object` raise `objkv_lib.errors.ObjectNotFound`
    for absent names. `list_objects` yields entries in ascending name order
    and handles pagination itself; errors may surface mid-iteration.
    """

    def open_reader(self, name: str) -> ObjectReader: ...

    def open_writer(self, name: str) -> ObjectWriter: ...

    def delete_object(self, name: str) -> None: ...

    def list_objects(self, query: ListQuery) -> Iterator[ObjectInfo]: ...

    def close(self) -> None: ...


@runtime_checkable
class KVStoreProtocol(Protocol):
    """Key-value store protocol mirroring `objkv_lib.storage.base.KVStore`."""

    def get(self, key: str) -> bytes: ...

    def set(self, key: str, value: bytes) -> None: ...

    def delete(self, key: str) -> None: ...

    def size(self) -> int: ...

    def scan(self, prefix: str, start_key: str, end_key: str) -> List[str]: ...

    def clear(self) -> int: ...
