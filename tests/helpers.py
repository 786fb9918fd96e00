from typing import Iterator, List, Tuple

from objkv_lib.storage.interfaces import ListQuery, ObjectInfo
from objkv_lib.storage.memory_backend import MemoryObjectBackend, MemoryReader


def key_values(count: int, prefix: str = '') -> List[Tuple[str, bytes]]:
    """Deterministic key table: key `prefix+i` holds `str(count - i)`."""
    # Interleave from both ends so insertion order differs from key order.
    order = []
    lo, hi = 0, count - 1
    while lo <= hi:
        order.append(lo)
        if lo != hi:
            order.append(hi)
        lo += 1
        hi -= 1
    return [(f"{prefix}{i}", str(count - i).encode()) for i in order]


def expected_value(key: str, count: int) -> bytes:
    return str(count - int(key.rsplit('/', 1)[-1])).encode()


class _ShortReader(MemoryReader):
    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.size = len(data) + 3


class ShortReadBackend(MemoryObjectBackend):
    """Declares more bytes than the reader returns."""

    def open_reader(self, name):
        return _ShortReader(super().open_reader(name).read())


class _ShortWriter:
    def __init__(self, inner) -> None:
        self.inner = inner
        self.aborted = False
        self.closed = False

    def write(self, data: bytes) -> int:
        self.inner.write(data[:-1])
        return max(len(data) - 1, 0)

    def close(self) -> None:
        self.closed = True
        self.inner.close()

    def abort(self) -> None:
        self.aborted = True
        self.inner.abort()


class ShortWriteBackend(MemoryObjectBackend):
    """Accepts one byte fewer than given."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.writers: List[_ShortWriter] = []

    def open_writer(self, name):
        w = _ShortWriter(super().open_writer(name))
        self.writers.append(w)
        return w


class FailingListBackend(MemoryObjectBackend):
    """Listing raises after `fail_after` entries, like a failed page fetch."""

    def __init__(self, fail_after: int, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fail_after = fail_after

    def list_objects(self, query: ListQuery) -> Iterator[ObjectInfo]:
        for n, info in enumerate(super().list_objects(query)):
            if n == self.fail_after:
                raise RuntimeError('page fetch failed')
            yield info


class FailingDeleteBackend(MemoryObjectBackend):
    def delete_object(self, name: str) -> None:
        raise PermissionError(name)


class RecordingBackend(MemoryObjectBackend):
    """Records every listing query."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.queries: List[ListQuery] = []

    def list_objects(self, query: ListQuery) -> Iterator[ObjectInfo]:
        self.queries.append(query)
        return super().list_objects(query)


class ForeignNameBackend(MemoryObjectBackend):
    """Listing leaks one name from outside the queried namespace at the end."""

    def list_objects(self, query: ListQuery) -> Iterator[ObjectInfo]:
        yield from super().list_objects(query)
        yield ObjectInfo(name='elsewhere/x')


class _BrokenReader(MemoryReader):
    def __init__(self, data: bytes, fail_read: bool) -> None:
        super().__init__(data)
        self.fail_read = fail_read

    def read(self, n: int = -1) -> bytes:
        if self.fail_read:
            raise IOError('connection reset')
        return super().read(n)

    def close(self) -> None:
        raise RuntimeError('close failed')


class _BrokenAbortWriter(_ShortWriter):
    def abort(self) -> None:
        raise RuntimeError('abort failed')


class BrokenCleanupBackend(MemoryObjectBackend):
    """Reader `close` and writer `abort` raise."""

    def __init__(self, *args, fail_read: bool = False, short_write: bool = False, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fail_read = fail_read
        self.short_write = short_write

    def open_reader(self, name):
        return _BrokenReader(super().open_reader(name).read(), self.fail_read)

    def open_writer(self, name):
        w = super().open_writer(name)
        return _BrokenAbortWriter(w) if self.short_write else w
