"""Simple file-backed object backend.

Each object is one file directly under `data_dir`. The file name is the
percent-encoded object name, so names containing `/` never create
subdirectories and two names never share a file. Upper-case ASCII
letters are escaped as well, so the mapping stays collision-free on
case-insensitive filesystems. Writes go to a temporary file that is
renamed over the target on commit.
"""
from __future__ import annotations
import logging
import os
import re
import uuid
from pathlib import Path
from typing import Iterator, List
from urllib.parse import quote, unquote

from objkv_lib.errors import ObjectNotFound
from .interfaces import ListQuery, ObjectInfo

logger = logging.getLogger(__name__)

# Never produced by `_encode`, so temp files cannot be mistaken for objects.
TMP_MARKER = "+"


# Escapes stay as-is; upper-case letters and "." outside them get escaped.
_UNSAFE = re.compile(r"%[0-9A-F]{2}|[A-Z.]")


def _encode(name: str) -> str:
    # "." is escaped so "." and ".." stay ordinary file names.
    return _UNSAFE.sub(_escape, quote(name, safe=""))


def _escape(m: re.Match) -> str:
    s = m.group(0)
    return s if len(s) == 3 else f"%{ord(s):02X}"


def _decode(filename: str) -> str:
    return unquote(filename)


class FileReader:
    def __init__(self, path: Path) -> None:
        self._f = open(path, "rb")
        self.size = os.fstat(self._f.fileno()).st_size

    def read(self, n: int = -1) -> bytes:
        return self._f.read(n)

    def close(self) -> None:
        self._f.close()


class FileWriter:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._tmp = path.with_name(f"{path.name}{TMP_MARKER}{uuid.uuid4().hex}")
        self._f = open(self._tmp, "wb")

    def write(self, data: bytes) -> int:
        return self._f.write(data)

    def close(self) -> None:
        if self._f.closed:
            return
        self._f.flush()
        os.fsync(self._f.fileno())
        self._f.close()
        self._tmp.replace(self._path)

    def abort(self) -> None:
        if not self._f.closed:
            self._f.close()
        self._tmp.unlink(missing_ok=True)


class FileObjectBackend:
    def __init__(self, data_dir: str | Path = "./data/objects") -> None:
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileObjectBackend using %s", self.data_dir)

    def _path_for(self, name: str) -> Path:
        return self.data_dir / _encode(name)

    def open_reader(self, name: str) -> FileReader:
        try:
            return FileReader(self._path_for(name))
        except FileNotFoundError:
            raise ObjectNotFound(name) from None

    def open_writer(self, name: str) -> FileWriter:
        return FileWriter(self._path_for(name))

    def delete_object(self, name: str) -> None:
        try:
            self._path_for(name).unlink()
        except FileNotFoundError:
            raise ObjectNotFound(name) from None

    def list_objects(self, query: ListQuery) -> Iterator[ObjectInfo]:
        names: List[str] = []
        with os.scandir(self.data_dir) as it:
            for entry in it:
                if TMP_MARKER in entry.name or not entry.is_file():
                    continue
                name = _decode(entry.name)
                if query.matches(name):
                    names.append(name)
        names.sort()
        for name in names:
            if query.names_only:
                yield ObjectInfo(name=name)
                continue
            try:
                size = self._path_for(name).stat().st_size
            except FileNotFoundError:
                # deleted since the directory was read
                continue
            yield ObjectInfo(name=name, size=size)

    def close(self) -> None:
        return
