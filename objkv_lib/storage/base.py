"""Key-value store interface definitions.

Defines the KVStore abstract class used by callers to persist and
retrieve raw byte values under string keys. Implementations translate
keys to whatever naming scheme the underlying backend uses.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List


class KVStore(ABC):
    """Abstract key-value store.

    Only `get` is required to be safe for concurrent use. Mutating and
    enumerating operations must be serialised by the caller.
    """

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the value stored under `key`.

        Should raise `NotFoundError` if the key does not exist.
        """

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Create or overwrite the value under `key`."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete the pair. Raise `DeleteError` if not found."""

    @abstractmethod
    def size(self) -> int:
        """Return the number of pairs in the store."""

    @abstractmethod
    def scan(self, prefix: str, start_key: str, end_key: str) -> List[str]:
        """Return keys in `[prefix+start_key, prefix+end_key)` in ascending order."""

    @abstractmethod
    def clear(self) -> int:
        """Remove every pair and return how many were removed."""
