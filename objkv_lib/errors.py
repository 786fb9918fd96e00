"""Error types raised by the object KV store.

Callers only depend on these classes; backend SDK exceptions are chained
as ``__cause__`` but never raised directly from store operations.
"""
from __future__ import annotations
from typing import List, Optional


class StoreError(Exception):
    """Base class for all store errors."""

    def __init__(self, message: str, *, name: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.name = name

    def __str__(self) -> str:
        if self.name is not None:
            return f"{self.message}: {self.name}"
        return self.message


class StoreConnectionError(StoreError):
    """The backend session could not be initialised."""


class NotFoundError(StoreError, KeyError):
    """No value is stored under the requested key."""

    # KeyError quotes its argument in str(); keep the readable form.
    __str__ = StoreError.__str__


class ReadError(StoreError):
    """Reading an object failed or returned fewer bytes than declared."""


class WriteError(StoreError):
    """Writing an object failed or accepted fewer bytes than given."""


class DeleteError(StoreError):
    """Deleting an object failed.

    ``missing`` is True when the object did not exist.
    """

    def __init__(self, message: str, *, name: Optional[str] = None, missing: bool = False) -> None:
        super().__init__(message, name=name)
        self.missing = missing


class ListError(StoreError):
    """Enumerating objects failed, possibly after some pages were read.

    ``partial`` holds whatever keys were collected before the failure.
    """

    def __init__(self, message: str, *, name: Optional[str] = None, partial: Optional[List[str]] = None) -> None:
        super().__init__(message, name=name)
        self.partial: List[str] = list(partial or [])


class ObjectNotFound(Exception):
    """Backend-level signal that an object name does not exist.

    Backends raise this from ``open_reader`` and ``delete_object``; the
    store translates it into ``NotFoundError`` or ``DeleteError``.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name
