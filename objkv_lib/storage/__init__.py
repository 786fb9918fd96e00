"""Object-backed key-value storage package.

`create_store` is the entry point: it builds the configured backend
session and wraps it in an `ObjectKVStore` scoped to `basepath`.
"""
from __future__ import annotations
import logging
from typing import Any, Optional

from objkv_lib.config.config import StoreConfig
from objkv_lib.errors import StoreConnectionError
from .base import KVStore
from .interfaces import KVStoreProtocol, ListQuery, ObjectBackend, ObjectInfo
from .memory_backend import MemoryObjectBackend
from .file_backend import FileObjectBackend
from .object_store import ObjectKVStore

logger = logging.getLogger(__name__)


def create_backend(config: StoreConfig, *, client: Any = None) -> ObjectBackend:
    """Build the backend named by `config.backend`.

    Any failure to set up the session is raised as `StoreConnectionError`.
    `client` injects a pre-built GCS client.
    """
    try:
        if config.backend == 'memory':
            return MemoryObjectBackend(page_size=config.page_size)
        if config.backend == 'file':
            return FileObjectBackend(data_dir=config.data_dir)
        if config.backend == 'gcs':
            from .gcs_backend import GCSObjectBackend
            return GCSObjectBackend(config.bucket or '', project=config.project, client=client)
    except Exception as exc:
        logger.error("Cannot initialise %s backend: %s", config.backend, exc)
        raise StoreConnectionError(f"cannot initialise {config.backend} backend", name=config.bucket or config.data_dir) from exc
    raise ValueError(f"unknown backend {config.backend!r}")


def create_store(config: Optional[StoreConfig] = None, *, client: Any = None, **overrides: Any) -> ObjectKVStore:
    """Create an `ObjectKVStore` from a config and/or keyword overrides.

        store = create_store(backend='gcs', bucket='my-bucket', basepath='kv/')
    """
    if config is None:
        config = StoreConfig(**overrides)
    elif overrides:
        config = config.model_copy(update=overrides)
        config = StoreConfig(**config.model_dump())
    backend = create_backend(config, client=client)
    store = ObjectKVStore(backend, config.basepath, page_size=config.page_size)
    logger.info("Created %r", store)
    return store


__all__ = [
    "KVStore",
    "KVStoreProtocol",
    "ListQuery",
    "ObjectBackend",
    "ObjectInfo",
    "ObjectKVStore",
    "MemoryObjectBackend",
    "FileObjectBackend",
    "create_backend",
    "create_store",
]
