"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def memory_store():
    from objkv_lib.storage import MemoryObjectBackend, ObjectKVStore
    return ObjectKVStore(MemoryObjectBackend(page_size=7), 'gcskv/')


@pytest.fixture
def file_store(tmp_path):
    from objkv_lib.storage import FileObjectBackend, ObjectKVStore
    return ObjectKVStore(FileObjectBackend(data_dir=tmp_path / 'objects'), 'gcskv/')
