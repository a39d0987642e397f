# fitquest/storage/__init__.py
from flask import current_app

from .base import Store
from .memory import MemoryStore


def create_store(backend: str) -> Store:
    backend = (backend or "sql").strip().lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "sql":
        from .sql import SqlStore
        return SqlStore()
    raise ValueError(f"unknown STORAGE_BACKEND: {backend!r}")


def get_store() -> Store:
    return current_app.extensions["fitquest_store"]


__all__ = ["Store", "MemoryStore", "create_store", "get_store"]
