"""Persistence: DuckDB schema and repositories."""

from omnioracle.storage.db import SCHEMA_VERSION, get_connection, get_schema_version, init_schema
from omnioracle.storage.repository import DuckDBRepository, MemoryRepository, Repository

__all__ = [
    "SCHEMA_VERSION",
    "DuckDBRepository",
    "MemoryRepository",
    "Repository",
    "get_connection",
    "get_schema_version",
    "init_schema",
]
