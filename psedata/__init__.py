"""
Daily stock price storage for the Philippine Stock Exchange.

This module exposes the data subpackage: the record model, the CSV
dialect reader, the relational store and its engines.
"""

from .data.dialects import CONTEMPORARY, HISTORICAL, Dialect  # noqa: F401
from .data.engines import Engine, SQLiteEngine  # noqa: F401
from .data.importer import RecordReader, open_records  # noqa: F401
from .data.models import ConnectionInfo, DailyRecord  # noqa: F401
from .data.store import Store, create_db, drop_database  # noqa: F401

__all__ = [
    "CONTEMPORARY",
    "HISTORICAL",
    "Dialect",
    "Engine",
    "SQLiteEngine",
    "RecordReader",
    "open_records",
    "ConnectionInfo",
    "DailyRecord",
    "Store",
    "create_db",
    "drop_database",
]
