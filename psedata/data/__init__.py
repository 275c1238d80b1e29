"""
Data subpackage containing the record model, dialect-aware CSV reader,
relational engines and the day_trades store.
"""

from .dialects import CONTEMPORARY, HISTORICAL, Dialect, get_dialect  # noqa: F401
from .engines import Engine, PreparedStatement, SQLiteEngine, engine_from_settings  # noqa: F401
from .errors import (  # noqa: F401
    ClosedError,
    DatabaseConnectionError,
    NotFoundError,
    ParseError,
    ProvisionError,
    PseDataError,
    QueryError,
    StoreStateError,
    WriteError,
)
from .importer import RecordReader, open_records  # noqa: F401
from .models import ConnectionInfo, DailyRecord  # noqa: F401
from .store import Store, create_db, drop_database  # noqa: F401

__all__ = [
    "CONTEMPORARY",
    "HISTORICAL",
    "Dialect",
    "get_dialect",
    "Engine",
    "PreparedStatement",
    "SQLiteEngine",
    "engine_from_settings",
    "ClosedError",
    "DatabaseConnectionError",
    "NotFoundError",
    "ParseError",
    "ProvisionError",
    "PseDataError",
    "QueryError",
    "StoreStateError",
    "WriteError",
    "RecordReader",
    "open_records",
    "ConnectionInfo",
    "DailyRecord",
    "Store",
    "create_db",
    "drop_database",
]
