from __future__ import annotations

import abc
import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Any, Sequence

from .models import ConnectionInfo

if TYPE_CHECKING:
    from psedata.core.config import Settings

logger = logging.getLogger(__name__)


class PreparedStatement(abc.ABC):
    """
    A statement compiled once and executed many times on one connection.

    Instances are context managers so the owner can release them together
    with the connection that created them.
    """

    def __init__(self, name: str, sql: str):
        self.name = name
        self.sql = sql

    @abc.abstractmethod
    def execute(self, params: Sequence[Any]) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "PreparedStatement":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class CursorStatement(PreparedStatement):
    """
    Prepared statement held as a dedicated cursor.

    DB-API drivers cache the compiled form of the last statement a cursor
    ran, so re-executing the same SQL on the same cursor skips re-parsing.
    """

    def __init__(self, conn: Any, name: str, sql: str):
        super().__init__(name, sql)
        self._cursor = conn.cursor()

    def execute(self, params: Sequence[Any]) -> None:
        self._cursor.execute(self.sql, params)

    def close(self) -> None:
        self._cursor.close()


class Engine(abc.ABC):
    """
    Narrow interface to a relational backend.

    The store never talks to a driver directly: it opens connections, runs
    DDL and prepares statements through an Engine, and wraps any exception
    listed in ``driver_errors`` into its own error types.
    """

    name: str = "engine"
    driver_errors: tuple[type[BaseException], ...] = ()

    @abc.abstractmethod
    def connect_admin(self, info: ConnectionInfo) -> Any:
        """
        Open a control connection used to create or drop the target database.
        """

        raise NotImplementedError

    @abc.abstractmethod
    def connect(self, info: ConnectionInfo) -> Any:
        """
        Open an autocommit connection to the target database.
        """

        raise NotImplementedError

    @abc.abstractmethod
    def create_database(self, conn: Any, info: ConnectionInfo) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def set_time_zone(self, conn: Any, info: ConnectionInfo, zone: str) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def drop_database(self, conn: Any, info: ConnectionInfo) -> None:
        raise NotImplementedError

    def markers(self, count: int) -> str:
        return ", ".join(["?"] * count)

    def prepare(self, conn: Any, name: str, sql: str) -> PreparedStatement:
        return CursorStatement(conn, name, sql)

    def bind_date(self, value: date) -> Any:
        return value


class FileEngine(Engine):
    """
    Engine whose databases are single files under a root directory.
    """

    suffix = ".db"

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def path_for(self, info: ConnectionInfo) -> Path:
        return self.root / f"{info.database}{self.suffix}"

    def _check_root(self) -> None:
        if not self.root.is_dir():
            raise FileNotFoundError(f"database root {self.root} is not a directory")

    def _check_absent(self, info: ConnectionInfo) -> Path:
        path = self.path_for(info)
        if path.exists():
            raise FileExistsError(f"database {info.database} already exists at {path}")
        return path

    def set_time_zone(self, conn: Any, info: ConnectionInfo, zone: str) -> None:
        logger.warning(
            "%s databases store dates without a time zone; ignoring time zone %s for %s",
            self.name,
            zone,
            info.database,
        )

    def drop_database(self, conn: Any, info: ConnectionInfo) -> None:
        self.path_for(info).unlink(missing_ok=True)


class SQLiteEngine(FileEngine):
    """
    SQLite-backed engine; each database is ``<root>/<database>.db``.
    """

    name = "sqlite"
    suffix = ".db"
    driver_errors = (sqlite3.Error, OSError)

    def connect_admin(self, info: ConnectionInfo) -> sqlite3.Connection:
        self._check_root()
        return sqlite3.connect(":memory:", isolation_level=None)

    def connect(self, info: ConnectionInfo) -> sqlite3.Connection:
        return sqlite3.connect(self.path_for(info), isolation_level=None)

    def create_database(self, conn: sqlite3.Connection, info: ConnectionInfo) -> None:
        path = self._check_absent(info)
        conn.execute("ATTACH DATABASE ? AS provisioned", (str(path),))
        conn.execute("DETACH DATABASE provisioned")

    def bind_date(self, value: date) -> str:
        return value.isoformat()


def engine_from_settings(settings: "Settings") -> Engine:
    """
    Build the engine selected by ``settings.engine``.
    """

    if settings.engine == "sqlite":
        return SQLiteEngine(settings.data_dir)
    if settings.engine == "duckdb":
        from .engine_duckdb import DuckDBEngine

        return DuckDBEngine(settings.data_dir)
    if settings.engine == "postgres":
        from .engine_postgres import PostgresEngine

        return PostgresEngine()
    raise ValueError(f"Unsupported engine: {settings.engine}")
