from __future__ import annotations

import contextlib
import logging
from datetime import date
from functools import cached_property
from typing import Any, Iterable, List, Sequence

from .engines import Engine, PreparedStatement
from .errors import (
    ClosedError,
    DatabaseConnectionError,
    NotFoundError,
    ParseError,
    ProvisionError,
    QueryError,
    StoreStateError,
    WriteError,
)
from .models import ConnectionInfo, DailyRecord, coerce_date

logger = logging.getLogger(__name__)

COLUMNS = ("symbol", "date", "open", "high", "low", "close", "vol")

DAY_TRADES_DDL = """
CREATE TABLE day_trades (
    symbol varchar(5) NOT NULL CHECK (length(symbol) <= 5),
    date   date NOT NULL,
    open   numeric(14, 5) NOT NULL,
    high   numeric(14, 5) NOT NULL,
    low    numeric(14, 5) NOT NULL,
    close  numeric(14, 5) NOT NULL,
    vol    int NOT NULL
)
"""

SELECT_DAY_TRADES = f"SELECT {', '.join(COLUMNS)} FROM day_trades"

UNPROVISIONED = "unprovisioned"
OPEN = "open"
CLOSED = "closed"


class Store:
    """
    Relational storage for daily records in a single ``day_trades`` table.

    A store starts unprovisioned, becomes open through ``provision`` and ends
    closed through ``close``. The insert statement is prepared on first use and
    kept until close. Rows are not deduplicated: importing the same file twice
    stores every record twice.
    """

    def __init__(self, info: ConnectionInfo, engine: Engine):
        self.info = info
        self.engine = engine
        self.state = UNPROVISIONED
        self._conn: Any = None
        self._resources = contextlib.ExitStack()

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self.state == CLOSED

    def provision(self, time_zone: str | None = None) -> "Store":
        """
        Create the database and the day_trades table, then open the store.

        Args:
            time_zone: Time zone to set on the new database, if the engine
                supports database-level time zones.

        Raises:
            DatabaseConnectionError: if a connection cannot be opened.
            ProvisionError: if creating the database or the table fails.
        """

        if self.state == CLOSED:
            raise ClosedError("store is closed")
        if self.state == OPEN:
            raise StoreStateError(f"database {self.info.database} is already provisioned")

        errors = self.engine.driver_errors
        try:
            admin = self.engine.connect_admin(self.info)
        except errors as exc:
            raise DatabaseConnectionError(f"Cannot open control connection for {self.info.database}: {exc}") from exc
        try:
            self.engine.create_database(admin, self.info)
            if time_zone:
                self.engine.set_time_zone(admin, self.info, time_zone)
        except errors as exc:
            raise ProvisionError(f"Cannot create database {self.info.database}: {exc}") from exc
        finally:
            admin.close()

        try:
            conn = self.engine.connect(self.info)
        except errors as exc:
            raise DatabaseConnectionError(f"Cannot connect to {self.info.database}: {exc}") from exc
        try:
            with contextlib.closing(conn.cursor()) as cur:
                cur.execute(DAY_TRADES_DDL)
        except errors as exc:
            conn.close()
            raise ProvisionError(f"Cannot create day_trades in {self.info.database}: {exc}") from exc

        self._conn = conn
        self._resources.callback(conn.close)
        self.state = OPEN
        logger.info("Provisioned %s database %s", self.engine.name, self.info.database)
        return self

    @cached_property
    def _insert_statement(self) -> PreparedStatement:
        sql = f"INSERT INTO day_trades ({', '.join(COLUMNS)}) VALUES ({self.engine.markers(len(COLUMNS))})"
        statement = self.engine.prepare(self._conn, "day_trades_insert", sql)
        logger.debug("Prepared insert statement on %s", self.info.database)
        return self._resources.enter_context(statement)

    def insert(self, record: DailyRecord) -> None:
        self._require_open()
        params = (
            record.symbol,
            self.engine.bind_date(record.date),
            record.open,
            record.high,
            record.low,
            record.close,
            record.volume,
        )
        try:
            self._insert_statement.execute(params)
        except self.engine.driver_errors as exc:
            raise WriteError(f"Failed to insert {record.symbol} for {record.date}: {exc}") from exc

    def import_all(self, records: Iterable[DailyRecord]) -> int:
        """
        Insert every record until the source is exhausted.

        The first ParseError or WriteError is re-raised as is. Records inserted
        before it stay in the table; there is no surrounding transaction.

        Returns:
            Number of records inserted.
        """

        self._require_open()
        count = 0
        try:
            for record in records:
                self.insert(record)
                count += 1
        except (ParseError, WriteError):
            logger.error("Import into %s stopped after %d records", self.info.database, count)
            raise
        logger.info("Imported %d records into %s", count, self.info.database)
        return count

    def find(self, symbol: str, day: str | date) -> DailyRecord:
        self._require_open()
        query = f"{SELECT_DAY_TRADES} WHERE symbol = {self.engine.markers(1)} AND date = {self.engine.markers(1)}"
        params = (symbol, self.engine.bind_date(coerce_date(day)))
        row = self._fetch(query, params, one=True)
        if row is None:
            raise NotFoundError(f"No record for {symbol} on {coerce_date(day).isoformat()}")
        return DailyRecord.from_row(row)

    def find_all(self, symbol: str) -> List[DailyRecord]:
        self._require_open()
        query = f"{SELECT_DAY_TRADES} WHERE symbol = {self.engine.markers(1)}"
        rows = self._fetch(query, (symbol,))
        return [DailyRecord.from_row(row) for row in rows]

    def close(self) -> None:
        if self.state == CLOSED:
            return
        self.state = CLOSED
        try:
            self._resources.close()
        except self.engine.driver_errors as exc:
            raise DatabaseConnectionError(f"Failed to release {self.info.database}: {exc}") from exc
        logger.info("Closed %s", self.info.database)

    def _fetch(self, query: str, params: Sequence[Any], one: bool = False) -> Any:
        try:
            with contextlib.closing(self._conn.cursor()) as cur:
                cur.execute(query, params)
                return cur.fetchone() if one else cur.fetchall()
        except self.engine.driver_errors as exc:
            raise QueryError(f"Query on {self.info.database} failed: {exc}") from exc

    def _require_open(self) -> None:
        if self.state == CLOSED:
            raise ClosedError("store is closed")
        if self.state == UNPROVISIONED:
            raise StoreStateError(f"database {self.info.database} has not been provisioned")


def create_db(info: ConnectionInfo, engine: Engine, time_zone: str | None = None) -> Store:
    """
    Create the database described by ``info`` and return an open store on it.
    """

    return Store(info, engine).provision(time_zone=time_zone)


def drop_database(info: ConnectionInfo, engine: Engine) -> None:
    """
    Drop the database described by ``info`` if it exists.
    """

    errors = engine.driver_errors
    try:
        admin = engine.connect_admin(info)
    except errors as exc:
        raise DatabaseConnectionError(f"Cannot open control connection for {info.database}: {exc}") from exc
    try:
        engine.drop_database(admin, info)
    except errors as exc:
        raise ProvisionError(f"Cannot drop database {info.database}: {exc}") from exc
    finally:
        admin.close()
    logger.info("Dropped %s database %s", engine.name, info.database)
