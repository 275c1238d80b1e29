from __future__ import annotations

from typing import Any, Sequence

import psycopg2
from psycopg2 import sql

from .engines import Engine, PreparedStatement
from .models import ConnectionInfo


class ServerPreparedStatement(PreparedStatement):
    """
    Statement prepared on the server with PREPARE and released with DEALLOCATE.
    """

    def __init__(self, conn: Any, name: str, sql_text: str):
        super().__init__(name, sql_text)
        self._cursor = conn.cursor()
        # positional $n parameters inside the PREPARE body
        body = sql_text % tuple(f"${idx}" for idx in range(1, sql_text.count("%s") + 1))
        self._cursor.execute(f"PREPARE {name} AS {body}")

    def execute(self, params: Sequence[Any]) -> None:
        markers = ", ".join(["%s"] * len(params))
        self._cursor.execute(f"EXECUTE {self.name} ({markers})", params)

    def close(self) -> None:
        try:
            self._cursor.execute(f"DEALLOCATE {self.name}")
        finally:
            self._cursor.close()


class PostgresEngine(Engine):
    """
    PostgreSQL engine using libpq connection strings built from ConnectionInfo.
    """

    name = "postgres"
    driver_errors = (psycopg2.Error,)

    def connect_admin(self, info: ConnectionInfo) -> Any:
        return self._connect(info.admin_connect_string())

    def connect(self, info: ConnectionInfo) -> Any:
        return self._connect(info.connect_string())

    def _connect(self, dsn: str) -> Any:
        conn = psycopg2.connect(dsn)
        # CREATE DATABASE cannot run inside a transaction block
        conn.autocommit = True
        return conn

    def create_database(self, conn: Any, info: ConnectionInfo) -> None:
        with conn.cursor() as cur:
            cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(info.database)))

    def set_time_zone(self, conn: Any, info: ConnectionInfo, zone: str) -> None:
        with conn.cursor() as cur:
            cur.execute(
                sql.SQL("ALTER DATABASE {} SET TIME ZONE {}").format(
                    sql.Identifier(info.database), sql.Literal(zone)
                )
            )

    def drop_database(self, conn: Any, info: ConnectionInfo) -> None:
        with conn.cursor() as cur:
            cur.execute(sql.SQL("DROP DATABASE IF EXISTS {}").format(sql.Identifier(info.database)))

    def markers(self, count: int) -> str:
        return ", ".join(["%s"] * count)

    def prepare(self, conn: Any, name: str, sql_text: str) -> PreparedStatement:
        return ServerPreparedStatement(conn, name, sql_text)
