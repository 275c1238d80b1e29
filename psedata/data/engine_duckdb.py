from __future__ import annotations

import duckdb

from .engines import FileEngine
from .models import ConnectionInfo


class DuckDBEngine(FileEngine):
    """
    DuckDB-backed engine; each database is ``<root>/<database>.duckdb``.
    """

    name = "duckdb"
    suffix = ".duckdb"
    driver_errors = (duckdb.Error, OSError)

    def connect_admin(self, info: ConnectionInfo) -> duckdb.DuckDBPyConnection:
        self._check_root()
        return duckdb.connect()

    def connect(self, info: ConnectionInfo) -> duckdb.DuckDBPyConnection:
        return duckdb.connect(str(self.path_for(info)))

    def create_database(self, conn: duckdb.DuckDBPyConnection, info: ConnectionInfo) -> None:
        path = self._check_absent(info)
        quoted = str(path).replace("'", "''")
        conn.execute(f"ATTACH '{quoted}' AS provisioned")
        conn.execute("DETACH provisioned")

    def drop_database(self, conn: duckdb.DuckDBPyConnection, info: ConnectionInfo) -> None:
        path = self.path_for(info)
        path.unlink(missing_ok=True)
        path.with_name(path.name + ".wal").unlink(missing_ok=True)
