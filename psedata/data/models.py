from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Sequence

ADMIN_DATABASE = "template1"


@dataclass(frozen=True)
class DailyRecord:
    """
    One symbol's price and volume observation for one trading day.

    Attributes:
        symbol: Ticker symbol (the day_trades schema allows up to 5 characters).
        date: Trading day.
        open: Opening price.
        high: Highest price of the day.
        low: Lowest price of the day.
        close: Closing price.
        volume: Number of shares traded.

    No relationship between the prices is enforced; source files are known
    to contain days where high < low and such rows must still load.
    """

    symbol: str
    date: date
    open: float
    high: float
    low: float
    close: float
    volume: int

    def __str__(self) -> str:
        return "%s,%s,%f,%f,%f,%f,%d" % (
            self.symbol,
            self.date.isoformat(),
            self.open,
            self.high,
            self.low,
            self.close,
            self.volume,
        )

    @classmethod
    def from_row(cls, row: Sequence) -> "DailyRecord":
        """
        Build a record from a (symbol, date, open, high, low, close, vol) row.

        Backends return dates as strings or date objects and prices as
        Decimal, int or float; all of them are coerced here.
        """

        return cls(
            symbol=row[0],
            date=coerce_date(row[1]),
            open=float(row[2]),
            high=float(row[3]),
            low=float(row[4]),
            close=float(row[5]),
            volume=int(row[6]),
        )


@dataclass(frozen=True)
class ConnectionInfo:
    """
    Database connection information and credentials.
    """

    host: str
    port: int
    user: str
    password: str
    database: str

    def connect_string(self) -> str:
        return self._connect_string(self.database)

    def admin_connect_string(self) -> str:
        """
        Connection string for the administrative database, used when
        creating or dropping the target database.
        """

        return self._connect_string(ADMIN_DATABASE)

    def _connect_string(self, dbname: str) -> str:
        return (
            f"user={self.user} password={self.password} dbname={dbname} "
            f"host={self.host} port={self.port} sslmode=disable"
        )


def coerce_date(value: str | date) -> date:
    """
    Convert a YYYY-MM-DD string, datetime or date into a date object.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)
