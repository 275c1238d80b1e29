from __future__ import annotations

import codecs
import contextlib
import csv
import io
import logging
import math
from datetime import date, datetime
from pathlib import Path
from typing import BinaryIO, Iterator, TextIO

from .dialects import HISTORICAL, Dialect
from .errors import ParseError
from .models import DailyRecord

logger = logging.getLogger(__name__)


class RecordReader:
    """
    Pull-based reader turning a delimited price file into DailyRecords.

    The reader is a single-pass iterator: ``next(reader)`` returns the next
    record, raises StopIteration at end of input and raises ParseError for a
    malformed row. A ParseError consumes only the offending row, so callers
    may keep iterating to skip it or stop to abort.
    """

    def __init__(self, source: BinaryIO | TextIO, dialect: Dialect = HISTORICAL, encoding: str = "utf-8"):
        self.dialect = dialect
        if isinstance(source, io.TextIOBase):
            text = source
        else:
            text = codecs.getreader(encoding)(source)
        self.line_num = 0
        self._rows = csv.reader(self._lines(text), delimiter=",")

    def __iter__(self) -> "RecordReader":
        return self

    def __next__(self) -> DailyRecord:
        while True:
            try:
                row = next(self._rows)
            except csv.Error as exc:
                raise ParseError(f"malformed {self.dialect.name} row: {exc}", line=self.line_num) from exc
            except UnicodeDecodeError as exc:
                raise ParseError(f"undecodable input: {exc}", line=self.line_num + 1) from exc
            if not row:
                continue
            return self._to_record(row)

    def _lines(self, text: TextIO) -> Iterator[str]:
        marker = self.dialect.comment
        for line in text:
            self.line_num += 1
            if marker is not None and line.startswith(marker):
                logger.debug("Skipping banner line %d: %r", self.line_num, line.rstrip("\r\n"))
                continue
            yield line

    def _to_record(self, row: list[str]) -> DailyRecord:
        dialect = self.dialect
        count = len(row)
        if count < dialect.min_fields or (dialect.max_fields is not None and count > dialect.max_fields):
            if dialect.max_fields is None:
                expected = f"at least {dialect.min_fields}"
            elif dialect.max_fields == dialect.min_fields:
                expected = str(dialect.min_fields)
            else:
                expected = f"{dialect.min_fields} to {dialect.max_fields}"
            raise ParseError(
                f"expected {expected} fields for {dialect.name} row, got {count}",
                line=self.line_num,
            )

        index = dialect.field_index
        symbol = row[index["symbol"]]
        if not symbol:
            raise ParseError("symbol is empty", line=self.line_num, field="symbol", value=symbol)

        return DailyRecord(
            symbol=symbol,
            date=self._parse_date(row[index["date"]]),
            open=self._parse_price("open", row[index["open"]]),
            high=self._parse_price("high", row[index["high"]]),
            low=self._parse_price("low", row[index["low"]]),
            close=self._parse_price("close", row[index["close"]]),
            volume=self._parse_volume(row[index["volume"]]),
        )

    def _parse_date(self, value: str) -> date:
        layout = self.dialect.date_format
        try:
            parsed = datetime.strptime(value, layout).date()
        except ValueError as exc:
            raise ParseError(f"invalid date {value!r} for layout {layout}", line=self.line_num, field="date", value=value) from exc
        # strptime accepts unpadded fields; the layouts are fixed width
        if parsed.strftime(layout) != value:
            raise ParseError(f"invalid date {value!r} for layout {layout}", line=self.line_num, field="date", value=value)
        return parsed

    def _check_number(self, name: str, value: str) -> None:
        if not value.isascii() or value != value.strip() or "_" in value:
            raise ParseError(f"invalid {name} {value!r}", line=self.line_num, field=name, value=value)

    def _parse_price(self, name: str, value: str) -> float:
        self._check_number(name, value)
        try:
            price = float(value)
        except ValueError as exc:
            raise ParseError(f"invalid {name} price {value!r}", line=self.line_num, field=name, value=value) from exc
        if not math.isfinite(price):
            raise ParseError(f"non-finite {name} price {value!r}", line=self.line_num, field=name, value=value)
        return price

    def _parse_volume(self, value: str) -> int:
        self._check_number("volume", value)
        try:
            return int(value)
        except ValueError as exc:
            raise ParseError(f"invalid volume {value!r}", line=self.line_num, field="volume", value=value) from exc


@contextlib.contextmanager
def open_records(path: str | Path, dialect: Dialect = HISTORICAL) -> Iterator[RecordReader]:
    """
    Open a price file and yield a RecordReader over it; the file is closed on exit.
    """

    with open(path, "rb") as handle:
        logger.info("Reading %s records from %s", dialect.name, path)
        yield RecordReader(handle, dialect)
