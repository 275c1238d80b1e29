from __future__ import annotations


class PseDataError(Exception):
    """
    Base class for every failure raised by the parser and the store.
    """


class ParseError(PseDataError, ValueError):
    """
    A single input row could not be turned into a DailyRecord.

    Attributes:
        line: Physical line number where the row ended.
        field: Name of the field that failed, or None for a field-count mismatch.
        value: The raw text that failed to parse.
    """

    def __init__(self, message: str, *, line: int, field: str | None = None, value: str | None = None):
        super().__init__(f"line {line}: {message}")
        self.line = line
        self.field = field
        self.value = value


class DatabaseConnectionError(PseDataError):
    pass


class ProvisionError(PseDataError):
    pass


class WriteError(PseDataError):
    pass


class QueryError(PseDataError):
    pass


class NotFoundError(PseDataError, LookupError):
    pass


class StoreStateError(PseDataError, RuntimeError):
    """
    Operation attempted while the store is not open.
    """


class ClosedError(StoreStateError):
    pass
