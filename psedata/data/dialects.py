from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

RECORD_FIELDS = ("symbol", "date", "open", "high", "low", "close", "volume")

_DEFAULT_INDEX = {name: idx for idx, name in enumerate(RECORD_FIELDS)}


@dataclass(frozen=True)
class Dialect:
    """
    Describes one textual layout of daily price files.

    Attributes:
        name: Short label used in log and error messages.
        date_format: strptime layout of the date column.
        comment: Lines starting with this character are banners and skipped.
        min_fields: Minimum number of columns in a data row.
        max_fields: Maximum number of columns, None when trailing content is allowed.
        field_index: Column index of each record field.
    """

    name: str
    date_format: str
    comment: str | None = None
    min_fields: int = len(RECORD_FIELDS)
    max_fields: int | None = None
    field_index: Mapping[str, int] = field(default_factory=lambda: dict(_DEFAULT_INDEX), hash=False)

    def __post_init__(self) -> None:
        missing = set(RECORD_FIELDS) - set(self.field_index)
        if missing:
            raise ValueError(f"dialect {self.name} has no column for {sorted(missing)}")
        if max(self.field_index.values()) >= self.min_fields:
            raise ValueError(f"dialect {self.name} maps a field beyond min_fields={self.min_fields}")
        if self.comment is not None and len(self.comment) != 1:
            raise ValueError("comment marker must be a single character")


# Exported by older brokers: banner lines such as "<NAME>,<DATE>,..." and a
# trailing comma after the volume.
HISTORICAL = Dialect(
    name="historical",
    date_format="%Y%m%d",
    comment="<",
    min_fields=7,
    max_fields=None,
)

# Current exchange export: no banner, an eighth numeric column after volume.
CONTEMPORARY = Dialect(
    name="contemporary",
    date_format="%m/%d/%Y",
    comment=None,
    min_fields=8,
    max_fields=8,
)

DIALECTS = {dialect.name: dialect for dialect in (HISTORICAL, CONTEMPORARY)}


def get_dialect(name: str) -> Dialect:
    try:
        return DIALECTS[name]
    except KeyError:
        raise ValueError(f"Unknown dialect {name!r}; expected one of {sorted(DIALECTS)}") from None
