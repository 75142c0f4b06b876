"""Locate row arrays in decoded documents and read the upstream columns."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from prodsync.errors import NoRowsFound

logger = logging.getLogger(__name__)

# Column names emitted by the two known report generations.
LEGACY_TEAM_FIELD = "ZCA010[ZCA_NUMOPE]"
CURRENT_TEAM_FIELD = "EQUIPE_SUPERVISÃO[PREFIXO N ]"
LEGACY_DATE_FIELD = "CALENDÁRIO[Data]"
CURRENT_DATE_FIELD = "Calendário[DATA]"
VALUE_FIELD = "[produção]"

WRAPPER_KEY = "body"
TABLE_ROWS_KEY = "firstTableRows"


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


class RawRow(BaseModel):
    """One upstream row, either schema generation, before validation."""

    legacy_team_code: Optional[Any] = None
    current_team_code: Optional[Any] = None
    legacy_date: Optional[Any] = None
    current_date: Optional[Any] = None
    production_value: Optional[Any] = None

    @classmethod
    def from_mapping(cls, row: Any) -> "RawRow":
        if not isinstance(row, Mapping):
            return cls()
        return cls(
            legacy_team_code=row.get(LEGACY_TEAM_FIELD),
            current_team_code=row.get(CURRENT_TEAM_FIELD),
            legacy_date=row.get(LEGACY_DATE_FIELD),
            current_date=row.get(CURRENT_DATE_FIELD),
            production_value=row.get(VALUE_FIELD),
        )

    @property
    def team_code(self) -> Any:
        return _first_present(self.legacy_team_code, self.current_team_code)

    @property
    def date_text(self) -> Any:
        return _first_present(self.legacy_date, self.current_date)


def _unwrap(document: Any) -> Any:
    if isinstance(document, Mapping):
        inner = document.get(WRAPPER_KEY)
        if isinstance(inner, (Mapping, list)):
            logger.debug("Unwrapping %r wrapper", WRAPPER_KEY)
            return inner
    return document


def _report_rows(document: Mapping[str, Any]) -> Optional[list]:
    try:
        rows = document["results"][0]["tables"][0]["rows"]
    except (KeyError, IndexError, TypeError):
        return None
    return rows if isinstance(rows, list) else None


def extract_rows(document: Any) -> List[Any]:
    """Return the row array inside one decoded document, or an empty list."""

    data = _unwrap(document)
    if isinstance(data, Mapping):
        rows = data.get(TABLE_ROWS_KEY)
        if isinstance(rows, list):
            logger.info("Extracted %d rows from %s", len(rows), TABLE_ROWS_KEY)
            return list(rows)
        rows = _report_rows(data)
        if rows is not None:
            logger.info("Extracted %d rows from results[0].tables[0].rows", len(rows))
            return list(rows)
        logger.warning("No row array found in document with keys %s", sorted(map(str, data)))
        return []
    if isinstance(data, list):
        logger.info("Extracted %d rows from direct array", len(data))
        return list(data)
    logger.warning("Ignoring document of type %s", type(data).__name__)
    return []


def extract_all_rows(documents: Sequence[Any]) -> List[RawRow]:
    """Collect rows from every document; fail only when none has rows."""

    raw: List[Any] = []
    for document in documents:
        raw.extend(extract_rows(document))
    if not raw:
        logger.warning("No rows found in any of %d document(s)", len(documents))
        raise NoRowsFound()
    logger.info("Total rows to process: %d", len(raw))
    return [RawRow.from_mapping(row) for row in raw]
