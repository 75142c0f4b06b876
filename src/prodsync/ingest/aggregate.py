"""Validate raw rows and fold them into one record per team and day."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from prodsync.config.team_codes import TeamCodeMapping
from prodsync.ingest.rows import RawRow
from prodsync.models import ProductionRecord

logger = logging.getLogger(__name__)

_DATE_SEPARATOR = re.compile(r"[T ]")


@dataclass(frozen=True)
class AggregationResult:
    records: List[ProductionRecord]
    received: int
    ignored: int
    aggregated: int


def parse_row_date(value: Any) -> Optional[date]:
    """Keep the calendar date in front of the time separator.

    ``2025-12-16T00:00:00`` and ``2025-12-16`` both give 16 December 2025.
    """

    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    prefix = _DATE_SEPARATOR.split(text, maxsplit=1)[0]
    try:
        return date.fromisoformat(prefix)
    except ValueError:
        return None


def parse_row_value(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if "," in text and "." not in text:
            text = text.replace(",", ".")
        try:
            result = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def aggregate_rows(
    rows: Sequence[RawRow],
    team_index: Mapping[str, str],
    team_codes: TeamCodeMapping,
) -> AggregationResult:
    """Resolve teams and dates, then sum values that share a key.

    ``team_index`` maps canonical team names to team ids. Rows without a known
    team, a usable date or a numeric value are counted as ignored.
    """

    totals: Dict[Tuple[str, date], float] = {}
    ignored = 0
    aggregated = 0

    for row in rows:
        raw_code = row.team_code
        if raw_code is None:
            ignored += 1
            continue
        team_name = team_codes.normalize(raw_code)
        team_id = team_index.get(team_name)
        if team_id is None:
            logger.debug("Ignoring row: unknown team %r (from %r)", team_name, raw_code)
            ignored += 1
            continue
        row_date = parse_row_date(row.date_text)
        if row_date is None:
            logger.info("Ignoring row: invalid date %r", row.date_text)
            ignored += 1
            continue
        value = parse_row_value(row.production_value)
        if value is None:
            logger.info("Ignoring row: non-numeric production %r", row.production_value)
            ignored += 1
            continue

        key = (team_id, row_date)
        if key in totals:
            totals[key] += value
            aggregated += 1
            logger.debug(
                "Aggregating duplicate: %s on %s, new total: %s", team_name, row_date, totals[key]
            )
        else:
            totals[key] = value

    records = sorted(
        (
            ProductionRecord(team_id=team_id, date=row_date, production_value=total)
            for (team_id, row_date), total in totals.items()
        ),
        key=lambda record: record.key,
    )
    logger.info("Prepared %d records, %d rows ignored", len(records), ignored)
    return AggregationResult(
        records=records,
        received=len(rows),
        ignored=ignored,
        aggregated=aggregated,
    )
