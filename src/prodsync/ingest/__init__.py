"""Input adapters that turn upstream payloads into production records."""

from .aggregate import AggregationResult, aggregate_rows, parse_row_date, parse_row_value
from .payload import decode_payload
from .rows import RawRow, extract_all_rows, extract_rows

__all__ = [
    "AggregationResult",
    "RawRow",
    "aggregate_rows",
    "decode_payload",
    "extract_all_rows",
    "extract_rows",
    "parse_row_date",
    "parse_row_value",
]
