"""
SQL rendering for the daily log export.

The table name is operator-supplied and interpolated as-is. Noise filter
values are regexes and get quoted as ClickHouse string literals.
"""

from dataclasses import dataclass
from typing import Optional

from src.time_window import TimeWindow, to_clickhouse_datetime64

TIMESTAMP_COLUMN = "dt"
PAYLOAD_COLUMN = "raw"
DEFAULT_NOISE_FIELD = "app"


@dataclass(frozen=True)
class NoiseFilter:
    """Excludes rows whose embedded application name matches `pattern`."""

    pattern: str
    field: str = DEFAULT_NOISE_FIELD


def quote_string_literal(value: str) -> str:
    """Quote a value as a single-quoted ClickHouse string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def build_export_query(
    window: TimeWindow, table: str, noise_filter: Optional[NoiseFilter] = None
) -> str:
    """
    Build the export query for one day of logs.

    Args:
        window: UTC day to export
        table: Remote table identifier (trusted, not escaped)
        noise_filter: Optional filter dropping rows from a noisy application

    Returns:
        SQL text returning one JSON object per line, ordered by timestamp
    """
    start = to_clickhouse_datetime64(window.start)
    end = to_clickhouse_datetime64(window.end)

    lines = [
        "SELECT",
        f"  {TIMESTAMP_COLUMN},",
        f"  {PAYLOAD_COLUMN}",
        f"FROM remote({table})",
        f"WHERE {TIMESTAMP_COLUMN} >= toDateTime64('{start}', 3, 'UTC')",
        f"  AND {TIMESTAMP_COLUMN} <  toDateTime64('{end}', 3, 'UTC')",
    ]

    if noise_filter is not None:
        field = quote_string_literal(noise_filter.field)
        pattern = quote_string_literal(noise_filter.pattern)
        lines.append(
            f"  AND NOT match(JSONExtractString({PAYLOAD_COLUMN}, {field}), {pattern})"
        )

    lines.extend(
        [
            f"ORDER BY {TIMESTAMP_COLUMN} ASC",
            "FORMAT JSONEachRow",
        ]
    )
    return "\n".join(lines)
