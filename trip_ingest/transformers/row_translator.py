# trip_ingest/transformers/row_translator.py
"""
Translation of raw input rows into normalized trip records
"""

from datetime import timedelta

import pandas as pd

from trip_ingest.config.settings import FieldMapping
from trip_ingest.models.trip_record import RawRow, Position, NormalizedRecord
from trip_ingest.utils.exceptions import (
    TimeParseError, CoordinateParseError, MalformedRowError
)

# Names accepted in place of a strptime pattern; both mean ISO-8601 text
# with an optional UTC offset
ISO_FORMAT_ALIASES = frozenset(["RFC3339", "ISO8601"])

CANONICAL_FORMAT = "%Y-%m-%dT%H:%M:%S"

# pd.to_datetime resolves these to the current clock even with an explicit format
RELATIVE_TIME_WORDS = frozenset(["now", "today"])


def _column(row: RawRow, index: int, field_name: str) -> str:
    """Bounds-checked column access"""
    if index >= len(row):
        raise MalformedRowError(
            f"Row has no column {index} for {field_name}",
            error_code="MALFORMED_ROW",
            context={'field': field_name, 'index': index, 'row_length': len(row)}
        )
    return row[index]


def parse_timestamp(value: str, time_format: str) -> pd.Timestamp:
    """
    Parse a time column with the configured format

    Args:
        value: Raw column text
        time_format: ``RFC3339``/``ISO8601`` or a strptime pattern

    Returns:
        Timezone-aware timestamp; text without an offset is taken as UTC

    Raises:
        TimeParseError: If the text does not match the format
    """
    pandas_format = "ISO8601" if time_format.upper() in ISO_FORMAT_ALIASES else time_format

    if value.strip().lower() in RELATIVE_TIME_WORDS:
        raise TimeParseError(
            f"Cannot parse '{value}' with format {time_format}",
            error_code="TIME_PARSE_ERROR",
            context={'value': value, 'format': time_format}
        )

    try:
        parsed = pd.to_datetime(value, format=pandas_format)
    except (ValueError, TypeError, OverflowError) as e:
        raise TimeParseError(
            f"Cannot parse '{value}' with format {time_format}",
            error_code="TIME_PARSE_ERROR",
            context={'value': value, 'format': time_format},
            cause=e
        ) from e

    if pd.isna(parsed):
        raise TimeParseError(
            f"Empty time value '{value}'",
            error_code="TIME_PARSE_ERROR",
            context={'value': value, 'format': time_format}
        )

    if parsed.tzinfo is None:
        parsed = parsed.tz_localize('UTC')
    return parsed


def format_canonical_timestamp(timestamp: pd.Timestamp) -> str:
    """
    Render a timezone-aware timestamp as RFC 3339 text

    Seconds precision; ``Z`` for UTC, ``+HH:MM``/``-HH:MM`` otherwise.
    """
    offset = timestamp.utcoffset() or timedelta(0)
    total_seconds = int(offset.total_seconds())
    text = timestamp.strftime(CANONICAL_FORMAT)

    if total_seconds == 0:
        return text + "Z"

    sign = "+" if total_seconds > 0 else "-"
    hours, remainder = divmod(abs(total_seconds), 3600)
    return f"{text}{sign}{hours:02d}:{remainder // 60:02d}"


def _canonical_time(row: RawRow, index: int, field_name: str, time_format: str) -> str:
    value = _column(row, index, field_name)
    try:
        return format_canonical_timestamp(parse_timestamp(value, time_format))
    except TimeParseError as e:
        e.context['field'] = field_name
        raise


def _coordinate(row: RawRow, index: int, field_name: str) -> float:
    value = _column(row, index, field_name)
    try:
        # float() would also take padding and 1_000 style separators
        if value != value.strip() or '_' in value:
            raise ValueError(f"could not convert string to float: {value!r}")
        return float(value)
    except ValueError as e:
        raise CoordinateParseError(
            f"Cannot parse {field_name} '{value}' as a number",
            error_code="COORDINATE_PARSE_ERROR",
            context={'field': field_name, 'value': value},
            cause=e
        ) from e


def translate_row(row: RawRow, mapping: FieldMapping) -> NormalizedRecord:
    """
    Map one raw row onto the output schema

    Pure function of its inputs: the same row and mapping always give the
    same record or the same error.

    Args:
        row: Column values of one input record
        mapping: Column layout and time format

    Returns:
        NormalizedRecord

    Raises:
        MalformedRowError: Row shorter than the highest configured index
        TimeParseError: Pickup or dropoff time does not match the format
        CoordinateParseError: A latitude/longitude is not a number
    """
    if len(row) < mapping.required_columns:
        raise MalformedRowError(
            f"Row has {len(row)} columns, mapping needs {mapping.required_columns}",
            error_code="MALFORMED_ROW",
            context={'row_length': len(row), 'required_columns': mapping.required_columns}
        )

    dropoff_time = _canonical_time(row, mapping.dropoff_time, 'dropoff_time', mapping.time_format)
    pickup_time = _canonical_time(row, mapping.pickup_time, 'pickup_time', mapping.time_format)

    start_coords = Position(
        latitude=_coordinate(row, mapping.start_lat, 'start_lat'),
        longitude=_coordinate(row, mapping.start_long, 'start_long'),
    )
    end_coords = Position(
        latitude=_coordinate(row, mapping.end_lat, 'end_lat'),
        longitude=_coordinate(row, mapping.end_long, 'end_long'),
    )

    return NormalizedRecord(
        dropoff_time=dropoff_time,
        pickup_time=pickup_time,
        start_block=_column(row, mapping.start_block, 'start_block'),
        start_tract=_column(row, mapping.start_tract, 'start_tract'),
        start_county=_column(row, mapping.start_county, 'start_county'),
        end_block=_column(row, mapping.end_block, 'end_block'),
        end_tract=_column(row, mapping.end_tract, 'end_tract'),
        end_county=_column(row, mapping.end_county, 'end_county'),
        start_coords=start_coords,
        end_coords=end_coords,
    )
