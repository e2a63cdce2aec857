"""
Decoder for the 'show stat' runtime API response.

The response is CSV: a '#' prefixed header line followed by one row per
listener, frontend, backend and server, in the order the remote
enumerates them.
"""

import csv
import io

from .decoding import columns_for, decode_row, encode_row
from .exceptions import FieldParseError
from .models.counters import CounterRecord

STAT_COLUMNS = columns_for(CounterRecord)


def parse_show_stat(response: bytes) -> list[CounterRecord]:
    """
    Parse the response of 'show stat' into counter records.

    Decoding is atomic: a single malformed row fails the whole call.
    Bytes that are not valid UTF-8 are kept as surrogate escapes, so
    ``value.encode("utf-8", "surrogateescape")`` gives back the raw field.

    Args:
        response: Raw response bytes

    Returns:
        One CounterRecord per row, in response order

    Raises:
        FieldParseError: If a row is short or a field does not parse
    """
    text = response.decode("utf-8", "surrogateescape")
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)

    records = []
    while True:
        try:
            elements = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            raise FieldParseError(f"malformed CSV row: {e}", line=reader.line_num) from e

        if not elements or elements[0].startswith("#"):
            continue
        records.append(decode_row(CounterRecord, STAT_COLUMNS, elements, reader.line_num))

    return records


def encode_stat_row(record: CounterRecord) -> str:
    """Render a counter record as a 'show stat' CSV row, quoting where needed."""
    buffer = io.StringIO(newline="")
    csv.writer(buffer, lineterminator="\n").writerow(encode_row(record, STAT_COLUMNS))
    return buffer.getvalue().removesuffix("\n")
