"""
Decoder for the 'show servers state' runtime API response.

The first line carries the format version, which must be 1. The rest is
a space separated table with '#' comment lines and one row per server.
"""

from .decoding import columns_for, decode_row
from .exceptions import ProtocolVersionError
from .models.state import ServerStateRecord

SUPPORTED_VERSION = "1"

SERVER_STATE_COLUMNS = columns_for(ServerStateRecord)


def parse_show_servers_state(response: bytes) -> list[ServerStateRecord]:
    """
    Parse the response of 'show servers state' into server state records.

    Rows are split on line feeds only. Bytes that are not valid UTF-8 are
    kept as surrogate escapes, like parse_show_stat does.

    Args:
        response: Raw response bytes

    Returns:
        One ServerStateRecord per row, in response order

    Raises:
        ProtocolVersionError: If the version line is not '1'
        FieldParseError: If a row is short or a field does not parse
    """
    text = response.decode("utf-8", "surrogateescape")

    version, _, body = text.partition("\n")
    version = version.removesuffix("\r")
    if version != SUPPORTED_VERSION:
        raise ProtocolVersionError(version)

    states = []
    # Line 1 was the version
    for line_no, line in enumerate(body.split("\n"), start=2):
        line = line.removesuffix("\r")
        if not line or line.startswith("#"):
            continue
        # Single space delimiter: consecutive spaces are empty fields
        elements = line.split(" ")
        states.append(decode_row(ServerStateRecord, SERVER_STATE_COLUMNS, elements, line_no))

    return states
