"""
=============================================================================
HEADER COMPRESSOR
=============================================================================

Turns a header list into an HPACK-like block. Each header becomes one of
two representations (RFC 7541 §6.1 and §6.2.1):

    INDEXED FIELD            name AND value already in the table
    ──────────────
      0   1   2   3   4   5   6   7
    +---+---+---+---+---+---+---+---+
    | 1 |        Index (7+)         |        one byte for indexes < 127
    +---+---------------------------+

    LITERAL, INCREMENTAL INDEXING, INDEXED NAME
    ───────────────────────────────────────────
    +---+---+---+---+---+---+---+---+
    | 0 | 1 |      Index (6+)       |        name from the table
    +---+---+-----------------------+
    | H |     Value Length (7+)     |
    +---+---------------------------+
    | Value String                  |
    +-------------------------------+

    LITERAL, INCREMENTAL INDEXING, NEW NAME
    ───────────────────────────────────────
    +---+---+---+---+---+---+---+---+
    | 0 | 1 |           0           |
    +---+---+-----------------------+
    | H |     Name Length (7+)      |
    +---+---------------------------+
    | Name String                   |
    +---+---------------------------+
    | H |     Value Length (7+)     |
    +---+---------------------------+
    | Value String                  |
    +-------------------------------+

Both literal forms append (name, value) to the dynamic table, so the
second time the same header is sent on this compressor it costs one byte.

=============================================================================
"""

import logging
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from ..exceptions import HeaderEncodingError
from .integers import encode_integer, encode_string
from .stats import CompressionStats
from .table import HeaderTable


logger = logging.getLogger(__name__)

HeaderInput = Union[Mapping[str, str], Iterable[Tuple[str, str]]]

INDEXED_FLAG = 0x80
LITERAL_INDEXED_FLAG = 0x40


def normalize_headers(headers: HeaderInput) -> List[Tuple[str, str]]:
    """Accept a mapping or (name, value) pairs; lower-case every name."""
    items = headers.items() if hasattr(headers, "items") else headers
    normalized = []
    for name, value in items:
        if not isinstance(name, str) or not isinstance(value, str):
            raise HeaderEncodingError(f"Header name and value must be str: {name!r}")
        if not name:
            raise HeaderEncodingError("Header name must not be empty")
        normalized.append((name.lower(), value))
    return normalized


def text_size(headers: List[Tuple[str, str]]) -> int:
    """Bytes the same headers would cost as HTTP/1.1 lines."""
    return sum(len(f"{name}: {value}\r\n".encode("utf-8")) for name, value in headers)


class HeaderCompressor:
    """
    Stateful encoder. One instance per direction of a connection; its
    dynamic table must evolve in lock-step with the peer's decompressor.

    Usage:
        compressor = HeaderCompressor()
        block = compressor.compress({"host": "localhost:8890"})
        print(compressor.last_stats)
    """

    def __init__(self):
        self.table = HeaderTable()
        self.last_stats: Optional[CompressionStats] = None

    def compress(self, headers: HeaderInput) -> bytes:
        """
        Encode a header list.

        Raises:
            HeaderEncodingError: If a header is not a pair of strings.
        """
        pairs = normalize_headers(headers)
        stats = CompressionStats(original_size=text_size(pairs))
        block = bytearray()

        for name, value in pairs:
            index, exact = self.table.find(name, value)

            if exact:
                block += encode_integer(index, 7, INDEXED_FLAG)
                stats.indexed += 1
                continue

            if index is not None:
                block += encode_integer(index, 6, LITERAL_INDEXED_FLAG)
                stats.literal_indexed_name += 1
            else:
                block += encode_integer(0, 6, LITERAL_INDEXED_FLAG)
                block += encode_string(name)
                stats.literal_new_name += 1

            block += encode_string(value)
            self.table.add(name, value)

        stats.compressed_size = len(block)
        self.last_stats = stats
        logger.debug(f"Compressed {stats.header_count} headers: {stats}")
        return bytes(block)
