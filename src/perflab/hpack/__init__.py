"""
=============================================================================
HPACK-LIKE HEADER COMPRESSION
=============================================================================

A small, readable cousin of HTTP/2's HPACK (RFC 7541):

    ┌─────────────────────────────────────────────────────────────────────┐
    │  KEPT FROM HPACK                   LEFT OUT                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │  RFC static table (1..61)          Huffman string coding             │
    │  dynamic table from index 62       dynamic table eviction / sizing   │
    │  N-bit prefix integers             never-indexed literals            │
    │  indexed + literal-with-indexing   HTTP/2 framing                    │
    └─────────────────────────────────────────────────────────────────────┘

Blocks produced here decode with HeaderDecompressor. No claim is made that
a real HTTP/2 peer would accept them.

=============================================================================
"""

from .encoder import HeaderCompressor
from .decoder import HeaderDecompressor
from .stats import CompressionStats
from .table import HeaderTable
from .integers import encode_integer, decode_integer, encode_string, decode_string

__all__ = [
    "HeaderCompressor",
    "HeaderDecompressor",
    "CompressionStats",
    "HeaderTable",
    "encode_integer",
    "decode_integer",
    "encode_string",
    "decode_string",
]
