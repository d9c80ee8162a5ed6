"""
=============================================================================
PRIMITIVE REPRESENTATIONS (RFC 7541 §5)
=============================================================================

PREFIX INTEGERS
───────────────
An integer is packed into the low N bits of a byte that may share its
high bits with flags. Values that don't fit spill into continuation bytes,
7 bits at a time, least significant group first:

      0   1   2   3   4   5   6   7
    +---+---+---+---+---+---+---+---+
    | flags     |  value (N bits)   |      value < 2^N - 1
    +---+---+---+-------------------+

    +---+---+---+---+---+---+---+---+
    | flags     | 1   1   1   1   1 |      value >= 2^N - 1
    +---+---+---+-------------------+
    | 1 |    (value - 2^N + 1) & 0x7f   |  continuation, more follow
    +---+---------------------------+
    | 0 |    last 7 bits            |
    +---+---------------------------+

    RFC 7541 C.1:  10 with N=5   → 0x0a
                   1337 with N=5 → 0x1f 0x9a 0x0a
                   42 with N=8   → 0x2a

STRING LITERALS
───────────────
    +---+---+---+---+---+---+---+---+
    | H |    length (7-bit prefix)  |
    +---+---------------------------+
    |  UTF-8 bytes (length octets)  |
    +-------------------------------+

H (Huffman) is always 0 here; Huffman coding is out of scope.

=============================================================================
"""

from typing import Tuple

from ..exceptions import HeaderDecodingError, HeaderEncodingError


HUFFMAN_FLAG = 0x80

# Decoded integers larger than this mean the block is garbage
MAX_INTEGER = 1 << 28


def encode_integer(value: int, prefix_bits: int, flags: int = 0) -> bytes:
    """
    Encode ``value`` with an N-bit prefix, OR-ing ``flags`` into the
    first byte's high bits.

    Raises:
        HeaderEncodingError: For negative values or a bad prefix width.
    """
    if value < 0:
        raise HeaderEncodingError(f"Cannot encode negative integer {value}")
    if not 1 <= prefix_bits <= 8:
        raise HeaderEncodingError(f"Invalid prefix width {prefix_bits}")

    max_prefix = (1 << prefix_bits) - 1

    if value < max_prefix:
        return bytes([flags | value])

    out = bytearray([flags | max_prefix])
    value -= max_prefix
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_integer(data: bytes, offset: int, prefix_bits: int) -> Tuple[int, int]:
    """
    Decode an N-bit prefix integer starting at ``data[offset]``.

    Returns:
        (value, offset just past the integer)

    Raises:
        HeaderDecodingError: If the data ends mid-integer or the value is absurd.
    """
    if offset >= len(data):
        raise HeaderDecodingError("Truncated integer: no prefix byte")

    max_prefix = (1 << prefix_bits) - 1
    value = data[offset] & max_prefix
    offset += 1

    if value < max_prefix:
        return value, offset

    shift = 0
    while True:
        if offset >= len(data):
            raise HeaderDecodingError("Truncated integer: missing continuation byte")
        byte = data[offset]
        offset += 1
        value += (byte & 0x7F) << shift
        shift += 7
        if value > MAX_INTEGER:
            raise HeaderDecodingError("Integer overflow in header block")
        if not byte & 0x80:
            return value, offset


def encode_string(text: str) -> bytes:
    """Length-prefixed UTF-8 literal, H bit clear."""
    raw = text.encode("utf-8")
    return encode_integer(len(raw), 7) + raw


def decode_string(data: bytes, offset: int) -> Tuple[str, int]:
    """
    Decode a string literal at ``data[offset]``.

    Raises:
        HeaderDecodingError: If Huffman-coded, truncated or not UTF-8.
    """
    if offset >= len(data):
        raise HeaderDecodingError("Truncated string: no length byte")
    if data[offset] & HUFFMAN_FLAG:
        raise HeaderDecodingError("Huffman-coded strings are not supported")

    length, offset = decode_integer(data, offset, 7)
    end = offset + length
    if end > len(data):
        raise HeaderDecodingError(
            f"Truncated string: need {length} bytes, have {len(data) - offset}"
        )

    try:
        return data[offset:end].decode("utf-8"), end
    except UnicodeDecodeError as e:
        raise HeaderDecodingError(f"String literal is not valid UTF-8: {e}")
