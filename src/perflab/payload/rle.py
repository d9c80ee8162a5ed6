"""
=============================================================================
RUN-LENGTH ENCODING
=============================================================================

The simplest compressor that still shows a bandwidth win on the wire.

    input:   41 41 41 41 41 42 43 43 FF
    output:  FF 41 05 42 43 43 FF FF 01
             ──┬─────  ── ─────  ──┬─────
               │        │    │     └── literal 0xFF, always escaped as a run
               │        │    └── runs of 2 stay literal
               │        └── single byte stays literal
               └── run of 5 × 0x41

Runs of RUN_THRESHOLD or more identical bytes become MARKER value count,
with count capped at 255 (longer runs are split). Because the marker byte
itself is always written as a run, any 0xFF in the output starts a
three-byte run record and decoding is unambiguous.

=============================================================================
"""

from typing import Optional

from ..exceptions import PayloadDecodeError


MARKER = 0xFF
RUN_THRESHOLD = 3
MAX_RUN = 255


def compress(data: bytes) -> bytes:
    out = bytearray()
    i = 0
    length = len(data)

    while i < length:
        current = data[i]
        count = 1
        while i + count < length and data[i + count] == current and count < MAX_RUN:
            count += 1

        if count >= RUN_THRESHOLD or current == MARKER:
            out += bytes((MARKER, current, count))
        else:
            out += data[i:i + count]
        i += count

    return bytes(out)


def decompress(data: bytes, original_size: Optional[int] = None) -> bytes:
    """
    Reverse compress().

    Raises:
        PayloadDecodeError: On a truncated run record, a zero-length run, or
            output that doesn't match ``original_size``.
    """
    out = bytearray()
    i = 0
    length = len(data)

    while i < length:
        byte = data[i]
        if byte != MARKER:
            out.append(byte)
            i += 1
            continue

        if i + 2 >= length:
            raise PayloadDecodeError(f"Truncated RLE run at offset {i}")
        value, count = data[i + 1], data[i + 2]
        if count == 0:
            raise PayloadDecodeError(f"Zero-length RLE run at offset {i}")
        out += bytes((value,)) * count
        i += 3

    if original_size is not None and len(out) != original_size:
        raise PayloadDecodeError(
            f"Decompressed size mismatch: expected {original_size}, got {len(out)}"
        )
    return bytes(out)
