"""
=============================================================================
PAYLOAD FRAMING
=============================================================================

Every payload travels behind a fixed 12-byte little-endian header:

    offset  size  field
    ──────  ────  ─────────────────────────────────────────
       0     4    magic          0x54435043 ("TCPC")
       4     4    original_size  bytes before compression
       8     1    compressed     1 if the payload is RLE-compressed
       9     1    mode           PayloadMode that produced the body
      10     2    reserved       zero

The magic lets the server reject anything that isn't ours before it
tries to decompress it.

=============================================================================
"""

import struct
from dataclasses import dataclass
from typing import Tuple

from ..exceptions import FrameError
from . import rle


MAGIC = 0x54435043  # "TCPC"
HEADER_STRUCT = struct.Struct("<IIBB2x")
HEADER_SIZE = HEADER_STRUCT.size  # 12


@dataclass
class DataHeader:
    original_size: int
    compressed: bool = False
    mode: int = 0
    magic: int = MAGIC

    def to_bytes(self) -> bytes:
        return HEADER_STRUCT.pack(self.magic, self.original_size, int(self.compressed), self.mode)

    @classmethod
    def from_bytes(cls, data: bytes) -> "DataHeader":
        """
        Raises:
            FrameError: If the data is too short or the magic is wrong.
        """
        if len(data) < HEADER_SIZE:
            raise FrameError(f"Frame too short: {len(data)} bytes, header needs {HEADER_SIZE}")

        magic, original_size, compressed, mode = HEADER_STRUCT.unpack_from(data)
        if magic != MAGIC:
            raise FrameError(f"Bad magic 0x{magic:08x}, expected 0x{MAGIC:08x}")
        return cls(original_size=original_size, compressed=bool(compressed), mode=mode, magic=magic)


def package(data: bytes, compress: bool, mode: int = 0) -> bytes:
    """Header + (optionally RLE-compressed) payload."""
    header = DataHeader(original_size=len(data), compressed=compress, mode=mode)
    payload = rle.compress(data) if compress else data
    return header.to_bytes() + payload


def unpackage(frame: bytes) -> Tuple[DataHeader, bytes]:
    """
    Split a frame and undo the compression.

    Raises:
        FrameError: Bad header, or an uncompressed payload of the wrong size.
        PayloadDecodeError: The compressed payload does not decode.
    """
    header = DataHeader.from_bytes(frame)
    payload = frame[HEADER_SIZE:]

    if header.compressed:
        return header, rle.decompress(payload, header.original_size)

    if len(payload) != header.original_size:
        raise FrameError(
            f"Payload size mismatch: header says {header.original_size}, got {len(payload)}"
        )
    return header, payload
