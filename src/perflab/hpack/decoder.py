"""
Header block decoder, the mirror image of HeaderCompressor.

First-byte dispatch:

    1xxxxxxx   indexed field
    01xxxxxx   literal with incremental indexing (index 0 = new name)
    001xxxxx   dynamic table size update     → not implemented
    0001xxxx   literal never indexed         → not implemented
    0000xxxx   literal without indexing      → not implemented

The encoder never produces the last three, so seeing one means the block
came from somewhere else or the two sides are out of sync.
"""

import logging
from typing import List, Tuple

from ..exceptions import HeaderDecodingError
from .integers import decode_integer, decode_string
from .table import HeaderTable


logger = logging.getLogger(__name__)


class HeaderDecompressor:
    """Stateful decoder; keeps its own copy of the dynamic table."""

    def __init__(self):
        self.table = HeaderTable()

    def decompress(self, block: bytes) -> List[Tuple[str, str]]:
        """
        Decode a header block into (name, value) pairs.

        Raises:
            HeaderDecodingError: If the block is malformed or uses a
                representation this codec does not implement.
        """
        headers: List[Tuple[str, str]] = []
        offset = 0

        while offset < len(block):
            first = block[offset]

            if first & 0x80:
                index, offset = decode_integer(block, offset, 7)
                headers.append(self.table.get(index))

            elif first & 0xC0 == 0x40:
                index, offset = decode_integer(block, offset, 6)
                if index == 0:
                    name, offset = decode_string(block, offset)
                else:
                    name = self.table.get(index)[0]
                value, offset = decode_string(block, offset)
                self.table.add(name, value)
                headers.append((name, value))

            elif first & 0xE0 == 0x20:
                raise HeaderDecodingError("Dynamic table size updates are not supported")

            else:
                raise HeaderDecodingError(
                    f"Unsupported header representation 0x{first:02x} at offset {offset}"
                )

        logger.debug(f"Decompressed {len(headers)} headers from {len(block)} bytes")
        return headers
