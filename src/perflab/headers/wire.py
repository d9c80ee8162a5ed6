"""
=============================================================================
COMPRESSED WIRE FRAME
=============================================================================

Mode 2 sends an HTTP/2-flavoured frame instead of HTTP/1.1 text:

    ┌──────────────────────────────┬────────┬──────────────┬───────────┐
    │ start line + \\r\\n            │ length │ header block │ body      │
    │ "GET /api/users HTTP/2"      │ 4 B BE │ length bytes │ rest      │
    │ "HTTP/2 200"                 │        │              │           │
    └──────────────────────────────┴────────┴──────────────┴───────────┘

The start line stays readable so a Wireshark capture still shows what
the message is. The version token "HTTP/2" is what tells a frame apart
from a text message; text messages always say HTTP/1.0 or HTTP/1.1.

This is NOT real HTTP/2 framing (no frame types, streams or flags).

=============================================================================
"""

import struct
from dataclasses import dataclass
from typing import Union

from ..exceptions import HeaderDecodingError, HeaderEncodingError, MessageParseError
from ..hpack import HeaderCompressor, HeaderDecompressor
from ..http.builders import COMPRESSED_VERSION
from ..http.message import HTTPRequest, HTTPResponse
from ..http.status_codes import HTTPStatus


BLOCK_LENGTH = struct.Struct(">I")

Message = Union[HTTPRequest, HTTPResponse]


@dataclass
class Frame:
    """A decoded frame plus the size of its compressed header block."""

    message: Message
    block_size: int
    total_size: int


def is_compressed_frame(data: bytes) -> bool:
    """
    True if the start line carries the HTTP/2 version token and is
    followed by a block length that fits inside ``data``.

    A text message that merely claims HTTP/2 ("GET / HTTP/2\\r\\nHost: x")
    has no such length and is left to the text parser, which answers 505.
    """
    line_end = data.find(b"\r\n")
    if line_end == -1:
        return False
    tokens = data[:line_end].split(b" ")
    version = COMPRESSED_VERSION.encode("ascii")
    if tokens[0] != version and tokens[-1] != version:
        return False

    offset = line_end + 2
    if len(data) < offset + BLOCK_LENGTH.size:
        return False
    (block_size,) = BLOCK_LENGTH.unpack_from(data, offset)
    return offset + BLOCK_LENGTH.size + block_size <= len(data)


def encode_frame(message: Message, compressor: HeaderCompressor) -> bytes:
    """
    Serialize a message as a compressed frame.

    Raises:
        HeaderEncodingError: If the message is not an HTTP/2 message.
    """
    if message.version != COMPRESSED_VERSION:
        raise HeaderEncodingError(
            f"Compressed frames carry version {COMPRESSED_VERSION}, got {message.version}"
        )

    block = compressor.compress(message.header_list())
    return b"".join((
        message.start_line.encode("utf-8"),
        b"\r\n",
        BLOCK_LENGTH.pack(len(block)),
        block,
        message.body.encode("utf-8"),
    ))


def decode_frame(data: bytes, decompressor: HeaderDecompressor) -> Frame:
    """
    Parse a compressed frame.

    Raises:
        MessageParseError: If the start line is malformed.
        HeaderDecodingError: If the length prefix or block is truncated or invalid.
    """
    line_end = data.find(b"\r\n")
    if line_end == -1:
        raise MessageParseError("Compressed frame has no start line")

    try:
        start_line = data[:line_end].decode("ascii")
    except UnicodeDecodeError:
        raise MessageParseError("Compressed frame start line is not ASCII")

    offset = line_end + 2
    if len(data) < offset + BLOCK_LENGTH.size:
        raise HeaderDecodingError("Compressed frame is missing its block length")
    (block_size,) = BLOCK_LENGTH.unpack_from(data, offset)
    offset += BLOCK_LENGTH.size

    if len(data) < offset + block_size:
        raise HeaderDecodingError(
            f"Header block truncated: need {block_size} bytes, have {len(data) - offset}"
        )
    block = data[offset:offset + block_size]
    headers = dict(decompressor.decompress(block))

    try:
        body = data[offset + block_size:].decode("utf-8")
    except UnicodeDecodeError as e:
        raise MessageParseError(f"Failed to decode frame body: {e}")

    message = _build_message(start_line, headers, body)
    return Frame(message=message, block_size=block_size, total_size=len(data))


def _build_message(start_line: str, headers: dict, body: str) -> Message:
    parts = start_line.split(" ")

    if parts[0] == COMPRESSED_VERSION:
        if len(parts) != 2 or not parts[1].isdigit():
            raise MessageParseError(f"Invalid frame status line: {start_line!r}")
        try:
            status = HTTPStatus(int(parts[1]))
        except ValueError:
            raise MessageParseError(f"Unknown status code: {parts[1]}")
        return HTTPResponse(status=status, version=COMPRESSED_VERSION, headers=headers, body=body)

    if len(parts) != 3 or parts[2] != COMPRESSED_VERSION:
        raise MessageParseError(f"Invalid frame request line: {start_line!r}")
    method, path, version = parts
    return HTTPRequest(method=method, path=path, version=version, headers=headers, body=body)
