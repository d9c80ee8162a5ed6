"""
=============================================================================
PAYLOAD OPTIMIZATION MODES
=============================================================================

    ┌───────┬──────────┬──────────────────────────┬────────────┐
    │ value │ name     │ body                     │ RLE        │
    ├───────┼──────────┼──────────────────────────┼────────────┤
    │   0   │ NONE     │ JSON                     │ no         │
    │   1   │ DEDUP    │ dictionary + id records  │ no         │
    │   2   │ BINARY   │ fixed binary records     │ no         │
    │   3   │ COMPRESS │ JSON                     │ yes        │
    │   4   │ ALL      │ dictionary + id records  │ yes        │
    └───────┴──────────┴──────────────────────────┴────────────┘

The mode rides in the frame header, so the server can decode any frame
without being told which mode the client is in.

=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Tuple

from ..exceptions import PayloadDecodeError
from ..report import savings_percent
from . import framing, records
from .records import UserRecord


logger = logging.getLogger(__name__)


class PayloadMode(IntEnum):
    NONE = 0
    DEDUP = 1
    BINARY = 2
    COMPRESS = 3
    ALL = 4

    def next(self) -> "PayloadMode":
        members = list(PayloadMode)
        return members[(members.index(self) + 1) % len(members)]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def uses_rle(self) -> bool:
        return self in (PayloadMode.COMPRESS, PayloadMode.ALL)


_LABELS = {
    PayloadMode.NONE: "JSON format (no optimization)",
    PayloadMode.DEDUP: "Deduplication",
    PayloadMode.BINARY: "Binary format",
    PayloadMode.COMPRESS: "Compression (RLE over JSON)",
    PayloadMode.ALL: "All optimizations",
}

KEY_LEARNINGS = (
    "Text formats repeat field names in every record",
    "Binary formats drop names and use fixed-width numbers",
    "Deduplication stores each distinct string once",
    "Compression pays off when the data has repetition",
    "Combining techniques gives the smallest payload",
)


@dataclass
class PayloadPlan:
    """What the client is about to send, and how it compares to JSON."""

    mode: PayloadMode
    wire: bytes
    json_size: int
    body_size: int
    dictionary_entries: int = 0

    @property
    def wire_size(self) -> int:
        return len(self.wire)

    @property
    def reduction_percent(self) -> float:
        return savings_percent(self.json_size, self.wire_size)


def encode_body(users: List[UserRecord], mode: PayloadMode) -> Tuple[bytes, int]:
    """Return (body bytes before RLE, dictionary entry count)."""
    if mode in (PayloadMode.DEDUP, PayloadMode.ALL):
        body, dictionary = records.encode_dedup(users)
        return body, len(dictionary)
    if mode == PayloadMode.BINARY:
        return records.encode_binary(users), 0
    return records.to_json(users).encode("utf-8"), 0


def encode_payload(users: List[UserRecord], mode: PayloadMode) -> PayloadPlan:
    mode = PayloadMode(mode)
    json_size = len(records.to_json(users).encode("utf-8"))
    body, entries = encode_body(users, mode)
    wire = framing.package(body, compress=mode.uses_rle, mode=int(mode))

    plan = PayloadPlan(
        mode=mode,
        wire=wire,
        json_size=json_size,
        body_size=len(body),
        dictionary_entries=entries,
    )
    logger.debug(
        f"{mode.name}: json={json_size} body={len(body)} wire={plan.wire_size} "
        f"({plan.reduction_percent:.2f}% smaller)"
    )
    return plan


def decode_payload(frame: bytes) -> Tuple[PayloadMode, List[UserRecord]]:
    """
    Recover the users from a frame produced by encode_payload().

    Raises:
        FrameError: Bad frame header.
        PayloadDecodeError: Unknown mode or a body that doesn't decode.
    """
    header, body = framing.unpackage(frame)

    try:
        mode = PayloadMode(header.mode)
    except ValueError:
        raise PayloadDecodeError(f"Unknown payload mode {header.mode}")

    if mode in (PayloadMode.DEDUP, PayloadMode.ALL):
        return mode, records.decode_dedup(body)
    if mode == PayloadMode.BINARY:
        return mode, records.decode_binary(body)

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise PayloadDecodeError(f"JSON payload is not UTF-8: {e}")
    return mode, records.from_json(text)
