"""
=============================================================================
DNS WIRE FORMAT (A records over UDP)
=============================================================================

Just enough of RFC 1035 to ask a server for an IPv4 address and read the
answer:

    ┌──────────────────────────────────────────────────────────────┐
    │ header   id │ flags │ qdcount │ ancount │ nscount │ arcount  │  6 x u16 BE
    ├──────────────────────────────────────────────────────────────┤
    │ question 6 google 3 com 0 │ qtype (A=1) │ qclass (IN=1)      │
    ├──────────────────────────────────────────────────────────────┤
    │ answer   name │ type │ class │ ttl (u32) │ rdlength │ rdata  │
    │          ...                                                 │
    └──────────────────────────────────────────────────────────────┘

Names in answers are usually compressed: a byte with the top two bits set
(0xC0) starts a 14-bit pointer back to a name earlier in the packet. The
authority and additional sections are not read.

=============================================================================
"""

import socket
import struct
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..exceptions import DNSMessageError
from .cache import normalize_domain


HEADER = struct.Struct(">HHHHHH")
QUESTION_TAIL = struct.Struct(">HH")
RECORD_FIXED = struct.Struct(">HHIH")

TYPE_A = 1
CLASS_IN = 1

FLAG_RESPONSE = 0x8000
FLAG_TRUNCATED = 0x0200
FLAG_RECURSION_DESIRED = 0x0100
FLAG_RECURSION_AVAILABLE = 0x0080
RCODE_MASK = 0x000F

RCODE_NAMES = {
    0: "NOERROR",
    1: "FORMERR",
    2: "SERVFAIL",
    3: "NXDOMAIN",
    4: "NOTIMP",
    5: "REFUSED",
}

MAX_LABEL = 63
MAX_NAME = 255
POINTER_MASK = 0xC0
MAX_POINTER_JUMPS = 16


@dataclass
class Question:
    name: str
    qtype: int = TYPE_A
    qclass: int = CLASS_IN


@dataclass
class ResourceRecord:
    name: str
    rtype: int
    rclass: int
    ttl: int
    data: bytes

    @property
    def address(self) -> Optional[str]:
        """Dotted-quad address for IN A records, else None."""
        if self.rtype == TYPE_A and self.rclass == CLASS_IN and len(self.data) == 4:
            return socket.inet_ntoa(self.data)
        return None


@dataclass
class DNSMessage:
    id: int
    flags: int
    questions: List[Question] = field(default_factory=list)
    answers: List[ResourceRecord] = field(default_factory=list)

    @property
    def is_response(self) -> bool:
        return bool(self.flags & FLAG_RESPONSE)

    @property
    def truncated(self) -> bool:
        return bool(self.flags & FLAG_TRUNCATED)

    @property
    def rcode(self) -> int:
        return self.flags & RCODE_MASK

    @property
    def rcode_name(self) -> str:
        return RCODE_NAMES.get(self.rcode, f"RCODE{self.rcode}")

    def a_records(self) -> List[ResourceRecord]:
        return [record for record in self.answers if record.address is not None]


# =============================================================================
# NAMES
# =============================================================================

def encode_name(domain: str) -> bytes:
    """
    Length-prefixed labels ending in a zero byte.

    Raises:
        DNSMessageError: For empty or oversized labels, non-ASCII names or
            names over 255 bytes on the wire.
    """
    name = normalize_domain(domain)
    if not name:
        raise DNSMessageError("Empty domain name")

    parts = []
    for label in name.split("."):
        try:
            raw = label.encode("ascii")
        except UnicodeEncodeError:
            raise DNSMessageError(f"Non-ASCII label in {domain!r}")
        if not 1 <= len(raw) <= MAX_LABEL:
            raise DNSMessageError(f"Label length {len(raw)} out of range in {domain!r}")
        parts.append(bytes([len(raw)]) + raw)
    parts.append(b"\x00")

    encoded = b"".join(parts)
    if len(encoded) > MAX_NAME:
        raise DNSMessageError(f"Name is {len(encoded)} bytes on the wire, limit {MAX_NAME}")
    return encoded


def decode_name(data: bytes, offset: int) -> Tuple[str, int]:
    """
    Read a possibly compressed name.

    Returns:
        (name, offset just past the name as it appears at ``offset``).

    Raises:
        DNSMessageError: On truncation, pointer loops or reserved label types.
    """
    labels = []
    end: Optional[int] = None
    jumps = 0

    while True:
        if offset >= len(data):
            raise DNSMessageError("Name runs past end of message")
        length = data[offset]

        if length & POINTER_MASK == POINTER_MASK:
            if offset + 1 >= len(data):
                raise DNSMessageError("Truncated name pointer")
            if end is None:
                end = offset + 2
            jumps += 1
            if jumps > MAX_POINTER_JUMPS:
                raise DNSMessageError("Too many name pointers (loop?)")
            offset = ((length & 0x3F) << 8) | data[offset + 1]
            continue

        if length & POINTER_MASK:
            raise DNSMessageError(f"Reserved label type 0x{length:02x}")

        offset += 1
        if length == 0:
            break
        if offset + length > len(data):
            raise DNSMessageError("Label runs past end of message")
        labels.append(data[offset:offset + length].decode("ascii", errors="replace"))
        offset += length

    return ".".join(labels), (end if end is not None else offset)


# =============================================================================
# MESSAGES
# =============================================================================

def build_query(domain: str, query_id: int, recursion_desired: bool = True) -> bytes:
    """One-question A query."""
    flags = FLAG_RECURSION_DESIRED if recursion_desired else 0
    return b"".join((
        HEADER.pack(query_id & 0xFFFF, flags, 1, 0, 0, 0),
        encode_name(domain),
        QUESTION_TAIL.pack(TYPE_A, CLASS_IN),
    ))


def parse_message(data: bytes) -> DNSMessage:
    """
    Parse the header, questions and answers.

    Raises:
        DNSMessageError: If any section is truncated or malformed.
    """
    if len(data) < HEADER.size:
        raise DNSMessageError(f"Message is {len(data)} bytes, header needs {HEADER.size}")

    query_id, flags, qdcount, ancount, _nscount, _arcount = HEADER.unpack_from(data, 0)
    message = DNSMessage(id=query_id, flags=flags)
    offset = HEADER.size

    for _ in range(qdcount):
        name, offset = decode_name(data, offset)
        if offset + QUESTION_TAIL.size > len(data):
            raise DNSMessageError("Truncated question")
        qtype, qclass = QUESTION_TAIL.unpack_from(data, offset)
        offset += QUESTION_TAIL.size
        message.questions.append(Question(name, qtype, qclass))

    for _ in range(ancount):
        name, offset = decode_name(data, offset)
        if offset + RECORD_FIXED.size > len(data):
            raise DNSMessageError("Truncated answer record")
        rtype, rclass, ttl, rdlength = RECORD_FIXED.unpack_from(data, offset)
        offset += RECORD_FIXED.size
        if offset + rdlength > len(data):
            raise DNSMessageError("Truncated answer data")
        message.answers.append(
            ResourceRecord(name, rtype, rclass, ttl, data[offset:offset + rdlength])
        )
        offset += rdlength

    return message


def build_response(
    query: bytes,
    answers: Sequence[Tuple[str, int]] = (),
    rcode: int = 0,
) -> bytes:
    """
    Answer ``query`` with A records given as (address, ttl) pairs.

    The question is echoed and every answer names it through a pointer to
    offset 12, the way real servers compress the reply.

    Raises:
        DNSMessageError: If the query does not parse or has no question.
    """
    parsed = parse_message(query)
    if not parsed.questions:
        raise DNSMessageError("Query has no question")

    question_end = HEADER.size + len(encode_name(parsed.questions[0].name)) + QUESTION_TAIL.size
    flags = (
        FLAG_RESPONSE
        | (parsed.flags & FLAG_RECURSION_DESIRED)
        | FLAG_RECURSION_AVAILABLE
        | (rcode & RCODE_MASK)
    )

    parts = [
        HEADER.pack(parsed.id, flags, 1, len(answers), 0, 0),
        query[HEADER.size:question_end],
    ]
    pointer = struct.pack(">H", (POINTER_MASK << 8) | HEADER.size)
    for address, ttl in answers:
        parts.append(pointer)
        parts.append(RECORD_FIXED.pack(TYPE_A, CLASS_IN, ttl, 4))
        parts.append(socket.inet_aton(address))
    return b"".join(parts)
