"""
=============================================================================
USER RECORDS AND THEIR ENCODINGS
=============================================================================

Three ways to put the same 100 users on the wire:

    JSON          {"users":[{"id":1,"name":"User1",...},...]}
                  field names repeated in every record

    BINARY        count:u32 | id:i32 len:u32 name len:u32 email
                              len:u32 dept salary:f64 active:u8 | ...
                  no field names, fixed-width numbers

    DEDUP BINARY  entries:u32 | len:u32 str | len:u32 str | ...      (dictionary)
                  count:u32 | id:i32 name_id:u32 email_id:u32
                              dept_id:u32 salary:f64 active:u8 | ...
                  every distinct string stored once, records hold ids

All integers are little-endian. Dictionary ids are 1-based; 0 never
appears in a valid record.

=============================================================================
"""

import json
import struct
from dataclasses import dataclass, asdict
from typing import Dict, List, Tuple

from ..exceptions import PayloadDecodeError


DEPARTMENTS = ("Engineering", "Marketing", "Sales", "HR", "Finance")
DOMAINS = ("company.com", "corp.net", "business.org")

U32 = struct.Struct("<I")
BINARY_ID = struct.Struct("<i")
BINARY_TAIL = struct.Struct("<dB")
DEDUP_RECORD = struct.Struct("<iIIIdB")


@dataclass
class UserRecord:
    id: int
    name: str
    email: str
    department: str
    salary: float
    active: bool


def generate_users(count: int = 100) -> List[UserRecord]:
    """Deterministic test set with plenty of repeated departments and domains."""
    return [
        UserRecord(
            id=i,
            name=f"User{i}",
            email=f"user{i}@{DOMAINS[i % len(DOMAINS)]}",
            department=DEPARTMENTS[i % len(DEPARTMENTS)],
            salary=50000.0 + i * 1000.0,
            active=i % 10 != 0,
        )
        for i in range(1, count + 1)
    ]


# ─────────────────────────────────────────────────────────────────────────
# JSON
# ─────────────────────────────────────────────────────────────────────────

def to_json(users: List[UserRecord]) -> str:
    return json.dumps({"users": [asdict(u) for u in users]}, separators=(",", ":"))


def from_json(text: str) -> List[UserRecord]:
    try:
        return [UserRecord(**entry) for entry in json.loads(text)["users"]]
    except (ValueError, KeyError, TypeError) as e:
        raise PayloadDecodeError(f"Invalid JSON payload: {e}")


# ─────────────────────────────────────────────────────────────────────────
# BINARY
# ─────────────────────────────────────────────────────────────────────────

def _pack_string(text: str) -> bytes:
    raw = text.encode("utf-8")
    return U32.pack(len(raw)) + raw


class _Reader:
    """Cursor over a bytes buffer that raises PayloadDecodeError on overrun."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def unpack(self, fmt: struct.Struct) -> tuple:
        if self.offset + fmt.size > len(self.data):
            raise PayloadDecodeError(f"Truncated payload at offset {self.offset}")
        values = fmt.unpack_from(self.data, self.offset)
        self.offset += fmt.size
        return values

    def string(self) -> str:
        (length,) = self.unpack(U32)
        end = self.offset + length
        if end > len(self.data):
            raise PayloadDecodeError(f"Truncated string at offset {self.offset}")
        try:
            text = self.data[self.offset:end].decode("utf-8")
        except UnicodeDecodeError as e:
            raise PayloadDecodeError(f"Invalid UTF-8 string: {e}")
        self.offset = end
        return text

    def expect_end(self) -> None:
        if self.offset != len(self.data):
            raise PayloadDecodeError(f"{len(self.data) - self.offset} trailing bytes in payload")


def encode_binary(users: List[UserRecord]) -> bytes:
    parts = [U32.pack(len(users))]
    for user in users:
        parts.append(BINARY_ID.pack(user.id))
        parts.append(_pack_string(user.name))
        parts.append(_pack_string(user.email))
        parts.append(_pack_string(user.department))
        parts.append(BINARY_TAIL.pack(user.salary, int(user.active)))
    return b"".join(parts)


def decode_binary(data: bytes) -> List[UserRecord]:
    reader = _Reader(data)
    (count,) = reader.unpack(U32)
    users = []
    for _ in range(count):
        (user_id,) = reader.unpack(BINARY_ID)
        name = reader.string()
        email = reader.string()
        department = reader.string()
        salary, active = reader.unpack(BINARY_TAIL)
        users.append(UserRecord(user_id, name, email, department, salary, bool(active)))
    reader.expect_end()
    return users


# ─────────────────────────────────────────────────────────────────────────
# DEDUPLICATED BINARY
# ─────────────────────────────────────────────────────────────────────────

class StringDictionary:
    """Assigns each distinct string a 1-based id, in first-seen order."""

    def __init__(self):
        self._ids: Dict[str, int] = {}
        self._strings: List[str] = []

    def __len__(self) -> int:
        return len(self._strings)

    def add(self, text: str) -> int:
        existing = self._ids.get(text)
        if existing is not None:
            return existing
        self._strings.append(text)
        self._ids[text] = len(self._strings)
        return len(self._strings)

    def get(self, string_id: int) -> str:
        """
        Raises:
            PayloadDecodeError: For an id outside 1..len(self).
        """
        if not 1 <= string_id <= len(self._strings):
            raise PayloadDecodeError(f"Unknown dictionary id {string_id}")
        return self._strings[string_id - 1]

    @property
    def strings(self) -> List[str]:
        return list(self._strings)

    @property
    def total_bytes(self) -> int:
        return sum(len(s.encode("utf-8")) for s in self._strings)


def encode_dedup(users: List[UserRecord]) -> Tuple[bytes, StringDictionary]:
    """Dictionary section followed by id-based records."""
    dictionary = StringDictionary()
    records = [U32.pack(len(users))]
    for user in users:
        records.append(DEDUP_RECORD.pack(
            user.id,
            dictionary.add(user.name),
            dictionary.add(user.email),
            dictionary.add(user.department),
            user.salary,
            int(user.active),
        ))

    section = [U32.pack(len(dictionary))]
    section.extend(_pack_string(s) for s in dictionary.strings)
    return b"".join(section + records), dictionary


def decode_dedup(data: bytes) -> List[UserRecord]:
    reader = _Reader(data)

    dictionary = StringDictionary()
    (entries,) = reader.unpack(U32)
    for position in range(1, entries + 1):
        text = reader.string()
        if dictionary.add(text) != position:
            raise PayloadDecodeError(f"Duplicate dictionary string at id {position}: {text!r}")

    (count,) = reader.unpack(U32)
    users = []
    for _ in range(count):
        user_id, name_id, email_id, dept_id, salary, active = reader.unpack(DEDUP_RECORD)
        users.append(UserRecord(
            user_id,
            dictionary.get(name_id),
            dictionary.get(email_id),
            dictionary.get(dept_id),
            salary,
            bool(active),
        ))
    reader.expect_end()
    return users
