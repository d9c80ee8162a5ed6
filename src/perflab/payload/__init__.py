"""
=============================================================================
PAYLOAD OPTIMIZATION DEMO
=============================================================================

    records.py    UserRecord, JSON / binary / deduplicated encodings
    rle.py        run-length compression with an escaped marker byte
    framing.py    12-byte "TCPC" header in front of every payload
    encoding.py   PayloadMode and the encode/decode pipeline
    server.py     decode and acknowledge
    client.py     encode and send in 4 KB chunks

=============================================================================
"""

from .encoding import PayloadMode, PayloadPlan, encode_payload, decode_payload, KEY_LEARNINGS
from .framing import DataHeader, package, unpackage
from .records import UserRecord, StringDictionary, generate_users
from .server import PayloadDemoServer
from .client import PayloadDemoClient, PayloadResult

__all__ = [
    "PayloadMode",
    "PayloadPlan",
    "encode_payload",
    "decode_payload",
    "KEY_LEARNINGS",
    "DataHeader",
    "package",
    "unpackage",
    "UserRecord",
    "StringDictionary",
    "generate_users",
    "PayloadDemoServer",
    "PayloadDemoClient",
    "PayloadResult",
]
