"""
=============================================================================
HTTP-LIKE MESSAGES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ message.py       HTTPRequest / HTTPResponse, text parser            │
    │ builders.py      The fixed demo messages for every header mode      │
    │ status_codes.py  HTTPStatus enum with reason phrases                │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .message import (
    HTTPRequest,
    HTTPResponse,
    MessageParser,
    parse_request,
    parse_response,
)
from .status_codes import HTTPStatus

__all__ = [
    "HTTPRequest",
    "HTTPResponse",
    "MessageParser",
    "parse_request",
    "parse_response",
    "HTTPStatus",
]
