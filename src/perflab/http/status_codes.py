"""
=============================================================================
HTTP STATUS CODES
=============================================================================

Only the codes the demo servers actually send:

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ OK                  full / minimal / compressed response  │
    │  304   │ Not Modified        conditional request hit the ETag      │
    │  400   │ Bad Request         request text could not be parsed      │
    │  413   │ Payload Too Large   request exceeded max_message_size     │
    │  500   │ Internal Error      handler failed unexpectedly           │
    │  505   │ Version Not Supp.   unknown version token                 │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

        >>> HTTPStatus.NOT_MODIFIED == 304
        True
        >>> HTTPStatus.NOT_MODIFIED.phrase
        'Not Modified'
    """

    OK = 200
    NOT_MODIFIED = 304              # Cached version is still valid
    BAD_REQUEST = 400
    NOT_FOUND = 404
    PAYLOAD_TOO_LARGE = 413
    INTERNAL_SERVER_ERROR = 500
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line:

            HTTP/1.1 304 Not Modified
                     ─── ────────────
                      │   └── phrase
                      └────── code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        return self >= 400

    @property
    def allows_body(self) -> bool:
        """304 responses never carry a body."""
        return self != HTTPStatus.NOT_MODIFIED


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
