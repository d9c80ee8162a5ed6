"""
=============================================================================
ERROR HIERARCHY
=============================================================================

Every demo raises exceptions from this small tree so callers (the CLI,
the servers' accept loops, the tests) can catch exactly what they expect:

    PerflabError
    ├── MessageParseError       malformed HTTP-like text (carries status_code)
    ├── HeaderEncodingError     header block could not be produced
    ├── HeaderDecodingError     header block is malformed / out of sync
    ├── FrameError              payload frame header is wrong
    ├── PayloadDecodeError      payload body does not match its mode
    ├── DNSMessageError         DNS packet is truncated or malformed
    ├── ResolutionError         a name could not be resolved
    └── DemoConnectionError     client could not reach the demo server

=============================================================================
"""


class PerflabError(Exception):
    """Base class for all errors raised by perflab."""


class MessageParseError(PerflabError):
    """
    Raised when an HTTP-like message cannot be parsed.

    Carries the HTTP status code the server should answer with:

        400 Bad Request                - Malformed start line / headers
        413 Payload Too Large          - Message exceeds size limit
        505 HTTP Version Not Supported - Unknown version token
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class HeaderEncodingError(PerflabError):
    """Raised when a header list cannot be encoded."""


class HeaderDecodingError(PerflabError):
    """
    Raised when a compressed header block is malformed.

    Typical causes: truncated integer or string literal, index 0, an index
    past the end of the dynamic table, or a representation this codec does
    not implement (dynamic table size update, never-indexed literals).
    """


class FrameError(PerflabError):
    """Raised when a payload frame is too short or has the wrong magic."""


class PayloadDecodeError(PerflabError):
    """Raised when a payload body cannot be decoded for its mode."""


class DemoConnectionError(PerflabError):
    """Raised when a demo client cannot complete its round trip."""

    def __init__(self, message: str, address: tuple = ("", 0)):
        super().__init__(message)
        self.address = address


class DNSMessageError(PerflabError):
    """Raised when a DNS query or response cannot be encoded or parsed."""


class ResolutionError(PerflabError):
    """
    Raised when a lookup fails: NXDOMAIN, no A record, timeout, or a
    reply that does not parse.
    """

    def __init__(self, message: str, domain: str = "", server: str = "system"):
        super().__init__(message)
        self.domain = domain
        self.server = server
