"""
=============================================================================
HTTP-LIKE MESSAGES
=============================================================================

The header demo sends complete HTTP/1.1 text messages over a raw socket so
that every header byte is visible on the wire. This module is the value
type for those messages plus a small parser for the text form.

=============================================================================
MESSAGE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /api/users HTTP/1.1\r\n           ◄── start line               │
    │  Host: localhost:8890\r\n              ┐                            │
    │  Accept: application/json\r\n          ├── header lines             │
    │  Connection: keep-alive\r\n            ┘   (header_size counts      │
    │  \r\n                                  ◄── blank line  these only)  │
    │  {"users": ...}                        ◄── body (may be empty)      │
    └─────────────────────────────────────────────────────────────────────┘

Unlike a general-purpose server, headers keep their original case and
order. The demo is about byte counts, and "Content-Type" is two bytes
more expensive than nothing at all, so we print messages exactly as they
were built.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import re

from ..exceptions import MessageParseError
from .status_codes import HTTPStatus


CRLF = "\r\n"

DEFAULT_MAX_MESSAGE_SIZE = 1024 * 1024


def _header_lines(headers: Dict[str, str]) -> str:
    return "".join(f"{name}: {value}{CRLF}" for name, value in headers.items())


class _MessageMixin:
    """Serialization shared by requests and responses."""

    headers: Dict[str, str]
    body: str

    @property
    def start_line(self) -> str:
        raise NotImplementedError

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    def header_list(self) -> List[Tuple[str, str]]:
        """Headers as (name, value) pairs in order."""
        return list(self.headers.items())

    def head_text(self) -> str:
        """Start line, header lines and the blank separator line."""
        return f"{self.start_line}{CRLF}{_header_lines(self.headers)}{CRLF}"

    def to_text(self) -> str:
        return self.head_text() + self.body

    def to_bytes(self) -> bytes:
        return self.to_text().encode("utf-8")

    @property
    def header_size(self) -> int:
        """Bytes of the header lines alone (no start line, no blank line)."""
        return len(_header_lines(self.headers).encode("utf-8"))

    @property
    def body_size(self) -> int:
        return len(self.body.encode("utf-8"))

    @property
    def total_size(self) -> int:
        return len(self.to_bytes())


@dataclass
class HTTPRequest(_MessageMixin):
    """
    An HTTP-like request.

    Attributes:
        method: GET, POST, ...
        path: Request target as sent ("/api/users").
        version: "HTTP/1.1" for text messages, "HTTP/2" inside compressed frames.
        headers: Ordered name → value, original case.
        body: Decoded body text.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def start_line(self) -> str:
        return f"{self.method} {self.path} {self.version}"


@dataclass
class HTTPResponse(_MessageMixin):
    """
    An HTTP-like response.

    The status line is rendered the way the version expects it:

        HTTP/1.1 200 OK       (text messages carry the reason phrase)
        HTTP/2 200            (HTTP/2 dropped reason phrases)
    """

    status: HTTPStatus = HTTPStatus.OK
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def start_line(self) -> str:
        if self.version.startswith("HTTP/2"):
            return f"{self.version} {int(self.status)}"
        return f"{self.version} {int(self.status)} {self.status.phrase}"


class MessageParser:
    """
    Parses the text form produced by to_bytes() back into messages.

    ==========================================================================
    PARSING STEPS
    ==========================================================================

        1. Size check              too large        → 413
        2. Find \\r\\n\\r\\n          missing          → 400
        3. Decode head as UTF-8    invalid bytes    → 400
        4. Start line              malformed        → 400
                                   unknown version  → 505
        5. Header lines            malformed        → 400
        6. Body                    shorter than Content-Length → 400

    The whole connection was read to EOF before parsing, so the body is
    simply everything after the blank line (trimmed to Content-Length
    when one is present).
    ==========================================================================
    """

    SUPPORTED_VERSIONS = ("HTTP/1.0", "HTTP/1.1")

    VALID_METHODS = {
        "GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) (\S+) (HTTP/\d(?:\.\d)?)$")
    STATUS_LINE_PATTERN = re.compile(r"^(HTTP/\d(?:\.\d)?) (\d{3})(?: (.*))?$")
    HEADER_PATTERN = re.compile(r"^([^:\s]+):[ \t]*(.*?)[ \t]*$")

    def __init__(self, max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE):
        self.max_message_size = max_message_size

    def parse_request(self, data: bytes) -> HTTPRequest:
        """
        Parse request bytes.

        Raises:
            MessageParseError: If the request is malformed.
        """
        start_line, headers, body = self._split(data)

        match = self.REQUEST_LINE_PATTERN.match(start_line)
        if not match:
            raise MessageParseError(f"Invalid request line: {start_line!r}")

        method, path, version = match.groups()
        if method not in self.VALID_METHODS:
            raise MessageParseError(f"Invalid method: {method}")
        self._check_version(version)

        return HTTPRequest(method=method, path=path, version=version, headers=headers, body=body)

    def parse_response(self, data: bytes) -> HTTPResponse:
        """
        Parse response bytes.

        Raises:
            MessageParseError: If the response is malformed or uses a
                status code the demo does not know.
        """
        start_line, headers, body = self._split(data)

        match = self.STATUS_LINE_PATTERN.match(start_line)
        if not match:
            raise MessageParseError(f"Invalid status line: {start_line!r}")

        version, code, _phrase = match.groups()
        self._check_version(version)

        try:
            status = HTTPStatus(int(code))
        except ValueError:
            raise MessageParseError(f"Unknown status code: {code}")

        return HTTPResponse(status=status, version=version, headers=headers, body=body)

    def _check_version(self, version: str) -> None:
        if version not in self.SUPPORTED_VERSIONS:
            raise MessageParseError(
                f"Unsupported HTTP version: {version}",
                status_code=HTTPStatus.HTTP_VERSION_NOT_SUPPORTED,
            )

    def _split(self, data: bytes) -> Tuple[str, Dict[str, str], str]:
        """Return (start line, headers, body) for a text message."""
        if len(data) > self.max_message_size:
            raise MessageParseError(
                f"Message too large: {len(data)} bytes",
                status_code=HTTPStatus.PAYLOAD_TOO_LARGE,
            )

        if not data:
            raise MessageParseError("Empty message")

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise MessageParseError("Incomplete message: no header terminator")

        try:
            head = data[:header_end].decode("utf-8")
        except UnicodeDecodeError as e:
            raise MessageParseError(f"Failed to decode message head: {e}")

        lines = head.split(CRLF)
        headers = self._parse_headers(lines[1:])

        raw_body = data[header_end + 4:]
        content_length = self._content_length(headers)
        if content_length is not None:
            if len(raw_body) < content_length:
                raise MessageParseError(
                    f"Incomplete body: expected {content_length} bytes, got {len(raw_body)}"
                )
            raw_body = raw_body[:content_length]

        try:
            body = raw_body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MessageParseError(f"Failed to decode message body: {e}")

        return lines[0], headers, body

    def _parse_headers(self, lines: List[str]) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        for line in lines:
            match = self.HEADER_PATTERN.match(line)
            if not match:
                raise MessageParseError(f"Invalid header line: {line!r}")
            name, value = match.groups()
            headers[name] = value
        return headers

    @staticmethod
    def _content_length(headers: Dict[str, str]) -> Optional[int]:
        for name, value in headers.items():
            if name.lower() == "content-length":
                try:
                    length = int(value)
                except ValueError:
                    raise MessageParseError(f"Invalid Content-Length: {value!r}")
                if length < 0:
                    raise MessageParseError(f"Invalid Content-Length: {value!r}")
                return length
        return None


_default_parser = MessageParser()


def parse_request(data: bytes) -> HTTPRequest:
    """Parse request bytes with the default size limit."""
    return _default_parser.parse_request(data)


def parse_response(data: bytes) -> HTTPResponse:
    """Parse response bytes with the default size limit."""
    return _default_parser.parse_response(data)
