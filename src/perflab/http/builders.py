"""
=============================================================================
DEMO MESSAGES
=============================================================================

The fixed requests and responses the header demo sends. They are the same
on every run so packet captures from different modes can be compared side
by side.

    MODE         REQUEST                      RESPONSE
    ─────────    ─────────────────────────    ──────────────────────────
    FULL         full_request()               full_response()
    MINIMAL      minimal_request()            minimal_response()
    COMPRESSED   compressed_request()         compressed_response()
    CACHED       conditional_request()        cached_response()  (304)

Content-Length is always computed from the body actually sent.

=============================================================================
"""

import json
from typing import List, Tuple

from .message import HTTPRequest, HTTPResponse
from .status_codes import HTTPStatus


DEMO_PATH = "/api/users"
DEMO_HOST = "localhost:8890"

DEMO_ETAG = '"33a64df551425fcc55e4d42a148795d9f25f89d4"'
DEMO_DATE = "Mon, 27 Jan 2025 12:00:00 GMT"
DEMO_LAST_MODIFIED = "Mon, 27 Jan 2025 11:00:00 GMT"
DEMO_REQUEST_ID = "550e8400-e29b-41d4-a716-446655440000"

COMPRESSED_VERSION = "HTTP/2"

# Compact separators: the body is part of what gets measured
DEMO_BODY = json.dumps(
    {
        "users": [{"id": 1, "name": "John"}, {"id": 2, "name": "Jane"}],
        "total": 2,
        "page": 1,
    },
    separators=(",", ":"),
)


def content_length(body: str) -> str:
    return str(len(body.encode("utf-8")))


# ─────────────────────────────────────────────────────────────────────────
# REQUESTS
# ─────────────────────────────────────────────────────────────────────────

def full_request() -> HTTPRequest:
    """What a desktop browser sends for one XHR call."""
    return HTTPRequest(
        method="GET",
        path=DEMO_PATH,
        headers={
            "Host": DEMO_HOST,
            "User-Agent": (
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
            ),
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": "en-US,en;q=0.9,pt-BR;q=0.8,pt;q=0.7",
            "Accept-Encoding": "gzip, deflate, br",
            "Connection": "keep-alive",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
            "Sec-Fetch-Dest": "empty",
            "Sec-Fetch-Mode": "cors",
            "Sec-Fetch-Site": "same-origin",
            "Referer": f"http://{DEMO_HOST}/dashboard",
            "Cookie": "session_id=abc123def456; user_pref=dark_mode; analytics_id=xyz789",
            "X-Requested-With": "XMLHttpRequest",
            "X-Client-Version": "1.2.3",
            "X-Request-ID": DEMO_REQUEST_ID,
        },
    )


def minimal_request() -> HTTPRequest:
    return HTTPRequest(
        method="GET",
        path=DEMO_PATH,
        headers={
            "Host": DEMO_HOST,
            "Accept": "application/json",
            "Connection": "keep-alive",
        },
    )


def conditional_request() -> HTTPRequest:
    """Revalidate a cached copy instead of downloading it again."""
    return HTTPRequest(
        method="GET",
        path=DEMO_PATH,
        headers={
            "Host": DEMO_HOST,
            "If-None-Match": DEMO_ETAG,
            "If-Modified-Since": DEMO_LAST_MODIFIED,
        },
    )


def compressed_request_headers() -> List[Tuple[str, str]]:
    """Header list fed to the compressor (names already lower-case)."""
    return [
        ("host", DEMO_HOST),
        ("accept", "application/json"),
    ]


def compressed_request() -> HTTPRequest:
    return HTTPRequest(
        method="GET",
        path=DEMO_PATH,
        version=COMPRESSED_VERSION,
        headers=dict(compressed_request_headers()),
    )


# ─────────────────────────────────────────────────────────────────────────
# RESPONSES
# ─────────────────────────────────────────────────────────────────────────

def full_response(body: str = DEMO_BODY) -> HTTPResponse:
    """A typical production response: security, caching and tracing headers."""
    return HTTPResponse(
        status=HTTPStatus.OK,
        headers={
            "Date": DEMO_DATE,
            "Server": "Apache/2.4.41 (Ubuntu)",
            "Content-Type": "application/json; charset=utf-8",
            "Content-Length": content_length(body),
            "Connection": "keep-alive",
            "Cache-Control": "max-age=3600, public",
            "ETag": DEMO_ETAG,
            "Last-Modified": DEMO_LAST_MODIFIED,
            "Vary": "Accept-Encoding",
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "X-XSS-Protection": "1; mode=block",
            "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
            "Access-Control-Allow-Origin": "*",
            "X-Response-Time": "45ms",
            "X-Request-ID": DEMO_REQUEST_ID,
        },
        body=body,
    )


def minimal_response(body: str = DEMO_BODY) -> HTTPResponse:
    return HTTPResponse(
        status=HTTPStatus.OK,
        headers={
            "Content-Type": "application/json",
            "Content-Length": content_length(body),
        },
        body=body,
    )


def cached_response() -> HTTPResponse:
    """304: the validators matched, so no body is sent."""
    return HTTPResponse(
        status=HTTPStatus.NOT_MODIFIED,
        headers={
            "Date": DEMO_DATE,
            "ETag": DEMO_ETAG,
            "Cache-Control": "max-age=3600, public",
        },
    )


def compressed_response_headers(body: str = DEMO_BODY) -> List[Tuple[str, str]]:
    return [
        ("content-type", "application/json"),
        ("content-length", content_length(body)),
    ]


def compressed_response(body: str = DEMO_BODY) -> HTTPResponse:
    return HTTPResponse(
        status=HTTPStatus.OK,
        version=COMPRESSED_VERSION,
        headers=dict(compressed_response_headers(body)),
        body=body,
    )


def error_response(status: HTTPStatus, message: str) -> HTTPResponse:
    """Plain-text error reply for requests the server could not handle."""
    body = f"{status.phrase}: {message}"
    return HTTPResponse(
        status=status,
        headers={
            "Content-Type": "text/plain; charset=utf-8",
            "Content-Length": content_length(body),
        },
        body=body,
    )
