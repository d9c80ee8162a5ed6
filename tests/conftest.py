"""
pytest configuration and fixtures.
"""

from typing import Generator
import socket
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from perflab.config import DemoConfig
from perflab.headers import HeaderDemoServer, HeaderMode
from perflab.payload import PayloadDemoServer
from perflab.qos import QoSServer
from perflab.state import DemoState


@pytest.fixture
def sample_request_bytes() -> bytes:
    """A small, well-formed HTTP/1.1 request."""
    return (
        b"GET /api/users HTTP/1.1\r\n"
        b"Host: localhost:8890\r\n"
        b"Accept: application/json\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_response_bytes() -> bytes:
    """A 200 response with a JSON body and matching Content-Length."""
    body = b'{"ok":true}'
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: application/json\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


@pytest.fixture
def free_port() -> int:
    """A port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def config() -> DemoConfig:
    """Loopback config on an ephemeral port."""
    return DemoConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def header_state() -> DemoState:
    return DemoState(HeaderMode.FULL)


@pytest.fixture
def header_server(config: DemoConfig, header_state: DemoState) -> Generator[HeaderDemoServer, None, None]:
    """Header demo server listening in a background thread."""
    server = HeaderDemoServer(config, header_state)
    server.serve_in_background()
    server.wait_until_ready()

    yield server

    server.shutdown()


@pytest.fixture
def payload_server(config: DemoConfig) -> Generator[PayloadDemoServer, None, None]:
    """Payload demo server listening in a background thread."""
    server = PayloadDemoServer(config)
    server.serve_in_background()
    server.wait_until_ready()

    yield server

    server.shutdown()


@pytest.fixture
def qos_server(config: DemoConfig) -> Generator[QoSServer, None, None]:
    """QoS ACK server listening in a background thread."""
    server = QoSServer(config)
    server.serve_in_background()
    server.wait_until_ready()

    yield server

    server.shutdown()
