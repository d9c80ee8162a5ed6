"""Payload demo client: encode, send in chunks, wait for the ack."""

import logging
import math
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..config import DemoConfig
from ..core import Connection
from ..exceptions import DemoConnectionError
from ..report import format_bytes, savings_percent
from ..state import DemoState
from .encoding import PayloadMode, encode_payload
from .records import UserRecord, generate_users
from .server import ACK


logger = logging.getLogger(__name__)


@dataclass
class PayloadResult:
    mode: PayloadMode
    json_size: int
    bytes_sent: int
    bytes_acked: int
    chunks: int
    dictionary_entries: int
    elapsed: float

    @property
    def reduction_percent(self) -> float:
        return savings_percent(self.json_size, self.bytes_sent)

    @property
    def accepted(self) -> bool:
        return self.bytes_acked == self.bytes_sent

    def summary(self) -> str:
        return (
            f"[{self.mode.name}] sent {format_bytes(self.bytes_sent)} in {self.chunks} chunks "
            f"(JSON {format_bytes(self.json_size)}, {self.reduction_percent:.2f}% smaller), "
            f"acked {self.bytes_acked} bytes"
        )


class PayloadDemoClient:
    def __init__(self, config: DemoConfig, state: Optional[DemoState] = None):
        self.config = config
        self.state = state or DemoState(PayloadMode(config.payload_mode))
        self.users: List[UserRecord] = generate_users(config.user_count)
        self.payloads_sent = 0

    def send(
        self,
        mode: Optional[PayloadMode] = None,
        address: Optional[Tuple[str, int]] = None,
    ) -> PayloadResult:
        """
        Send the user set once.

        Raises:
            DemoConnectionError: If the server is unreachable or never acks.
        """
        mode = PayloadMode(self.state.mode if mode is None else mode)
        host, port = address or (self.config.host, self.config.port)

        plan = encode_payload(self.users, mode)
        logger.info(
            f"Using {mode.label}: {format_bytes(plan.wire_size)} "
            f"(JSON {format_bytes(plan.json_size)})"
        )

        start_time = time.perf_counter()
        try:
            conn = Connection.connect(host, port, timeout=self.config.timeout,
                                      buffer_size=self.config.buffer_size)
        except OSError as e:
            raise DemoConnectionError(f"Cannot connect to {host}:{port}: {e}", (host, port))

        with conn:
            if not conn.send_chunked(plan.wire, self.config.chunk_size):
                raise DemoConnectionError(f"Server {host}:{port} closed mid-payload", (host, port))
            conn.finish_sending()
            try:
                (acked,) = ACK.unpack(conn.read_exact(ACK.size))
            except (ConnectionError, TimeoutError, OSError) as e:
                raise DemoConnectionError(f"No ack from {host}:{port}: {e}", (host, port))

        self.payloads_sent += 1
        chunks = math.ceil(plan.wire_size / self.config.chunk_size)
        result = PayloadResult(
            mode=mode,
            json_size=plan.json_size,
            bytes_sent=plan.wire_size,
            bytes_acked=acked,
            chunks=chunks,
            dictionary_entries=plan.dictionary_entries,
            elapsed=time.perf_counter() - start_time,
        )
        logger.info(result.summary())
        return result
