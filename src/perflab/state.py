"""
Mode shared between the interactive console and a demo server running on
a background thread. Typing "mode" in the console changes what the server
answers with on the very next request.
"""

import threading
from enum import IntEnum


class DemoState:
    """Thread-safe holder for the current demo mode."""

    def __init__(self, mode: IntEnum):
        self._mode = mode
        self._lock = threading.Lock()

    @property
    def mode(self) -> IntEnum:
        with self._lock:
            return self._mode

    @mode.setter
    def mode(self, value: IntEnum) -> None:
        with self._lock:
            self._mode = value

    def cycle(self) -> IntEnum:
        """Advance to the next mode (wrapping) and return it."""
        with self._lock:
            self._mode = self._mode.next()
            return self._mode
