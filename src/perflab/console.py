"""
=============================================================================
INTERACTIVE CONSOLE DRIVER
=============================================================================

The classroom loop shared by the network demos:

    >>> Press ENTER to send request #1 (or type 'quit' to exit, 'mode' to cycle):
        ""  / "send"     one round trip
        "mode"           advance to the next mode (server sees it immediately)
        "quit" / "exit"  leave the loop

Failures of a single round trip are printed and the loop continues, so a
server restart in another terminal doesn't end the lecture.

=============================================================================
"""

import logging
import sys
from typing import Callable, Optional, TextIO

from .exceptions import PerflabError
from .state import DemoState


logger = logging.getLogger(__name__)

BANNER_WIDTH = 85


def print_banner(title: str, lines=(), out: Optional[TextIO] = None) -> None:
    out = out or sys.stdout
    rule = "=" * BANNER_WIDTH
    print(rule, file=out)
    print(title.center(BANNER_WIDTH).rstrip(), file=out)
    print(rule, file=out)
    for line in lines:
        print(line, file=out)
    if lines:
        print(rule, file=out)


class InteractiveSession:
    """
    Read commands until quit/EOF.

    Args:
        state: Shared mode holder; "mode" cycles it.
        send: Performs one round trip and prints its own result.
        noun: "request" or "package", used in the prompt.
        input_func: Replaceable for tests.
    """

    QUIT_COMMANDS = ("quit", "exit")
    SEND_COMMANDS = ("", "send")

    def __init__(
        self,
        state: DemoState,
        send: Callable[[], None],
        noun: str = "request",
        input_func: Callable[[str], str] = input,
        out: Optional[TextIO] = None,
    ):
        self.state = state
        self.send = send
        self.noun = noun
        self.input_func = input_func
        self.out = out or sys.stdout
        self.sent = 0
        self.failed = 0

    def _print(self, text: str = "") -> None:
        print(text, file=self.out)

    def run(self) -> int:
        """Run the loop; returns the number of successful round trips."""
        while True:
            prompt = (
                f"\n>>> Press ENTER to send {self.noun} #{self.sent + 1} "
                f"(or type 'quit' to exit, 'mode' to cycle): "
            )
            try:
                command = self.input_func(prompt).strip().lower()
            except (EOFError, KeyboardInterrupt):
                self._print()
                break

            if command in self.QUIT_COMMANDS:
                self._print("Exiting demonstration...")
                break

            if command == "mode":
                mode = self.state.cycle()
                self._print(f"Mode changed to: {int(mode)} ({mode.name})")
                continue

            if command in self.SEND_COMMANDS:
                self.send_once()
                continue

            self._print("Invalid command. Use ENTER to send, 'quit' to exit, or 'mode' to cycle.")

        return self.sent

    def send_once(self) -> bool:
        number = self.sent + 1
        self._print(f"\n--- SENDING {self.noun.upper()} #{number} ---")
        try:
            self.send()
        except PerflabError as e:
            self.failed += 1
            logger.error(f"{self.noun.capitalize()} #{number} failed: {e}")
            self._print(f"Client error: {e}")
            return False

        self.sent += 1
        self._print(f"--- {self.noun.upper()} #{number} COMPLETE ---")
        return True
