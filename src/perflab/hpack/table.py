"""
=============================================================================
INDEX TABLE
=============================================================================

One address space for the static and the dynamic table:

    index   1 ........ 61 │ 62 ........ 62+n-1
            ──────────────┼─────────────────────
            static (RFC)  │ dynamic (this connection's history)

The dynamic table here is append-only: the first literal gets 62, the next
63, and so on. Real HPACK evicts the oldest entries once a byte budget is
exceeded and renumbers from the newest; that part is left out, so an
index, once assigned, never changes.

Lookup order when encoding:

    1. exact (name, value) in static table
    2. exact (name, value) in dynamic table
    3. name only in static table
    4. name only in dynamic table

Within each step the lowest index wins. Static entries with an empty value
(accept, cookie, user-agent, ...) are name-only: a value-less header still
matches them by name and goes out as a literal.

=============================================================================
"""

from typing import Dict, List, Optional, Tuple

from ..exceptions import HeaderDecodingError
from .static_table import STATIC_TABLE, STATIC_TABLE_SIZE, DYNAMIC_TABLE_START


def _first_indices():
    exact: Dict[Tuple[str, str], int] = {}
    names: Dict[str, int] = {}
    for index, (name, value) in enumerate(STATIC_TABLE, start=1):
        if value:
            exact.setdefault((name, value), index)
        names.setdefault(name, index)
    return exact, names


_STATIC_EXACT, _STATIC_NAMES = _first_indices()


class HeaderTable:
    """Static table plus an append-only dynamic table."""

    def __init__(self):
        self._dynamic: List[Tuple[str, str]] = []
        self._dynamic_exact: Dict[Tuple[str, str], int] = {}
        self._dynamic_names: Dict[str, int] = {}

    def __len__(self) -> int:
        """Number of dynamic entries."""
        return len(self._dynamic)

    @property
    def dynamic_entries(self) -> List[Tuple[str, str]]:
        return list(self._dynamic)

    @property
    def next_index(self) -> int:
        """Index the next added entry will receive."""
        return DYNAMIC_TABLE_START + len(self._dynamic)

    def add(self, name: str, value: str) -> int:
        """Append an entry and return its index."""
        index = self.next_index
        self._dynamic.append((name, value))
        self._dynamic_exact.setdefault((name, value), index)
        self._dynamic_names.setdefault(name, index)
        return index

    def get(self, index: int) -> Tuple[str, str]:
        """
        Resolve an index to (name, value).

        Raises:
            HeaderDecodingError: For index 0 or an index past the table end.
        """
        if index <= 0:
            raise HeaderDecodingError(f"Invalid header table index {index}")
        if index <= STATIC_TABLE_SIZE:
            return STATIC_TABLE[index - 1]

        position = index - DYNAMIC_TABLE_START
        if position >= len(self._dynamic):
            raise HeaderDecodingError(
                f"Header table index {index} out of range "
                f"(dynamic table has {len(self._dynamic)} entries)"
            )
        return self._dynamic[position]

    def find(self, name: str, value: str) -> Tuple[Optional[int], bool]:
        """
        Find the best index for a header.

        Returns:
            (index, exact). index is None when nothing matches; exact is
            True when both name and value matched.
        """
        key = (name, value)

        index = _STATIC_EXACT.get(key)
        if index is not None:
            return index, True

        index = self._dynamic_exact.get(key)
        if index is not None:
            return index, True

        index = _STATIC_NAMES.get(name)
        if index is not None:
            return index, False

        index = self._dynamic_names.get(name)
        if index is not None:
            return index, False

        return None, False
