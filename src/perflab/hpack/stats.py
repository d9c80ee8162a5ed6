"""Size accounting for one compressed header block."""

from dataclasses import dataclass


@dataclass
class CompressionStats:
    """
    How much one header list shrank.

    original_size is what the same headers cost as HTTP/1.1 text lines
    ("Name: value\\r\\n" each), which is the baseline the lecture compares
    against.
    """

    original_size: int = 0
    compressed_size: int = 0
    indexed: int = 0
    literal_indexed_name: int = 0
    literal_new_name: int = 0

    @property
    def header_count(self) -> int:
        return self.indexed + self.literal_indexed_name + self.literal_new_name

    @property
    def ratio(self) -> float:
        """compressed / original (0.2 means the block is 20% of the text)."""
        if self.original_size == 0:
            return 0.0
        return self.compressed_size / self.original_size

    @property
    def savings_percent(self) -> float:
        if self.original_size == 0:
            return 0.0
        return 100.0 * (1 - self.ratio)

    def __str__(self) -> str:
        return (
            f"{self.original_size} B -> {self.compressed_size} B "
            f"({self.savings_percent:.1f}% saved; "
            f"{self.indexed} indexed, "
            f"{self.literal_indexed_name + self.literal_new_name} literal)"
        )
