"""Bounded stock of one product held by one stream."""

from dataclasses import dataclass

# Buffers hold this many cycles' worth of a part by default
DEFAULT_BUFFER_MULTIPLIER = 8


@dataclass
class Buffer:
    """Stored quantity, never above `max`"""

    current: int = 0
    max: int = 0

    def free(self) -> int:
        """Headroom left before the buffer is full."""
        return max(self.max - self.current, 0)

    def fill_from(self, source: "Buffer") -> int:
        """Move as much stock from `source` as fits into this buffer.

        Precondition:
            source is a different Buffer

        Postcondition:
            moved = min(source.current, self.free())
            source.current decreased by moved, self.current increased by moved
            nothing is created or destroyed

        Args:
            source: upstream buffer to draw from

        Returns:
            number of units moved
        """
        moved = min(source.current, self.free())
        source.current -= moved
        self.current += moved
        return moved

    def resize(self, capacity: int) -> int:
        """Set a new capacity, discarding any stock above it.

        Returns:
            number of units discarded
        """
        spilled = max(self.current - capacity, 0)
        self.max = capacity
        self.current -= spilled
        return spilled

    def __str__(self) -> str:
        return f"{self.current}/{self.max}"
