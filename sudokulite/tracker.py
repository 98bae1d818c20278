from __future__ import annotations

from typing import Iterator, Optional

from .errors import OutOfRange


class BitsetTracker:
    """
    Fixed-capacity set of integers 1..capacity stored as an int bitmask
    (bit v set => v is a member). `count` is kept in step with every
    mutation instead of being recomputed.
    """

    __slots__ = ("capacity", "count", "_mask")

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"Tracker capacity must be positive, got {capacity}.")
        self.capacity = capacity
        self.count = 0
        self._mask = 0

    def _bit(self, v: int) -> int:
        if not 1 <= v <= self.capacity:
            raise OutOfRange(f"{v} is outside 1..{self.capacity}.")
        return 1 << v

    def flip(self, v: int) -> bool:
        """Toggle v and return whether it was a member before the flip."""
        bit = self._bit(v)
        was_set = bool(self._mask & bit)
        self._mask ^= bit
        self.count += -1 if was_set else 1
        return was_set

    def set(self, v: int) -> None:
        if not self.check(v):
            self.flip(v)

    def clear(self, v: int) -> None:
        if self.check(v):
            self.flip(v)

    def check(self, v: int) -> bool:
        return bool(self._mask & self._bit(v))

    def copy_from(self, src: "BitsetTracker") -> None:
        # clear-then-flip keeps count bookkeeping on the normal mutation path
        if src.capacity != self.capacity:
            raise ValueError(
                f"Cannot copy a tracker of capacity {src.capacity} into one of {self.capacity}."
            )
        for v in range(1, self.capacity + 1):
            self.clear(v)
            if src.check(v):
                self.flip(v)

    def first(self) -> Optional[int]:
        """Lowest member, or None when empty."""
        if not self._mask:
            return None
        lsb = self._mask & -self._mask
        return lsb.bit_length() - 1

    def missing(self) -> Iterator[int]:
        for v in range(1, self.capacity + 1):
            if not self._mask & (1 << v):
                yield v

    def __iter__(self) -> Iterator[int]:
        cm = self._mask
        while cm:
            lsb = cm & -cm
            cm ^= lsb
            yield lsb.bit_length() - 1

    def __contains__(self, v: object) -> bool:
        return isinstance(v, int) and 1 <= v <= self.capacity and bool(self._mask & (1 << v))

    def __len__(self) -> int:
        return self.count

    def __repr__(self) -> str:
        return f"BitsetTracker({self.capacity}, {sorted(self)})"
