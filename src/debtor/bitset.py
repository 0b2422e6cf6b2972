"""A subset of the indices 0..63, stored in a single integer.

The integer value doubles as a dense key: every subset of ``full(n)`` has a value in
``range(2 ** n)``, and a proper subset always has a smaller value than its superset.
Memo tables rely on this to be filled bottom-up in plain numeric order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

WIDTH = 64
_MASK = (1 << WIDTH) - 1


class BitSetIndexError(IndexError):
    pass


def _check_index(idx: int) -> None:
    if not 0 <= idx < WIDTH:
        raise BitSetIndexError(f"index {idx} is outside 0..{WIDTH - 1}")


def iter_submasks(mask: int) -> Iterator[int]:
    """Yield every sub-mask of ``mask`` in increasing order, from 0 up to ``mask``."""
    current = 0
    while True:
        yield current
        if current == mask:
            return
        current = (current - mask) & mask


@dataclass(frozen=True, slots=True)
class BitSet:
    value: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value <= _MASK:
            raise BitSetIndexError(f"value {self.value:#x} does not fit in {WIDTH} bits")

    @classmethod
    def empty(cls) -> BitSet:
        return cls(0)

    @classmethod
    def full(cls, n: int) -> BitSet:
        """Bits ``0..n-1`` set."""
        if not 0 <= n <= WIDTH:
            raise BitSetIndexError(f"cannot build a full set of {n} elements")
        return cls((1 << n) - 1)

    @classmethod
    def singleton(cls, x: int) -> BitSet:
        _check_index(x)
        return cls(1 << x)

    @classmethod
    def enumerate_all(cls, n: int) -> Iterator[BitSet]:
        """Every subset of ``full(n)``, in increasing numeric order."""
        limit = cls.full(n).value
        return (cls(value) for value in range(limit + 1))

    def insert(self, idx: int) -> BitSet:
        _check_index(idx)
        return BitSet(self.value | (1 << idx))

    def remove(self, idx: int) -> BitSet:
        _check_index(idx)
        return BitSet(self.value & ~(1 << idx))

    def toggle(self, idx: int) -> BitSet:
        _check_index(idx)
        return BitSet(self.value ^ (1 << idx))

    def union(self, other: BitSet) -> BitSet:
        return BitSet(self.value | other.value)

    def difference(self, other: BitSet) -> BitSet:
        return BitSet(self.value & ~other.value)

    def contains(self, idx: int) -> bool:
        _check_index(idx)
        return bool(self.value >> idx & 1)

    def is_subset(self, other: BitSet) -> bool:
        return self.value & ~other.value == 0

    def size(self) -> int:
        return self.value.bit_count()

    def min(self) -> Optional[int]:
        if not self.value:
            return None
        return (self.value & -self.value).bit_length() - 1

    def max(self) -> Optional[int]:
        if not self.value:
            return None
        return self.value.bit_length() - 1

    def take_max(self) -> Optional[tuple[int, BitSet]]:
        """Return the largest element and the set without it."""
        top = self.max()
        if top is None:
            return None
        return top, self.remove(top)

    def elements(self) -> Iterator[int]:
        rest = self.value
        while rest:
            low = rest & -rest
            yield low.bit_length() - 1
            rest ^= low

    def subsets(self) -> Iterator[BitSet]:
        """Every subset of this set, from the empty set up to the set itself."""
        return (BitSet(mask) for mask in iter_submasks(self.value))

    def __or__(self, other: BitSet) -> BitSet:
        return self.union(other)

    def __sub__(self, other: BitSet) -> BitSet:
        return self.difference(other)

    def __contains__(self, idx: int) -> bool:
        return self.contains(idx)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[int]:
        return self.elements()

    def __bool__(self) -> bool:
        return self.value != 0

    def __index__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return format(self.value, "b")
