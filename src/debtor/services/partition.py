"""Maximal zero-sum partitioning.

Given integers that sum to zero, split them into as many zero-sum groups as possible::

    >>> zero_sum_groups([10, -10, 15, -15])
    [[15, -15], [10, -10]]
    >>> zero_sum_groups([10, 20, -15, -15])
    [[10, 20, -15, -15]]

Both tables are indexed by the integer value of a :class:`BitSet` over the input
positions and are filled in increasing numeric order, so every entry a subset depends
on has already been written. The subset sums take O(2^n); the partition counts take
O(3^n) because each subset scans all subsets of itself.
"""

from __future__ import annotations

from typing import Iterator, Optional, Sequence

from debtor.bitset import BitSet, iter_submasks
from debtor.models import Balance


class SubsetSumTable:
    def __init__(self, values: Sequence[int]) -> None:
        n = len(values)
        sums = [0] * (1 << n)
        for value in range(1, 1 << n):
            top = value.bit_length() - 1
            sums[value] = values[top] + sums[value ^ (1 << top)]
        self._sums = sums

    def __len__(self) -> int:
        return len(self._sums)

    def __getitem__(self, subset: BitSet | int) -> int:
        return self._sums[int(subset)]


class PartitionTable:
    """For every subset: the most zero-sum parts it splits into, and one such part.

    The part stored for a subset always contains the subset's largest index, so each
    part is found through exactly one decomposition.
    """

    def __init__(self, values: Sequence[int], sums: Optional[SubsetSumTable] = None) -> None:
        n = len(values)
        if sums is None:
            sums = SubsetSumTable(values)
        self.sums = sums
        self.size = n

        counts = [0] * (1 << n)
        blocks = [0] * (1 << n)
        for subset in BitSet.enumerate_all(n):
            taken = subset.take_max()
            if taken is None:
                continue
            top, rest = taken
            target = -values[top]
            best_count, best_block = 0, 0
            for mask in iter_submasks(rest.value):
                if sums[mask] != target:
                    continue
                candidate = counts[rest.value & ~mask] + 1
                if candidate > best_count:
                    best_count, best_block = candidate, mask
            if best_count:
                counts[subset.value] = best_count
                blocks[subset.value] = best_block | (1 << top)

        self._counts = counts
        self._blocks = blocks

    def __getitem__(self, subset: BitSet | int) -> tuple[int, BitSet]:
        key = int(subset)
        return self._counts[key], BitSet(self._blocks[key])

    def count(self, subset: BitSet | int) -> int:
        return self._counts[int(subset)]


class PartitionIterator:
    """Walks one optimal partition of the full index set, one block per step.

    Single pass: once exhausted, build a new iterator from the original values.
    """

    def __init__(self, table: PartitionTable) -> None:
        self.table = table
        self.remainder = BitSet.full(table.size)

    @classmethod
    def compute(cls, values: Sequence[int]) -> PartitionIterator:
        return cls(PartitionTable(values))

    def __len__(self) -> int:
        return self.table.count(self.remainder)

    def step(self) -> Optional[BitSet]:
        count, block = self.table[self.remainder]
        if count == 0:
            return None
        self.remainder = self.remainder - block
        return block

    def __iter__(self) -> Iterator[BitSet]:
        while (block := self.step()) is not None:
            yield block


def zero_sum_groups(values: Sequence[int]) -> list[list[int]]:
    return [[values[idx] for idx in block] for block in PartitionIterator.compute(values)]


def partition_balances(balances: Sequence[Balance]) -> Iterator[list[Balance]]:
    values = [balance.amount for balance in balances]
    for block in PartitionIterator.compute(values):
        yield [balances[idx] for idx in block]
