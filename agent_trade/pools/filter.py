"""
Pool filter

Keeps pools that pair one quote asset (inclusion set) with a token outside
the blue-chip set (exclusion set). Symbols are matched exactly, so "sol"
does not match "SOL".
"""

from typing import Collection, Iterable, List

from ..types.pool import PoolRecord


def accept(record: PoolRecord, inclusion: Collection[str], exclusion: Collection[str]) -> bool:
    """
    Decide whether a pool belongs in the cache

    True iff not both symbols are excluded and at least one symbol is
    included.
    """
    a = record.token_a.symbol
    b = record.token_b.symbol
    if a in exclusion and b in exclusion:
        return False
    return a in inclusion or b in inclusion


def filter_pools(
    records: Iterable[PoolRecord],
    inclusion: Collection[str],
    exclusion: Collection[str],
) -> List[PoolRecord]:
    """Apply `accept` to a batch, preserving order"""
    inclusion = frozenset(inclusion)
    exclusion = frozenset(exclusion)
    return [record for record in records if accept(record, inclusion, exclusion)]
