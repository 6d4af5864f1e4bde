"""Chained hash buckets that grow by doubling.

Entries are kept in power-of-two many buckets, each a chain with the most
recently added entry first.  When a chain grows past its threshold the
number of buckets is doubled and every entry is redistributed.  If two
expansions in a row leave more than half the entries in over-long chains,
the hash function is taken to be a poor fit and expansion stops for good.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

__all__ = [
    "INITIAL_NUM_BUCKETS",
    "INITIAL_NUM_BUCKETS_LOG2",
    "BKT_CAPACITY_THRESH",
    "Entry",
    "Bucket",
    "BucketArray",
    "bucket_index",
]

INITIAL_NUM_BUCKETS = 32
INITIAL_NUM_BUCKETS_LOG2 = 5
BKT_CAPACITY_THRESH = 10


def bucket_index(hashv: int, num_buckets: int) -> int:
    """Return the bucket that *hashv* falls in among *num_buckets* buckets."""
    if num_buckets <= 0 or num_buckets & (num_buckets - 1):
        raise ValueError(f"bucket count must be a power of two, not {num_buckets}")
    return hashv & (num_buckets - 1)


@dataclass(eq=False)
class Entry:
    """A keyed value together with the hash of its key."""

    key: Any
    hashv: int
    value: Any = None


@dataclass
class Bucket:
    """One chain of entries, newest first."""

    entries: list[Entry] = field(default_factory=list)
    expand_mult: int = 0

    @property
    def count(self) -> int:
        return len(self.entries)

    def is_overfull(self) -> bool:
        """True when the chain has reached the length that triggers expansion."""
        return self.count >= (self.expand_mult + 1) * BKT_CAPACITY_THRESH


class BucketArray:
    """The bucket array of a hash table, indexed by hash value."""

    def __init__(self) -> None:
        self.buckets: list[Bucket] = [Bucket() for _ in range(INITIAL_NUM_BUCKETS)]
        self.log2_num_buckets = INITIAL_NUM_BUCKETS_LOG2
        self.ideal_chain_maxlen = 0
        self.nonideal_items = 0
        self.ineff_expands = 0
        self.noexpand = False
        self._num_items = 0

    @property
    def num_buckets(self) -> int:
        return len(self.buckets)

    def _bucket_for(self, hashv: int) -> Bucket:
        return self.buckets[bucket_index(hashv, self.num_buckets)]

    def add(self, entry: Entry) -> None:
        """Put *entry* at the head of its chain, expanding if the chain is full."""
        self._num_items += 1
        bucket = self._bucket_for(entry.hashv)
        bucket.entries.insert(0, entry)
        if bucket.is_overfull() and not self.noexpand:
            self._expand()

    def remove(self, entry: Entry) -> None:
        """Take *entry* (by identity) out of its chain."""
        bucket = self._bucket_for(entry.hashv)
        kept = [other for other in bucket.entries if other is not entry]
        if len(kept) == bucket.count:
            raise ValueError(f"entry for key {entry.key!r} is not in the buckets")
        bucket.entries = kept
        self._num_items -= 1

    def find(self, key: Any, hashv: int) -> Entry | None:
        """Return the entry with this key and hash, or None."""
        return next(
            (
                entry
                for entry in self._bucket_for(hashv).entries
                if entry.hashv == hashv and entry.key == key
            ),
            None,
        )

    def _expand(self) -> None:
        new_count = self.num_buckets * 2
        new_buckets = [Bucket() for _ in range(new_count)]
        items = self._num_items
        self.ideal_chain_maxlen = (items >> (self.log2_num_buckets + 1)) + (
            1 if items & (new_count - 1) else 0
        )
        self.nonideal_items = 0
        for old in self.buckets:
            for entry in old.entries:
                target = new_buckets[bucket_index(entry.hashv, new_count)]
                target.entries.insert(0, entry)
                if target.count > self.ideal_chain_maxlen:
                    self.nonideal_items += 1
                    target.expand_mult = target.count // self.ideal_chain_maxlen
        self.buckets = new_buckets
        self.log2_num_buckets += 1
        if self.nonideal_items > (items >> 1):
            self.ineff_expands += 1
        else:
            self.ineff_expands = 0
        if self.ineff_expands > 1:
            self.noexpand = True

    def __iter__(self) -> Iterator[Entry]:
        """Yield entries in bucket order, each chain newest first."""
        for bucket in self.buckets:
            yield from bucket.entries

    def __len__(self) -> int:
        return self._num_items