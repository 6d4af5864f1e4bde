"""A hash table that keeps its entries in application order.

Lookups go through chained, self-expanding buckets.  A separate sequence
records the order in which entries were added, and that order is what
iteration, ordered insertion and sorting work on.  As with a multimap,
``add`` does not check for an existing key. Use ``replace`` for
insert-or-update semantics.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Callable, Iterator

from .buckets import BucketArray, Entry
from .hashes import DEFAULT_HASH, HashFunction, Key

__all__ = ["HashTable", "Comparator"]

Comparator = Callable[[Entry, Entry], int]


class HashTable:
    """Keyed entries reachable by hash and kept in application order."""

    def __init__(self, hash_function: HashFunction = DEFAULT_HASH) -> None:
        self.hash_function = hash_function
        self._order: list[Entry] = []
        self._buckets = BucketArray()

    @property
    def num_buckets(self) -> int:
        """Current number of hash buckets."""
        return self._buckets.num_buckets

    @property
    def expansion_inhibited(self) -> bool:
        """True once bucket expansion has been given up as ineffective."""
        return self._buckets.noexpand

    def _make_entry(self, key: Key, value: Any) -> Entry:
        return Entry(key=key, hashv=self.hash_function(key), value=value)

    def _insert(self, position: int, entry: Entry) -> None:
        self._order.insert(position, entry)
        self._buckets.add(entry)

    def _discard(self, entry: Entry) -> None:
        self._buckets.remove(entry)
        position = next(i for i, other in enumerate(self._order) if other is entry)
        del self._order[position]

    def add(self, key: Key, value: Any = None) -> Entry:
        """Append a new entry for *key*, even if the key is already present."""
        entry = self._make_entry(key, value)
        self._insert(len(self._order), entry)
        return entry

    def add_inorder(self, key: Key, value: Any, cmp: Comparator) -> Entry:
        """Insert before the first entry that *cmp* ranks above the new one."""
        entry = self._make_entry(key, value)
        position = next(
            (i for i, existing in enumerate(self._order) if cmp(existing, entry) > 0),
            len(self._order),
        )
        self._insert(position, entry)
        return entry

    def replace(self, key: Key, value: Any = None) -> Entry | None:
        """Remove any entry for *key*, append a new one and return the old entry."""
        replaced = self.find(key)
        if replaced is not None:
            self._discard(replaced)
        self.add(key, value)
        return replaced

    def replace_inorder(self, key: Key, value: Any, cmp: Comparator) -> Entry | None:
        """Like ``replace`` but places the new entry as ``add_inorder`` does."""
        replaced = self.find(key)
        if replaced is not None:
            self._discard(replaced)
        self.add_inorder(key, value, cmp)
        return replaced

    def find(self, key: Key) -> Entry | None:
        """Return the entry stored under *key*, or None."""
        return self._buckets.find(key, self.hash_function(key))

    def delete(self, key: Key) -> Entry:
        """Remove and return the entry for *key*; raise KeyError if absent."""
        entry = self.find(key)
        if entry is None:
            raise KeyError(key)
        self._discard(entry)
        return entry

    def sort(self, cmp: Comparator) -> None:
        """Stably reorder the entries by *cmp*."""
        self._order.sort(key=cmp_to_key(cmp))

    def select(self, cond: Callable[[Entry], bool]) -> HashTable:
        """Return a new table sharing the entries for which *cond* holds."""
        selected = HashTable(self.hash_function)
        for entry in self._buckets:
            if cond(entry):
                selected._insert(len(selected._order), entry)
        return selected

    def clear(self) -> None:
        """Drop every entry and return to the initial bucket count."""
        self._order = []
        self._buckets = BucketArray()

    def items(self) -> Iterator[tuple[Key, Any]]:
        """Yield ``(key, value)`` pairs in application order."""
        for entry in self._order:
            yield entry.key, entry.value

    def entries(self) -> Iterator[Entry]:
        """Yield the entries themselves in application order."""
        yield from self._order

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Key]:
        for entry in self._order:
            yield entry.key

    def __contains__(self, key: Key) -> bool:
        return self.find(key) is not None