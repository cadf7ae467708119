"""
TreapMap - Ordered map backed by a treap

This module provides TreapMap, the dict-like ordered map of the package.
It binds one comparator to a Treap and translates the treap's
NOT_FOUND / InsertStatus outcomes into the mapping protocol's exceptions.
"""

from collections.abc import MutableMapping
from typing import (
    Any, Callable, Generic, Iterable, Iterator, List, Optional, Tuple,
    TypeVar, Union
)

from treap_collections._arena import ArenaSnapshot
from treap_collections._comparator import Comparator, resolve_comparator
from treap_collections._priority import PrioritySource
from treap_collections._stats import TreapStats
from treap_collections._treap import NOT_FOUND, InsertStatus, IterateStatus, Treap


K = TypeVar('K')
V = TypeVar('V')

_MISSING: Any = object()


class ArenaFull(MemoryError):
    """Raised when a TreapMap cannot allocate a node for a new key."""


class TreapMap(MutableMapping, Generic[K, V]):
    """Ordered map based on a treap.

    Provides a dict-like API with keys kept in comparator order. Reading
    an item (``m[k]``) is self-adjusting: keys that are read often drift
    toward the root. Membership tests and ``get`` do not adjust the tree.

    Example:
        >>> m = TreapMap()
        >>> m['bob'] = 200
        >>> m['alice'] = 100
        >>> print(m['alice'])
        100
        >>> list(m.keys())
        ['alice', 'bob']

    Not thread-safe.
    """

    __slots__ = (
        '_treap',
        '_comparator',
    )

    def __init__(
        self,
        items: Optional[Iterable[Tuple[K, V]]] = None,
        *,
        cmp: Optional[Union[Comparator, Callable[[Any, Any], int]]] = None,
        key: Optional[Callable[[Any], Any]] = None,
        priorities: Optional[PrioritySource] = None,
        max_nodes: Optional[int] = None,
        stats: Union[bool, TreapStats, None] = None,
    ):
        """Initialize TreapMap.

        Args:
            items: Initial key-value pairs
            cmp: Comparator or comparison function
            key: Key extraction function
            priorities: Priority source for the underlying treap
            max_nodes: Node capacity (0 = unbounded, default from config)
            stats: Statistics switch or collector, see Treap
        """
        self._comparator = resolve_comparator(cmp, key)
        self._treap: Treap[K, V] = Treap(
            priorities=priorities,
            max_nodes=max_nodes,
            duplicates='replace',
            stats=stats,
        )

        if items:
            for k, v in items:
                self[k] = v

    # ==========================================================================
    # MutableMapping interface
    # ==========================================================================

    def __getitem__(self, key: K) -> V:
        """Get value for key.

        Raises:
            KeyError: If key not found
        """
        value = self._treap.lookup(self._comparator, key)
        if value is NOT_FOUND:
            raise KeyError(key)
        return value

    def __setitem__(self, key: K, value: V) -> None:
        """Set value for key.

        Raises:
            ArenaFull: If the key is new and no node can be allocated
        """
        status = self._treap.insert(self._comparator, key, value)
        if status is InsertStatus.ALLOCATION_FAILED:
            raise ArenaFull(f"cannot allocate node for key {key!r}")

    def __delitem__(self, key: K) -> None:
        """Delete key.

        Raises:
            KeyError: If key not found
        """
        if self._treap.delete(self._comparator, key) is NOT_FOUND:
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        """Check if key exists (does not adjust the tree)."""
        return self._treap.peek(self._comparator, key) is not NOT_FOUND

    def __len__(self) -> int:
        """Get number of entries."""
        return len(self._treap)

    def __iter__(self) -> Iterator[K]:
        """Iterate over keys in order."""
        return self._treap.keys()

    # ==========================================================================
    # Dict-like operations
    # ==========================================================================

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Get value for key with default (does not adjust the tree)."""
        value = self._treap.peek(self._comparator, key)
        return default if value is NOT_FOUND else value

    def pop(self, key: K, default: Any = _MISSING) -> V:
        """Remove and return value for key.

        Raises:
            KeyError: If key not found and no default given
        """
        removed = self._treap.delete(self._comparator, key)
        if removed is not NOT_FOUND:
            return removed[1]
        if default is not _MISSING:
            return default
        raise KeyError(key)

    def popitem(self) -> Tuple[K, V]:
        """Remove and return the entry with the smallest key.

        Raises:
            KeyError: If map is empty
        """
        return self.pop_first()

    def clear(self) -> None:
        """Remove all entries."""
        self._treap.clear()

    def keys(self) -> Iterator[K]:  # type: ignore[override]
        """Iterate over keys in sorted order."""
        return self._treap.keys()

    def values(self) -> Iterator[V]:  # type: ignore[override]
        """Iterate over values in key order."""
        return self._treap.values()

    def items(self) -> Iterator[Tuple[K, V]]:  # type: ignore[override]
        """Iterate over (key, value) pairs in sorted order."""
        return self._treap.items()

    def for_each(self, callback: Callable[[K, V], Any]) -> bool:
        """Call callback(key, value) in key order until it returns truthy.

        Returns:
            True if every entry was visited

        Raises:
            RuntimeError: If callback changed the map's structure
        """
        status = self._treap.iterate(callback)
        if status is IterateStatus.MODIFIED:
            raise RuntimeError("TreapMap mutated during for_each")
        return status is IterateStatus.COMPLETED

    # ==========================================================================
    # Ordered operations
    # ==========================================================================

    def first_key(self) -> K:
        """Get smallest key.

        Raises:
            KeyError: If map is empty
        """
        return self.first_item()[0]

    def first_item(self) -> Tuple[K, V]:
        """Get the entry with the smallest key.

        Raises:
            KeyError: If map is empty
        """
        first = self._treap.lookup_first()
        if first is NOT_FOUND:
            raise KeyError("Map is empty")
        return first

    def pop_first(self) -> Tuple[K, V]:
        """Remove and return the entry with the smallest key.

        Raises:
            KeyError: If map is empty
        """
        first = self._treap.delete_first()
        if first is NOT_FOUND:
            raise KeyError("Map is empty")
        return first

    # ==========================================================================
    # Diagnostics
    # ==========================================================================

    def height(self) -> int:
        """Depth of the underlying tree."""
        return self._treap.height()

    def verify(self) -> List[str]:
        """Check tree invariants under this map's comparator."""
        return self._treap.verify(self._comparator)

    def arena_stats(self) -> ArenaSnapshot:
        """Node allocation statistics."""
        return self._treap.arena_snapshot()

    @property
    def stats(self) -> Optional[TreapStats]:
        """Operation counters, or None when statistics are disabled."""
        return self._treap.stats

    @property
    def comparator_type(self) -> str:
        """Get comparator type string."""
        return self._comparator.type

    def __repr__(self) -> str:
        """String representation."""
        items = []
        for i, (k, v) in enumerate(self.items()):
            if i == 5:
                items.append("...")
                break
            items.append(f"{k!r}: {v!r}")
        return f"TreapMap({{{', '.join(items)}}})"
