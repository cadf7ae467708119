"""
arena - Index-addressed node storage for treaps

Nodes are not Python objects linked by references: they are slots in a set
of parallel lists, and tree links are slot indices. Released slots go on a
free list and are handed out again by the next allocation, so a long-lived
tree that churns keys keeps a bounded footprint.

The arena optionally enforces a capacity. Running out of capacity (or the
interpreter raising MemoryError) is reported by alloc() returning None,
never by an exception.
"""

import logging
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Tuple, TypeVar


logger = logging.getLogger(__name__)

K = TypeVar('K')
V = TypeVar('V')

# Absent link
NIL = -1


class _Released:
    """Marker stored in the key slot of a released node."""

    __slots__ = ()

    def __repr__(self) -> str:
        return '<released>'


_RELEASED: Any = _Released()


@dataclass
class ArenaSnapshot:
    """Point-in-time arena statistics."""
    alloc_count: int
    free_count: int
    recycled_count: int
    failed_count: int
    peak_live: int
    slots: int
    capacity: int

    @property
    def live_count(self) -> int:
        """Number of currently allocated nodes."""
        return self.alloc_count - self.free_count


class ArenaStats:
    """Allocation statistics collector."""

    __slots__ = (
        '_enabled',
        '_alloc_count',
        '_free_count',
        '_recycled_count',
        '_failed_count',
        '_peak_live',
    )

    def __init__(self, enabled: bool = True):
        self._enabled = enabled
        self._alloc_count = 0
        self._free_count = 0
        self._recycled_count = 0
        self._failed_count = 0
        self._peak_live = 0

    def enable(self) -> None:
        """Enable statistics collection."""
        self._enabled = True

    def disable(self) -> None:
        """Disable statistics collection."""
        self._enabled = False

    def reset(self) -> None:
        """Reset all statistics."""
        self._alloc_count = 0
        self._free_count = 0
        self._recycled_count = 0
        self._failed_count = 0
        self._peak_live = 0

    def record_alloc(self, recycled: bool) -> None:
        """Record a successful allocation.

        Args:
            recycled: True if the slot came from the free list
        """
        if not self._enabled:
            return
        self._alloc_count += 1
        if recycled:
            self._recycled_count += 1
        live = self._alloc_count - self._free_count
        if live > self._peak_live:
            self._peak_live = live

    def record_free(self) -> None:
        """Record a release."""
        if not self._enabled:
            return
        self._free_count += 1

    def record_failure(self) -> None:
        """Record a failed allocation."""
        if not self._enabled:
            return
        self._failed_count += 1

    def snapshot(self, slots: int = 0, capacity: int = 0) -> ArenaSnapshot:
        """Get current statistics snapshot.

        Args:
            slots: Number of slots the arena has grown to
            capacity: Arena capacity (0 = unbounded)
        """
        return ArenaSnapshot(
            alloc_count=self._alloc_count,
            free_count=self._free_count,
            recycled_count=self._recycled_count,
            failed_count=self._failed_count,
            peak_live=self._peak_live,
            slots=slots,
            capacity=capacity,
        )

    @property
    def enabled(self) -> bool:
        """Check if statistics collection is enabled."""
        return self._enabled


class NodeArena(Generic[K, V]):
    """Slot storage for treap nodes.

    Each node field is a list indexed by slot number. The tree code reads
    and writes ``keys``, ``values``, ``priorities``, ``left``, ``right`` and
    ``parent`` directly; the arena only manages slot lifetime.
    """

    __slots__ = (
        'keys',
        'values',
        'priorities',
        'left',
        'right',
        'parent',
        '_free',
        '_live',
        '_capacity',
        '_stats',
    )

    def __init__(self, capacity: int = 0, stats: Optional[ArenaStats] = None):
        """Initialize arena.

        Args:
            capacity: Maximum number of live nodes (0 = unbounded)
            stats: Statistics collector (default: a new enabled one)

        Raises:
            ValueError: If capacity is negative
        """
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self.keys: List[Any] = []
        self.values: List[Any] = []
        self.priorities: List[int] = []
        self.left: List[int] = []
        self.right: List[int] = []
        self.parent: List[int] = []
        self._free: List[int] = []
        self._live = 0
        self._capacity = capacity
        self._stats = stats if stats is not None else ArenaStats()

    def alloc(self, key: K, value: V, priority: int) -> Optional[int]:
        """Allocate an unlinked node.

        Args:
            key: Node key
            value: Node value
            priority: Node priority

        Returns:
            Slot index, or None if the arena is full or memory ran out
        """
        if self._capacity and self._live >= self._capacity:
            self._stats.record_failure()
            logger.warning("node arena full (capacity %d)", self._capacity)
            return None

        if self._free:
            index = self._free.pop()
            self.keys[index] = key
            self.values[index] = value
            self.priorities[index] = priority
            self.left[index] = NIL
            self.right[index] = NIL
            self.parent[index] = NIL
            recycled = True
        else:
            index = len(self.keys)
            try:
                self.keys.append(key)
                self.values.append(value)
                self.priorities.append(priority)
                self.left.append(NIL)
                self.right.append(NIL)
                self.parent.append(NIL)
            except MemoryError:
                self._truncate(index)
                self._stats.record_failure()
                logger.warning("out of memory allocating node %d", index)
                return None
            recycled = False

        self._live += 1
        self._stats.record_alloc(recycled)
        return index

    def _truncate(self, length: int) -> None:
        """Drop partially appended slots after a failed allocation."""
        for column in (self.keys, self.values, self.priorities,
                       self.left, self.right, self.parent):
            del column[length:]

    def free(self, index: int) -> Tuple[K, V]:
        """Release a node and return its key and value.

        The node must already be unlinked from the tree.

        Raises:
            ValueError: If the slot is not a live node
        """
        if not 0 <= index < len(self.keys) or self.keys[index] is _RELEASED:
            raise ValueError(f"slot {index} is not a live node")
        key = self.keys[index]
        value = self.values[index]
        self.keys[index] = _RELEASED
        self.values[index] = None
        self.left[index] = NIL
        self.right[index] = NIL
        self.parent[index] = NIL
        self._free.append(index)
        self._live -= 1
        self._stats.record_free()
        return key, value

    def is_live(self, index: int) -> bool:
        """Check whether index names an allocated node."""
        return 0 <= index < len(self.keys) and self.keys[index] is not _RELEASED

    def clear(self) -> None:
        """Release every node and shrink to zero slots."""
        for _ in range(self._live):
            self._stats.record_free()
        self._truncate(0)
        self._free.clear()
        self._live = 0

    def snapshot(self) -> ArenaSnapshot:
        """Get allocation statistics for this arena."""
        return self._stats.snapshot(slots=len(self.keys), capacity=self._capacity)

    @property
    def capacity(self) -> int:
        """Maximum number of live nodes (0 = unbounded)."""
        return self._capacity

    @property
    def free_slots(self) -> int:
        """Number of released slots waiting to be recycled."""
        return len(self._free)

    def __len__(self) -> int:
        """Number of live nodes."""
        return self._live
