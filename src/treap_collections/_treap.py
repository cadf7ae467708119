"""
treap - Randomized binary search tree with parent links

A treap is a binary search tree ordered by key that is at the same time a
max-heap on a random per-node priority (Aragon and Seidel, "Randomized
search trees", FOCS 1989). The random priorities give expected O(log n)
depth without any rebalancing bookkeeping: every structural change is a
single rotation.

The Treap object is the tree handle. It owns a NodeArena and the index of
the root slot, which changes whenever a rotation reaches the top. The key
ordering is supplied on every keyed call, so the caller is responsible for
using the same comparator for the lifetime of a tree.

Absent results are reported through the NOT_FOUND sentinel and the
InsertStatus / IterateStatus enums rather than exceptions.
"""

import logging
from enum import Enum
from typing import (
    Any, Callable, Generic, Iterator, List, Optional, Tuple, TypeVar, Union
)

from treap_collections._arena import NIL, ArenaSnapshot, ArenaStats, NodeArena
from treap_collections._comparator import Comparator, CompareFunc
from treap_collections._config import config, DuplicatePolicy
from treap_collections._priority import PrioritySource, default_priority_source
from treap_collections._stats import TreapStats


logger = logging.getLogger(__name__)

K = TypeVar('K')
V = TypeVar('V')

CmpArg = Union[Comparator, CompareFunc]


class _NotFoundType:
    """Type of the NOT_FOUND sentinel."""

    __slots__ = ()
    _instance: Optional['_NotFoundType'] = None

    def __new__(cls) -> '_NotFoundType':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'NOT_FOUND'

    def __reduce__(self) -> Tuple[type, Tuple[()]]:
        return (_NotFoundType, ())


# Returned for missing keys and empty trees. Distinct from every stored
# value, including None.
NOT_FOUND: Any = _NotFoundType()


class InsertStatus(Enum):
    """Outcome of Treap.insert."""
    INSERTED = "inserted"
    REPLACED = "replaced"
    DUPLICATE_KEY = "duplicate_key"
    ALLOCATION_FAILED = "allocation_failed"


class IterateStatus(Enum):
    """Outcome of Treap.iterate."""
    COMPLETED = "completed"
    STOPPED = "stopped"
    MODIFIED = "modified"


class InvariantError(AssertionError):
    """Raised when invariant checking is enabled and a check fails."""


class Treap(Generic[K, V]):
    """Ordered dictionary stored as a treap.

    Keys and values are opaque; keys are ordered by the comparator passed
    to each keyed operation. Lookup is self-adjusting: a hit draws a fresh
    priority and, if it beats the node's current one, rotates the node
    toward the root, so frequently read keys get cheaper to reach.

    Example:
        >>> t = Treap(priorities=PrioritySource(seed=1))
        >>> for k in (5, 3, 8, 1, 4):
        ...     t.insert(Comparator.natural(), k, str(k))
        >>> [k for k, _ in t.items()]
        [1, 3, 4, 5, 8]

    Not thread-safe: every operation, lookup included, needs exclusive
    access to the tree.
    """

    __slots__ = (
        '_arena',
        '_root',
        '_priorities',
        '_policy',
        '_stats',
        '_version',
        '_shape',
        '_verify',
    )

    def __init__(
        self,
        *,
        priorities: Optional[PrioritySource] = None,
        max_nodes: Optional[int] = None,
        duplicates: Optional[str] = None,
        stats: Union[bool, TreapStats, None] = None,
    ):
        """Initialize an empty treap.

        Args:
            priorities: Priority source (default: built from config)
            max_nodes: Node capacity, 0 for unbounded (default: config.max_nodes)
            duplicates: 'reject' or 'replace' (default: config.duplicate_policy)
            stats: True/False to force statistics on/off, or a TreapStats
                to record into (default: config.enable_statistics)

        Raises:
            ValueError: If duplicates or max_nodes is invalid
        """
        if priorities is None:
            priorities = default_priority_source()
        self._priorities = priorities

        capacity = config.max_nodes if max_nodes is None else max_nodes
        self._arena: NodeArena[K, V] = NodeArena(capacity, ArenaStats())
        self._root = NIL

        policy = config.duplicate_policy if duplicates is None else duplicates
        try:
            self._policy = DuplicatePolicy(policy.lower())
        except (ValueError, AttributeError):
            raise ValueError(
                f"Invalid duplicate policy: {policy}. Must be 'reject' or 'replace'"
            )

        if stats is None:
            stats = config.enable_statistics
        if isinstance(stats, TreapStats):
            self._stats: Optional[TreapStats] = stats
        else:
            self._stats = TreapStats() if stats else None

        # _version counts node set changes, _shape counts rotations
        self._version = 0
        self._shape = 0
        self._verify = config.verify_invariants

    # ==========================================================================
    # Structural primitives
    # ==========================================================================

    def _rotate_up(self, q: int) -> None:
        """Exchange q with its parent, preserving key order.

        A left child gives a right rotation, a right child a left rotation.
        The grandparent link (or the root) is redirected to q.
        """
        a = self._arena
        left, right, parent = a.left, a.right, a.parent

        p = parent[q]
        g = parent[p]
        parent[q] = g
        parent[p] = q

        if g == NIL:
            self._root = q
        elif left[g] == p:
            left[g] = q
        else:
            right[g] = q

        if left[p] == q:
            n = right[q]
            right[q] = p
            left[p] = n
        else:
            n = left[q]
            left[q] = p
            right[p] = n
        if n != NIL:
            parent[n] = p

        self._shape += 1
        if self._stats is not None:
            self._stats.rotations += 1

    def _sift_up(self, q: int) -> None:
        """Rotate q upward until its parent's priority is not lower."""
        parent, priorities = self._arena.parent, self._arena.priorities
        p = parent[q]
        while p != NIL and priorities[p] < priorities[q]:
            self._rotate_up(q)
            p = parent[q]

    def _splice(self, p: int) -> None:
        """Unlink p, which has at most one child, lifting the child into place."""
        a = self._arena
        left, right, parent = a.left, a.right, a.parent

        child = left[p] if left[p] != NIL else right[p]
        g = parent[p]
        if child != NIL:
            parent[child] = g

        if g == NIL:
            self._root = child
        elif left[g] == p:
            left[g] = child
        else:
            right[g] = child

        self._version += 1

    def _leftmost(self, n: int) -> int:
        left = self._arena.left
        while left[n] != NIL:
            n = left[n]
        return n

    def _successor(self, n: int) -> int:
        """In-order successor of n, found through child and parent links."""
        a = self._arena
        right, parent = a.right, a.parent
        if right[n] != NIL:
            return self._leftmost(right[n])
        while parent[n] != NIL and n == right[parent[n]]:
            n = parent[n]
        return parent[n]

    def _find(self, compare: CompareFunc, key: K) -> int:
        a = self._arena
        keys, left, right = a.keys, a.left, a.right
        n = self._root
        while n != NIL:
            c = compare(key, keys[n])
            if c < 0:
                n = left[n]
            elif c > 0:
                n = right[n]
            else:
                return n
        return NIL

    def _compare_with(self, cmp: CmpArg) -> CompareFunc:
        """Validate cmp and wrap it for comparison counting if enabled."""
        if not callable(cmp):
            raise TypeError("cmp must be a Comparator or callable")
        stats = self._stats
        if stats is None:
            return cmp

        def counted(a: Any, b: Any) -> int:
            stats.comparisons += 1
            return cmp(a, b)

        return counted

    def _checkpoint(self, cmp: Optional[CmpArg]) -> None:
        """Re-verify the tree after a mutation when checking is enabled."""
        if not self._verify:
            return
        problems = self.verify(cmp)
        if problems:
            logger.error("treap invariant violated: %s", "; ".join(problems))
            raise InvariantError(problems[0])

    # ==========================================================================
    # Keyed operations
    # ==========================================================================

    def lookup(self, cmp: CmpArg, key: K) -> V:
        """Find the value stored under key.

        A hit draws a new priority for the node; if it is larger than the
        current one the node takes it and is sifted up. The key order is
        never affected, only the shape of the tree.

        Args:
            cmp: Three-way key comparator
            key: Key to look up

        Returns:
            Stored value, or NOT_FOUND
        """
        compare = self._compare_with(cmp)
        stats = self._stats
        if stats is not None:
            stats.lookups += 1

        n = self._find(compare, key)
        if n == NIL:
            if stats is not None:
                stats.lookup_misses += 1
            return NOT_FOUND

        priorities = self._arena.priorities
        new_priority = self._priorities.draw()
        if new_priority > priorities[n]:
            priorities[n] = new_priority
            self._sift_up(n)
            if stats is not None:
                stats.promotions += 1
            self._checkpoint(cmp)

        return self._arena.values[n]

    def peek(self, cmp: CmpArg, key: K) -> V:
        """Find the value stored under key without adjusting the tree.

        Returns:
            Stored value, or NOT_FOUND
        """
        n = self._find(self._compare_with(cmp), key)
        if n == NIL:
            return NOT_FOUND
        return self._arena.values[n]

    def insert(self, cmp: CmpArg, key: K, value: V) -> InsertStatus:
        """Add key with value.

        The key is attached as a new leaf with a freshly drawn priority and
        then sifted up. An equal key already in the tree is handled by the
        tree's duplicate policy; nothing is allocated in that case.

        Args:
            cmp: Three-way key comparator
            key: Key to insert
            value: Value to store

        Returns:
            INSERTED, REPLACED, DUPLICATE_KEY or ALLOCATION_FAILED
        """
        compare = self._compare_with(cmp)
        a = self._arena
        keys, left, right = a.keys, a.left, a.right

        attach = NIL
        c = 0
        n = self._root
        while n != NIL:
            c = compare(key, keys[n])
            if c == 0:
                return self._insert_duplicate(n, value)
            attach = n
            n = left[n] if c < 0 else right[n]

        q = a.alloc(key, value, self._priorities.draw())
        if q is None:
            if self._stats is not None:
                self._stats.allocation_failures += 1
            return InsertStatus.ALLOCATION_FAILED

        a.parent[q] = attach
        if attach == NIL:
            self._root = q
        elif c < 0:
            left[attach] = q
        else:
            right[attach] = q
        self._version += 1

        self._sift_up(q)
        if self._stats is not None:
            self._stats.inserts += 1
        self._checkpoint(cmp)
        return InsertStatus.INSERTED

    def _insert_duplicate(self, n: int, value: V) -> InsertStatus:
        if self._policy is DuplicatePolicy.REPLACE:
            self._arena.values[n] = value
            if self._stats is not None:
                self._stats.replacements += 1
            return InsertStatus.REPLACED

        logger.debug("rejected duplicate key %r", self._arena.keys[n])
        if self._stats is not None:
            self._stats.duplicate_rejections += 1
        return InsertStatus.DUPLICATE_KEY

    def delete(self, cmp: CmpArg, key: K) -> Tuple[K, V]:
        """Remove key from the tree.

        The node is rotated down, always lifting its higher-priority child,
        until it has at most one child, and then spliced out.

        Args:
            cmp: Three-way key comparator
            key: Key to remove

        Returns:
            (stored key, value) of the removed node, or NOT_FOUND
        """
        compare = self._compare_with(cmp)
        p = self._find(compare, key)
        if p == NIL:
            if self._stats is not None:
                self._stats.delete_misses += 1
            return NOT_FOUND

        a = self._arena
        left, right, priorities = a.left, a.right, a.priorities
        while left[p] != NIL and right[p] != NIL:
            if priorities[left[p]] > priorities[right[p]]:
                self._rotate_up(left[p])
            else:
                self._rotate_up(right[p])

        self._splice(p)
        removed = a.free(p)
        if self._stats is not None:
            self._stats.deletes += 1
        self._checkpoint(cmp)
        return removed

    # ==========================================================================
    # Ordered operations
    # ==========================================================================

    def lookup_first(self) -> Tuple[K, V]:
        """Return the smallest (key, value) pair, or NOT_FOUND.

        Pure read: priorities are left alone.
        """
        if self._root == NIL:
            return NOT_FOUND
        n = self._leftmost(self._root)
        return self._arena.keys[n], self._arena.values[n]

    def delete_first(self) -> Tuple[K, V]:
        """Remove and return the smallest (key, value) pair, or NOT_FOUND."""
        if self._root == NIL:
            return NOT_FOUND

        a = self._arena
        n = self._leftmost(self._root)
        p = a.parent[n]
        r = a.right[n]
        if p != NIL:
            a.left[p] = r
        else:
            self._root = r
        if r != NIL:
            a.parent[r] = p
        self._version += 1

        removed = a.free(n)
        if self._stats is not None:
            self._stats.deletes += 1
        self._checkpoint(None)
        return removed

    def iterate(self, callback: Callable[[K, V], Any]) -> IterateStatus:
        """Call callback(key, value) for every entry in ascending order.

        A truthy return from callback ends the walk early. The callback
        must not change the tree's structure; if it does, the walk stops
        before following any link and MODIFIED is returned.

        Returns:
            COMPLETED, STOPPED or MODIFIED
        """
        if self._root == NIL:
            return IterateStatus.COMPLETED

        keys, values = self._arena.keys, self._arena.values
        version, shape = self._version, self._shape
        n = self._leftmost(self._root)
        while n != NIL:
            stop = callback(keys[n], values[n])
            if self._version != version or self._shape != shape:
                return IterateStatus.MODIFIED
            if stop:
                return IterateStatus.STOPPED
            n = self._successor(n)
        return IterateStatus.COMPLETED

    def items(self) -> Iterator[Tuple[K, V]]:
        """Iterate over (key, value) pairs in ascending order.

        Lookup rotations are allowed while iterating, since they keep key
        order and the walk follows the current links.

        Raises:
            RuntimeError: If an entry is added or removed during iteration
        """
        if self._root == NIL:
            return
        keys, values = self._arena.keys, self._arena.values
        version = self._version
        n = self._leftmost(self._root)
        while n != NIL:
            yield keys[n], values[n]
            if self._version != version:
                raise RuntimeError("Treap mutated during iteration")
            n = self._successor(n)

    def keys(self) -> Iterator[K]:
        """Iterate over keys in ascending order."""
        for key, _ in self.items():
            yield key

    def values(self) -> Iterator[V]:
        """Iterate over values in key order."""
        for _, value in self.items():
            yield value

    # ==========================================================================
    # Whole-tree operations
    # ==========================================================================

    def clear(self) -> None:
        """Remove every entry."""
        logger.debug("clearing treap with %d nodes", len(self._arena))
        self._arena.clear()
        self._root = NIL
        self._version += 1

    def height(self) -> int:
        """Number of nodes on the longest root-to-leaf path (0 when empty)."""
        if self._root == NIL:
            return 0
        left, right = self._arena.left, self._arena.right
        best = 0
        stack = [(self._root, 1)]
        while stack:
            n, depth = stack.pop()
            if depth > best:
                best = depth
            if left[n] != NIL:
                stack.append((left[n], depth + 1))
            if right[n] != NIL:
                stack.append((right[n], depth + 1))
        return best

    def verify(self, cmp: Optional[CmpArg] = None) -> List[str]:
        """Check the tree invariants.

        Checks parent back-links, heap order on priorities, that the
        reachable node count matches the arena, and, when cmp is given,
        that keys strictly ascend in order.

        Returns:
            Descriptions of every violation found (empty if healthy)
        """
        a = self._arena
        left, right, parent, priorities = a.left, a.right, a.parent, a.priorities
        problems: List[str] = []

        if self._root != NIL and parent[self._root] != NIL:
            problems.append(
                f"root {self._root} has parent link {parent[self._root]}"
            )

        live = len(a)
        reachable = 0
        stack = [self._root] if self._root != NIL else []
        while stack:
            n = stack.pop()
            reachable += 1
            if reachable > live:
                problems.append("more reachable nodes than live nodes (cycle or leak)")
                break
            if not a.is_live(n):
                problems.append(f"node {n} is linked but released")
                continue
            for child, side in ((left[n], 'left'), (right[n], 'right')):
                if child == NIL:
                    continue
                if parent[child] != n:
                    problems.append(
                        f"node {child} is the {side} child of {n} "
                        f"but its parent link is {parent[child]}"
                    )
                if priorities[child] > priorities[n]:
                    problems.append(
                        f"heap order violated: node {child} priority "
                        f"{priorities[child]} exceeds parent {n} priority "
                        f"{priorities[n]}"
                    )
                stack.append(child)

        if not problems and reachable != live:
            problems.append(f"{reachable} reachable nodes but {live} live in arena")

        if cmp is not None and not problems:
            previous: Any = NOT_FOUND
            for key, _ in self.items():
                if previous is not NOT_FOUND and cmp(previous, key) >= 0:
                    problems.append(f"keys out of order: {previous!r} before {key!r}")
                previous = key

        return problems

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def root(self) -> int:
        """Arena slot of the root node (NIL when empty)."""
        return self._root

    @property
    def arena(self) -> NodeArena[K, V]:
        """Node storage (read-only use)."""
        return self._arena

    @property
    def priorities(self) -> PrioritySource:
        """Priority source used by insert and lookup."""
        return self._priorities

    @property
    def duplicate_policy(self) -> str:
        """Duplicate-key policy ('reject' or 'replace')."""
        return self._policy.value

    @property
    def stats(self) -> Optional[TreapStats]:
        """Operation counters, or None when statistics are disabled."""
        return self._stats

    def arena_snapshot(self) -> ArenaSnapshot:
        """Node allocation statistics."""
        return self._arena.snapshot()

    def __len__(self) -> int:
        """Number of entries."""
        return len(self._arena)

    def __bool__(self) -> bool:
        return self._root != NIL

    def __repr__(self) -> str:
        return f"Treap(size={len(self)}, policy='{self._policy.value}')"
