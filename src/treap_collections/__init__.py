"""
treap_collections - Randomized search tree containers for Python

This package provides an in-memory ordered dictionary implemented as a
treap: a binary search tree by key that is also a heap by random priority,
giving expected logarithmic depth with single-rotation updates.
"""

__version__ = "0.1.0"

# Tier 0: Configuration
from treap_collections._config import config

# Tier 1: Comparator, priorities, statistics
from treap_collections._comparator import (
    Comparator,
    ComparatorType,
    resolve_comparator,
)

from treap_collections._priority import (
    PrioritySource,
    default_priority_source,
)

from treap_collections._stats import TreapStats

# Tier 2: Node storage
from treap_collections._arena import (
    NIL,
    NodeArena,
    ArenaStats,
    ArenaSnapshot,
)

# Tier 3: Core algorithm
from treap_collections._treap import (
    Treap,
    NOT_FOUND,
    InsertStatus,
    IterateStatus,
    InvariantError,
)

# Tier 4: Public API
from treap_collections._treapmap import (
    TreapMap,
    ArenaFull,
)

__all__ = [
    # Version
    "__version__",
    # Tier 0: config
    "config",
    # Tier 1: comparator
    "Comparator",
    "ComparatorType",
    "resolve_comparator",
    # Tier 1: priorities
    "PrioritySource",
    "default_priority_source",
    # Tier 1: statistics
    "TreapStats",
    # Tier 2: arena
    "NIL",
    "NodeArena",
    "ArenaStats",
    "ArenaSnapshot",
    # Tier 3: Core Algorithm
    "Treap",
    "NOT_FOUND",
    "InsertStatus",
    "IterateStatus",
    "InvariantError",
    # Tier 4: Public API
    "TreapMap",
    "ArenaFull",
]
