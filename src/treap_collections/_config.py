"""
config - Runtime configuration for treap_collections

This module provides the global runtime configuration: priority width,
arena capacity, duplicate-key policy, the default random seed and the
debugging switches. Values are read from TREAP_COLLECTIONS_* environment
variables at import time and can be changed afterwards through the
validated properties of the global ``config`` instance.
"""

import os
import threading
from enum import Enum
from typing import Optional, Dict, Any


# Width of C library random() results
DEFAULT_PRIORITY_BITS = 31
MAX_PRIORITY_BITS = 64


class DuplicatePolicy(Enum):
    """What Treap.insert does when the key is already present."""
    REJECT = "reject"
    REPLACE = "replace"


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable with prefix."""
    full_name = f"TREAP_COLLECTIONS_{name}"
    return os.environ.get(full_name, default)


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    value = _get_env(name)
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes', 'on')


def _get_env_int(name: str, default: Optional[int]) -> Optional[int]:
    """Get integer environment variable."""
    value = _get_env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


class Config:
    """Global configuration for treap_collections.

    Settings are consulted when a tree is created, so changes only affect
    trees created after the write.

    Thread Safety:
        Writes take a lock. The containers themselves are single-threaded.
    """

    __slots__ = (
        '_lock',
        '_priority_bits',
        '_max_nodes',
        '_duplicate_policy',
        '_seed',
        '_enable_statistics',
        '_verify_invariants',
        '_initialized',
    )

    def __init__(self) -> None:
        """Initialize configuration (called once at module import)."""
        self._lock = threading.Lock()
        self._initialized = False
        self._init()

    def _init(self) -> None:
        """Read settings from the environment, falling back to defaults."""
        if self._initialized:
            return

        bits = _get_env_int('PRIORITY_BITS', DEFAULT_PRIORITY_BITS)
        if bits is None or not 1 <= bits <= MAX_PRIORITY_BITS:
            bits = DEFAULT_PRIORITY_BITS
        self._priority_bits = bits

        max_nodes = _get_env_int('MAX_NODES', 0)
        if max_nodes is None or max_nodes < 0:
            max_nodes = 0
        self._max_nodes = max_nodes

        policy_str = _get_env('DUPLICATE_POLICY', 'reject')
        try:
            self._duplicate_policy = DuplicatePolicy(policy_str.lower())
        except ValueError:
            self._duplicate_policy = DuplicatePolicy.REJECT

        self._seed = _get_env_int('SEED', None)
        self._enable_statistics = _get_env_bool('ENABLE_STATS', False)
        self._verify_invariants = _get_env_bool('VERIFY_INVARIANTS', False)

        self._initialized = True

    @property
    def priority_bits(self) -> int:
        """Width in bits of freshly drawn node priorities."""
        return self._priority_bits

    @priority_bits.setter
    def priority_bits(self, value: int) -> None:
        """Set the priority width.

        Args:
            value: Integer between 1 and 64

        Raises:
            ValueError: If value is out of range
        """
        if not isinstance(value, int) or not 1 <= value <= MAX_PRIORITY_BITS:
            raise ValueError(
                f"priority_bits must be between 1 and {MAX_PRIORITY_BITS}"
            )
        with self._lock:
            self._priority_bits = value

    @property
    def max_nodes(self) -> int:
        """Arena capacity for new trees (0 means unbounded)."""
        return self._max_nodes

    @max_nodes.setter
    def max_nodes(self, value: int) -> None:
        """Set the arena capacity.

        Args:
            value: Non-negative integer, 0 for unbounded

        Raises:
            ValueError: If value is negative
        """
        if not isinstance(value, int) or value < 0:
            raise ValueError("max_nodes must be >= 0")
        with self._lock:
            self._max_nodes = value

    @property
    def duplicate_policy(self) -> str:
        """Duplicate-key policy for Treap.insert ('reject' or 'replace')."""
        return self._duplicate_policy.value

    @duplicate_policy.setter
    def duplicate_policy(self, value: str) -> None:
        """Set the duplicate-key policy.

        Args:
            value: 'reject' or 'replace'

        Raises:
            ValueError: If value is invalid
        """
        try:
            policy = DuplicatePolicy(value.lower())
        except (ValueError, AttributeError):
            raise ValueError(
                f"Invalid duplicate policy: {value}. Must be 'reject' or 'replace'"
            )
        with self._lock:
            self._duplicate_policy = policy

    @property
    def seed(self) -> Optional[int]:
        """Seed for default priority sources (None uses OS entropy)."""
        return self._seed

    @seed.setter
    def seed(self, value: Optional[int]) -> None:
        """Set the default seed.

        Raises:
            ValueError: If value is neither None nor an integer
        """
        if value is not None and (not isinstance(value, int) or isinstance(value, bool)):
            raise ValueError("seed must be an integer or None")
        with self._lock:
            self._seed = value

    @property
    def enable_statistics(self) -> bool:
        """Whether new trees collect operation statistics."""
        return self._enable_statistics

    @enable_statistics.setter
    def enable_statistics(self, value: bool) -> None:
        """Enable or disable statistics collection."""
        with self._lock:
            self._enable_statistics = bool(value)

    @property
    def verify_invariants(self) -> bool:
        """Whether mutating operations re-check every tree invariant."""
        return self._verify_invariants

    @verify_invariants.setter
    def verify_invariants(self, value: bool) -> None:
        """Enable or disable invariant checking after mutations."""
        with self._lock:
            self._verify_invariants = bool(value)

    def to_dict(self) -> Dict[str, Any]:
        """Current settings as a dictionary."""
        return {
            'priority_bits': self._priority_bits,
            'max_nodes': self._max_nodes,
            'duplicate_policy': self._duplicate_policy.value,
            'seed': self._seed,
            'enable_statistics': self._enable_statistics,
            'verify_invariants': self._verify_invariants,
        }

    def __repr__(self) -> str:
        """String representation of configuration."""
        return (
            f"Config("
            f"priority_bits={self.priority_bits}, "
            f"max_nodes={self.max_nodes}, "
            f"duplicate_policy='{self.duplicate_policy}')"
        )


# Global configuration instance (initialized at module import)
config = Config()
