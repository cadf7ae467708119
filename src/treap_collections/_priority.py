"""
priority - Injectable random priority source for treap nodes

Each PrioritySource owns its own random.Random instance, so trees never
share or touch the process-global generator and priority draws can be
replayed exactly from a seed.
"""

import random
from typing import Optional

from treap_collections._config import config, MAX_PRIORITY_BITS


class PrioritySource:
    """Uniform random integer priorities in ``[0, 2**bits)``.

    Example:
        >>> src = PrioritySource(seed=42)
        >>> src.draw() == PrioritySource(seed=42).draw()
        True
    """

    __slots__ = ('_rng', '_bits')

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        rng: Optional[random.Random] = None,
        bits: Optional[int] = None,
    ):
        """Initialize priority source.

        Args:
            seed: Seed for a fresh generator (ignored when rng is given)
            rng: Generator to draw from
            bits: Priority width (default: config.priority_bits)

        Raises:
            ValueError: If bits is out of range
        """
        if bits is None:
            bits = config.priority_bits
        if not 1 <= bits <= MAX_PRIORITY_BITS:
            raise ValueError(f"bits must be between 1 and {MAX_PRIORITY_BITS}")
        self._bits = bits
        self._rng = rng if rng is not None else random.Random(seed)

    def draw(self) -> int:
        """Draw the next priority."""
        return self._rng.getrandbits(self._bits)

    def reseed(self, seed: Optional[int]) -> None:
        """Restart the underlying generator from seed."""
        self._rng.seed(seed)

    @property
    def bits(self) -> int:
        """Priority width in bits."""
        return self._bits

    @property
    def max_priority(self) -> int:
        """Largest value draw() can return."""
        return (1 << self._bits) - 1

    def __repr__(self) -> str:
        return f"PrioritySource(bits={self._bits})"


def default_priority_source() -> PrioritySource:
    """Build a new source from config.seed and config.priority_bits."""
    return PrioritySource(config.seed, bits=config.priority_bits)
