"""
comparator - Three-way key comparison for ordered containers

This module provides the comparison abstraction used by the treap: a
Comparator is a callable returning a negative, zero or positive integer for
(a < b, a == b, a > b). Natural ordering, reversed ordering, type-specific
fast paths, key functions and arbitrary Python callables are supported.
"""

from enum import Enum
from typing import Any, Callable, Optional, Union


CompareFunc = Callable[[Any, Any], int]


class ComparatorType(Enum):
    """Comparator implementation type."""
    NATURAL = "natural"
    REVERSE = "reverse"
    NUMERIC = "numeric"
    STRING = "string"
    KEY_FUNC = "key_func"
    PYTHON = "python"


def _compare_natural(a: Any, b: Any) -> int:
    """Three-way comparison using natural ordering.

    Returns:
        -1 if a < b, 0 if a == b, 1 if a > b
    """
    if a < b:
        return -1
    elif a > b:
        return 1
    return 0


def _compare_reverse(a: Any, b: Any) -> int:
    """Reverse natural ordering."""
    return -_compare_natural(a, b)


def _compare_numeric(a: Any, b: Any) -> int:
    """Optimized comparison for numeric types."""
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return (a > b) - (a < b)
    return _compare_natural(a, b)


def _compare_string(a: Any, b: Any) -> int:
    """Optimized comparison for string types."""
    if isinstance(a, str) and isinstance(b, str):
        if a < b:
            return -1
        elif a > b:
            return 1
        return 0
    return _compare_natural(a, b)


class Comparator:
    """Key comparison callable for ordered containers.

    A Comparator can be passed anywhere a plain three-way comparison
    function is accepted:

        t = Treap()
        t.insert(Comparator.reverse(), 3, 'c')

    Examples:
        # Natural ordering (default)
        m = TreapMap()

        # Reverse ordering
        m = TreapMap(cmp=Comparator.reverse())

        # Key function
        m = TreapMap(key=str.lower)

        # Custom Python callable
        def by_length(a, b):
            return len(a) - len(b)
        m = TreapMap(cmp=by_length)
    """

    __slots__ = ('_type', '_compare_func', '_key_func')

    def __init__(
        self,
        cmp_type: ComparatorType,
        compare_func: CompareFunc,
        key_func: Optional[Callable[[Any], Any]] = None,
    ):
        """Initialize comparator (internal use - use static methods)."""
        self._type = cmp_type
        self._compare_func = compare_func
        self._key_func = key_func

    @staticmethod
    def natural() -> 'Comparator':
        """Create a comparator using Python's natural ordering.

        Uses __lt__ and __gt__ operators for comparison.
        This is the default comparator for ordered containers.
        """
        return Comparator(ComparatorType.NATURAL, _compare_natural)

    @staticmethod
    def reverse() -> 'Comparator':
        """Create a comparator that reverses natural ordering."""
        return Comparator(ComparatorType.REVERSE, _compare_reverse)

    @staticmethod
    def numeric() -> 'Comparator':
        """Create a comparator optimized for int and float keys.

        Falls back to natural ordering for other types.
        """
        return Comparator(ComparatorType.NUMERIC, _compare_numeric)

    @staticmethod
    def string() -> 'Comparator':
        """Create a comparator optimized for str keys.

        Locale-unaware (code point ordering); falls back to natural
        ordering for other types.
        """
        return Comparator(ComparatorType.STRING, _compare_string)

    @staticmethod
    def from_callable(func: CompareFunc) -> 'Comparator':
        """Create a comparator from a Python callable.

        The callable must accept two arguments and return:
        - Negative integer if first < second
        - Zero if first == second
        - Positive integer if first > second

        Args:
            func: Comparison function

        Returns:
            Comparator wrapping the callable

        Raises:
            TypeError: If func is not callable
        """
        if not callable(func):
            raise TypeError("func must be callable")
        return Comparator(ComparatorType.PYTHON, func)

    @staticmethod
    def from_key(key_func: Callable[[Any], Any]) -> 'Comparator':
        """Create a comparator from a key function.

        Both operands are passed through the key function, similar to the
        key parameter in sorted(), and the results compared naturally.

        Args:
            key_func: Function to extract comparison key

        Raises:
            TypeError: If key_func is not callable
        """
        if not callable(key_func):
            raise TypeError("key_func must be callable")
        return Comparator(ComparatorType.KEY_FUNC, _compare_natural, key_func)

    def compare(self, a: Any, b: Any) -> int:
        """Compare two keys.

        Returns:
            Negative if a < b, zero if a == b, positive if a > b
        """
        if self._key_func is not None:
            return self._compare_func(self._key_func(a), self._key_func(b))
        return self._compare_func(a, b)

    __call__ = compare

    @property
    def type(self) -> str:
        """Get comparator type as string."""
        return self._type.value

    def __repr__(self) -> str:
        return f"Comparator(type='{self.type}')"


def resolve_comparator(
    cmp: Optional[Union[Comparator, CompareFunc]] = None,
    key: Optional[Callable[[Any], Any]] = None,
) -> Comparator:
    """Resolve comparator from cmp/key parameters.

    Used by container constructors to create the appropriate comparator
    from user-provided parameters.

    Args:
        cmp: Comparator instance or comparison callable
        key: Key extraction function

    Returns:
        Resolved Comparator

    Raises:
        TypeError: If both cmp and key are provided
        TypeError: If cmp is not Comparator or callable
        TypeError: If key is not callable
    """
    if cmp is not None and key is not None:
        raise TypeError("Cannot specify both 'cmp' and 'key'")

    if cmp is not None:
        if isinstance(cmp, Comparator):
            return cmp
        if callable(cmp):
            return Comparator.from_callable(cmp)
        raise TypeError("cmp must be a Comparator or callable")

    if key is not None:
        if not callable(key):
            raise TypeError("key must be callable")
        return Comparator.from_key(key)

    return Comparator.natural()
