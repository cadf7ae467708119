"""Tests for the TreapMap implementation."""

import pytest

from treap_collections import (
    ArenaFull,
    Comparator,
    PrioritySource,
    TreapMap,
)


class TestTreapMapBasic:
    """Basic functionality tests."""

    def test_create_empty_map(self):
        """Test creating an empty map."""
        m = TreapMap()
        assert len(m) == 0
        assert list(m) == []

    def test_create_from_items(self):
        """Test creating a map from pairs."""
        m = TreapMap([('b', 2), ('a', 1)])
        assert list(m.items()) == [('a', 1), ('b', 2)]

    def test_setitem_getitem(self):
        """Test setting and getting items."""
        m = TreapMap()
        m['key1'] = 'value1'
        m['key2'] = 'value2'

        assert m['key1'] == 'value1'
        assert m['key2'] == 'value2'

    def test_setitem_overwrites(self):
        """Test assigning an existing key replaces its value."""
        m = TreapMap()
        m['key'] = 'old'
        m['key'] = 'new'
        assert m['key'] == 'new'
        assert len(m) == 1

    def test_getitem_missing_raises(self):
        """Test getting missing key raises KeyError."""
        m = TreapMap()
        with pytest.raises(KeyError):
            _ = m['missing']

    def test_none_value(self):
        """Test None is a storable value."""
        m = TreapMap()
        m['key'] = None
        assert m['key'] is None
        assert 'key' in m

    def test_contains(self):
        """Test __contains__."""
        m = TreapMap()
        m['key'] = 'value'

        assert 'key' in m
        assert 'missing' not in m

    def test_len(self):
        """Test __len__."""
        m = TreapMap()
        assert len(m) == 0

        m['a'] = 1
        m['b'] = 2
        assert len(m) == 2

    def test_delitem(self):
        """Test __delitem__."""
        m = TreapMap()
        m['key'] = 'value'
        del m['key']

        assert 'key' not in m
        assert len(m) == 0

    def test_delitem_missing_raises(self):
        """Test deleting missing key raises KeyError."""
        m = TreapMap()
        with pytest.raises(KeyError):
            del m['missing']

    def test_iteration_order(self):
        """Test keys are iterated in sorted order."""
        m = TreapMap()
        m['charlie'] = 3
        m['alice'] = 1
        m['bob'] = 2

        assert list(m) == ['alice', 'bob', 'charlie']

    def test_get_with_default(self):
        """Test get with default."""
        m = TreapMap()
        m['key'] = 'value'

        assert m.get('key') == 'value'
        assert m.get('missing') is None
        assert m.get('missing', 'default') == 'default'

    def test_pop(self):
        """Test pop."""
        m = TreapMap()
        m['key'] = 'value'

        assert m.pop('key') == 'value'
        assert 'key' not in m

    def test_pop_missing_with_default(self):
        """Test pop with missing key and default."""
        m = TreapMap()
        assert m.pop('missing', 'default') == 'default'
        assert m.pop('missing', None) is None

    def test_pop_missing_raises(self):
        """Test pop with missing key raises."""
        m = TreapMap()
        with pytest.raises(KeyError):
            m.pop('missing')

    def test_setdefault(self):
        """Test setdefault."""
        m = TreapMap()

        result = m.setdefault('key', 'default')
        assert result == 'default'
        assert m['key'] == 'default'

        result = m.setdefault('key', 'other')
        assert result == 'default'

    def test_update_from_dict(self):
        """Test update from dict."""
        m = TreapMap()
        m.update({'a': 1, 'b': 2})

        assert m['a'] == 1
        assert m['b'] == 2

    def test_clear(self):
        """Test clear."""
        m = TreapMap()
        m['a'] = 1
        m['b'] = 2

        m.clear()
        assert len(m) == 0

    def test_keys_values_items(self):
        """Test keys, values, items methods."""
        m = TreapMap()
        m['b'] = 2
        m['a'] = 1
        m['c'] = 3

        assert list(m.keys()) == ['a', 'b', 'c']
        assert list(m.values()) == [1, 2, 3]
        assert list(m.items()) == [('a', 1), ('b', 2), ('c', 3)]

    def test_equality_with_dict(self):
        """Test Mapping equality against a dict."""
        m = TreapMap([('a', 1), ('b', 2)])
        assert m == {'a': 1, 'b': 2}


class TestTreapMapOrdered:
    """Tests for ordered operations."""

    def test_first_key(self):
        """Test first_key."""
        m = TreapMap()
        m['c'] = 3
        m['a'] = 1
        m['b'] = 2

        assert m.first_key() == 'a'
        assert m.first_item() == ('a', 1)

    def test_first_key_empty_raises(self):
        """Test first_key on empty raises."""
        m = TreapMap()
        with pytest.raises(KeyError):
            m.first_key()

    def test_pop_first(self):
        """Test pop_first removes the smallest entry."""
        m = TreapMap([(3, 'c'), (1, 'a'), (2, 'b')])
        assert m.pop_first() == (1, 'a')
        assert list(m) == [2, 3]

    def test_popitem_is_smallest(self):
        """Test popitem removes the smallest entry."""
        m = TreapMap([(3, 'c'), (1, 'a')])
        assert m.popitem() == (1, 'a')

    def test_pop_first_empty_raises(self):
        """Test pop_first on empty raises."""
        with pytest.raises(KeyError):
            TreapMap().pop_first()

    def test_drain(self):
        """Test draining with pop_first yields ascending keys."""
        m = TreapMap(((k, k) for k in [5, 3, 8, 1, 4]), priorities=PrioritySource(seed=3))
        drained = []
        while m:
            drained.append(m.pop_first()[0])
        assert drained == [1, 3, 4, 5, 8]

    def test_for_each(self):
        """Test for_each visits in order and reports completion."""
        m = TreapMap([(2, 'b'), (1, 'a')])
        seen = []
        assert m.for_each(lambda k, v: seen.append(k)) is True
        assert seen == [1, 2]

    def test_for_each_stop(self):
        """Test for_each stops on a truthy callback result."""
        m = TreapMap([(k, k) for k in range(10)])
        seen = []
        assert m.for_each(lambda k, v: seen.append(k) or k == 4) is False
        assert seen == [0, 1, 2, 3, 4]

    def test_for_each_mutation_raises(self):
        """Test for_each raises if the callback deletes entries."""
        m = TreapMap([(k, k) for k in range(5)])
        with pytest.raises(RuntimeError):
            m.for_each(lambda k, v: m.pop(k + 1, None))

    def test_iteration_mutation_raises(self):
        """Test deleting while iterating raises RuntimeError."""
        m = TreapMap([(k, k) for k in range(5)])
        with pytest.raises(RuntimeError):
            for k in m:
                del m[k]

    def test_getitem_while_iterating(self):
        """Reading values while iterating visits every entry."""
        m = TreapMap(((k, k) for k in range(50)), priorities=PrioritySource(seed=3))
        out = {}
        for k in m:
            out[k] = m[k]
        assert out == {k: k for k in range(50)}
        assert {k: m[k] for k in m} == out
        assert m.verify() == []


class TestTreapMapComparators:
    """Custom ordering."""

    def test_reverse(self):
        """Test reverse comparator."""
        m = TreapMap(cmp=Comparator.reverse())
        for k in [1, 3, 2]:
            m[k] = k
        assert list(m) == [3, 2, 1]
        assert m.comparator_type == 'reverse'

    def test_key_function(self):
        """Test key function ordering and lookup."""
        m = TreapMap(key=str.lower)
        m['Bob'] = 1
        m['alice'] = 2
        assert list(m) == ['alice', 'Bob']
        assert m['BOB'] == 1
        assert m.comparator_type == 'key_func'

    def test_callable(self):
        """Test plain comparison function."""
        m = TreapMap(cmp=lambda a, b: len(a) - len(b))
        m['ccc'] = 3
        m['a'] = 1
        assert list(m) == ['a', 'ccc']

    def test_both_cmp_and_key_rejected(self):
        """Test cmp and key together raise TypeError."""
        with pytest.raises(TypeError):
            TreapMap(cmp=Comparator.natural(), key=str.lower)


class TestTreapMapLimits:
    """Capacity and diagnostics."""

    def test_arena_full(self):
        """Test inserting past capacity raises ArenaFull."""
        m = TreapMap(max_nodes=2)
        m['a'] = 1
        m['b'] = 2
        with pytest.raises(ArenaFull):
            m['c'] = 3
        with pytest.raises(MemoryError):
            m['d'] = 4
        m['a'] = 10
        assert m['a'] == 10

    def test_arena_stats(self):
        """Test arena statistics track allocations and frees."""
        m = TreapMap([(k, k) for k in range(10)])
        del m[3]
        snap = m.arena_stats()
        assert snap.alloc_count == 10
        assert snap.free_count == 1
        assert snap.live_count == 9

    def test_verify_and_height(self):
        """Test diagnostics on a populated map."""
        m = TreapMap(((k, k) for k in range(500)), priorities=PrioritySource(seed=8))
        for k in range(0, 500, 7):
            _ = m[k]
        assert m.verify() == []
        assert 0 < m.height() < 500

    def test_stats(self):
        """Test per-map statistics."""
        m = TreapMap(stats=True)
        m['a'] = 1
        m['a'] = 2
        _ = m['a']
        assert m.stats.inserts == 1
        assert m.stats.replacements == 1
        assert m.stats.lookups == 1

    def test_stats_disabled(self):
        """Test statistics are off when requested."""
        assert TreapMap(stats=False).stats is None

    def test_repr(self):
        """Test repr shows at most five items."""
        m = TreapMap([(k, k) for k in range(8)])
        assert repr(m) == "TreapMap({0: 0, 1: 1, 2: 2, 3: 3, 4: 4, ...})"
        assert repr(TreapMap()) == "TreapMap({})"
