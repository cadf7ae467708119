"""Tests for config module (Tier 0)."""

import pytest

from treap_collections import config, Treap, PrioritySource
from treap_collections._config import (
    Config,
    DuplicatePolicy,
    DEFAULT_PRIORITY_BITS,
)


class TestDefaults:
    """Tests for default values."""

    def test_priority_bits_default(self, monkeypatch):
        """priority_bits defaults to 31."""
        monkeypatch.delenv('TREAP_COLLECTIONS_PRIORITY_BITS', raising=False)
        assert Config().priority_bits == DEFAULT_PRIORITY_BITS == 31

    def test_max_nodes_default(self, monkeypatch):
        """max_nodes defaults to unbounded."""
        monkeypatch.delenv('TREAP_COLLECTIONS_MAX_NODES', raising=False)
        assert Config().max_nodes == 0

    def test_duplicate_policy_default(self, monkeypatch):
        """duplicate_policy defaults to 'reject'."""
        monkeypatch.delenv('TREAP_COLLECTIONS_DUPLICATE_POLICY', raising=False)
        assert Config().duplicate_policy == 'reject'

    def test_seed_default(self, monkeypatch):
        """seed defaults to None."""
        monkeypatch.delenv('TREAP_COLLECTIONS_SEED', raising=False)
        assert Config().seed is None

    def test_switches_default_off(self, monkeypatch):
        """Statistics and invariant checking default to off."""
        monkeypatch.delenv('TREAP_COLLECTIONS_ENABLE_STATS', raising=False)
        monkeypatch.delenv('TREAP_COLLECTIONS_VERIFY_INVARIANTS', raising=False)
        c = Config()
        assert c.enable_statistics is False
        assert c.verify_invariants is False


class TestEnvironment:
    """Tests for environment variable overrides."""

    def test_env_values(self, monkeypatch):
        """Environment variables are read at construction."""
        monkeypatch.setenv('TREAP_COLLECTIONS_PRIORITY_BITS', '16')
        monkeypatch.setenv('TREAP_COLLECTIONS_MAX_NODES', '100')
        monkeypatch.setenv('TREAP_COLLECTIONS_DUPLICATE_POLICY', 'REPLACE')
        monkeypatch.setenv('TREAP_COLLECTIONS_SEED', '7')
        monkeypatch.setenv('TREAP_COLLECTIONS_ENABLE_STATS', 'yes')
        monkeypatch.setenv('TREAP_COLLECTIONS_VERIFY_INVARIANTS', '1')
        c = Config()
        assert c.priority_bits == 16
        assert c.max_nodes == 100
        assert c.duplicate_policy == 'replace'
        assert c.seed == 7
        assert c.enable_statistics is True
        assert c.verify_invariants is True

    def test_invalid_env_falls_back(self, monkeypatch):
        """Invalid environment values fall back to defaults."""
        monkeypatch.setenv('TREAP_COLLECTIONS_PRIORITY_BITS', '0')
        monkeypatch.setenv('TREAP_COLLECTIONS_MAX_NODES', 'lots')
        monkeypatch.setenv('TREAP_COLLECTIONS_DUPLICATE_POLICY', 'allow')
        monkeypatch.setenv('TREAP_COLLECTIONS_SEED', 'abc')
        c = Config()
        assert c.priority_bits == DEFAULT_PRIORITY_BITS
        assert c.max_nodes == 0
        assert c.duplicate_policy == 'reject'
        assert c.seed is None


class TestSetters:
    """Tests for validated property setters."""

    def test_priority_bits_setter(self):
        """priority_bits accepts 1..64."""
        original = config.priority_bits
        try:
            config.priority_bits = 64
            assert config.priority_bits == 64
            assert PrioritySource().bits == 64
        finally:
            config.priority_bits = original

    def test_priority_bits_invalid(self):
        """priority_bits rejects out-of-range values."""
        with pytest.raises(ValueError):
            config.priority_bits = 0
        with pytest.raises(ValueError):
            config.priority_bits = 65

    def test_max_nodes_setter(self):
        """max_nodes applies to trees created afterwards."""
        original = config.max_nodes
        try:
            config.max_nodes = 5
            assert Treap().arena.capacity == 5
        finally:
            config.max_nodes = original

    def test_max_nodes_invalid(self):
        """max_nodes rejects negative values."""
        with pytest.raises(ValueError):
            config.max_nodes = -1

    def test_duplicate_policy_case_insensitive(self):
        """duplicate_policy accepts case variations."""
        original = config.duplicate_policy
        try:
            config.duplicate_policy = 'Replace'
            assert config.duplicate_policy == 'replace'
        finally:
            config.duplicate_policy = original

    def test_duplicate_policy_invalid(self):
        """duplicate_policy rejects invalid values."""
        with pytest.raises(ValueError):
            config.duplicate_policy = 'allow'
        with pytest.raises(ValueError):
            config.duplicate_policy = None

    def test_seed_setter(self):
        """seed makes default priority sources reproducible."""
        original = config.seed
        try:
            config.seed = 1234
            a = Treap()
            b = Treap()
            assert [a.priorities.draw() for _ in range(5)] == \
                [b.priorities.draw() for _ in range(5)]
        finally:
            config.seed = original

    def test_seed_invalid(self):
        """seed rejects non-integers."""
        with pytest.raises(ValueError):
            config.seed = 'abc'
        with pytest.raises(ValueError):
            config.seed = True

    def test_enable_statistics(self):
        """enable_statistics turns on stats for new trees."""
        original = config.enable_statistics
        try:
            config.enable_statistics = True
            assert Treap().stats is not None
            config.enable_statistics = False
            assert Treap().stats is None
        finally:
            config.enable_statistics = original


class TestMisc:
    """Tests for representation helpers."""

    def test_repr(self):
        """repr mentions the main settings."""
        r = repr(config)
        assert 'Config(' in r
        assert 'priority_bits' in r

    def test_to_dict(self):
        """to_dict lists every setting."""
        d = config.to_dict()
        assert set(d) == {
            'priority_bits', 'max_nodes', 'duplicate_policy',
            'seed', 'enable_statistics', 'verify_invariants',
        }

    def test_policy_enum(self):
        """DuplicatePolicy values are lowercase strings."""
        assert DuplicatePolicy('reject') is DuplicatePolicy.REJECT
        assert DuplicatePolicy.REPLACE.value == 'replace'
