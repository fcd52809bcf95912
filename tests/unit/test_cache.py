"""
Tests for the shared resolution cache.
"""
import itertools

from dbtypes.cache import Cache, cacheable_resolution


class Versioned:
    """Minimal object with the attributes cacheable_resolution keys on."""

    _ids = itertools.count()

    def __init__(self):
        self.cache_key = f'versioned:{next(self._ids)}'
        self.version = 0
        self.calls = 0

    @cacheable_resolution('test_cache')
    def lookup(self, value):
        self.calls += 1
        return None if value == 'missing' else value.upper()


def test_get_instance_is_singleton():
    assert Cache.get_instance() is Cache.get_instance()


def test_get_cache_by_name():
    cache = Cache.get_instance().get_cache('named', maxsize=10, ttl=60)
    assert Cache.get_instance().get_cache('named') is cache
    assert cache.maxsize == 10


def test_results_are_cached():
    obj = Versioned()
    assert obj.lookup('a') == 'A'
    assert obj.lookup('a') == 'A'
    assert obj.calls == 1


def test_none_results_are_cached():
    obj = Versioned()
    assert obj.lookup('missing') is None
    assert obj.lookup('missing') is None
    assert obj.calls == 1


def test_version_change_invalidates():
    """Test a bumped version never serves the previous entry"""
    obj = Versioned()
    obj.lookup('a')
    obj.version += 1
    obj.lookup('a')
    assert obj.calls == 2


def test_instances_do_not_share_entries():
    a, b = Versioned(), Versioned()
    a.lookup('a')
    b.lookup('a')
    assert (a.calls, b.calls) == (1, 1)


def test_unhashable_arguments_bypass_cache():
    obj = Versioned()

    class Key(str):
        __hash__ = None

    obj.lookup(Key('a'))
    obj.lookup(Key('a'))
    assert obj.calls == 2


def test_clear_cache():
    obj = Versioned()
    obj.lookup('a')
    Cache.get_instance().clear_cache('test_cache')
    obj.lookup('a')
    assert obj.calls == 2

    Cache.get_instance().clear_all()
    obj.lookup('a')
    assert obj.calls == 3
