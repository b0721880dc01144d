"""
Unit tests for the per-seller category cache.
"""

import pytest

from selllocal.services.cache_service import CategoryCache, get_category_cache


class TestCategoryCache:

    def test_miss_loads_and_stores(self, redis_client):
        cache = get_category_cache()
        calls = []

        def loader():
            calls.append(1)
            return ['Bakery', 'Snacks']

        assert cache.fetch(7, 'active', loader) == ['Bakery', 'Snacks']
        assert cache.fetch(7, 'active', loader) == ['Bakery', 'Snacks']
        assert len(calls) == 1
        assert redis_client.ttls['test:seller:7:categories'] == 300

    def test_scopes_are_separate_fields(self, redis_client):
        cache = get_category_cache()
        cache.fetch(7, 'active', lambda: ['Bakery'])
        cache.fetch(7, 'all', lambda: ['Bakery', 'Retired'])

        assert set(redis_client.hashes['test:seller:7:categories']) == {'active', 'all'}

    def test_invalidate_drops_one_seller(self, redis_client):
        cache = get_category_cache()
        cache.fetch(7, 'active', lambda: ['Bakery'])
        cache.fetch(8, 'active', lambda: ['Flowers'])

        assert cache.invalidate(7) is True

        assert 'test:seller:7:categories' not in redis_client.hashes
        assert cache.fetch(8, 'active', lambda: []) == ['Flowers']

    def test_redis_down_falls_back_to_loader(self, redis_client):
        redis_client.down = True
        cache = get_category_cache()

        assert cache.fetch(7, 'active', lambda: ['Bakery']) == ['Bakery']
        assert cache.invalidate(7) is False
        assert cache.round_trip() is False

    def test_unknown_scope(self, redis_client):
        with pytest.raises(ValueError):
            get_category_cache().fetch(7, 'archived', lambda: [])

    def test_disabled_cache_always_loads(self):
        cache = CategoryCache(None)

        assert cache.enabled is False
        assert cache.fetch(1, 'all', lambda: ['Snacks']) == ['Snacks']
        assert cache.invalidate(1) is False

    def test_round_trip(self, redis_client):
        assert get_category_cache().round_trip() is True
