import pytest
from datetime import timedelta
from unittest.mock import Mock

from django.core.cache import cache

from apps.exchange.infrastructure.cache import DjangoCacheService


@pytest.fixture
def cache_service():
    return DjangoCacheService()


class TestDjangoCacheService:
    """Tests for the get-or-create cache."""

    def test_miss_invokes_factory_and_stores(self, cache_service):
        factory = Mock(return_value=["rate"])

        value = cache_service.get_or_create("key", factory, timedelta(minutes=1))

        assert value == ["rate"]
        factory.assert_called_once()
        assert cache.get("key") == ["rate"]

    def test_hit_skips_factory(self, cache_service):
        """Test that two calls within the TTL invoke the factory once."""
        factory = Mock(return_value={"EUR": "0.9"})

        first = cache_service.get_or_create("key", factory, timedelta(minutes=1))
        second = cache_service.get_or_create("key", factory, timedelta(minutes=1))

        assert first == second
        factory.assert_called_once()

    def test_none_is_not_cached(self, cache_service):
        factory = Mock(return_value=None)

        assert cache_service.get_or_create("key", factory) is None
        assert cache_service.get_or_create("key", factory) is None

        assert factory.call_count == 2

    def test_falsy_values_are_cached(self, cache_service):
        factory = Mock(return_value=[])

        cache_service.get_or_create("key", factory)
        cache_service.get_or_create("key", factory)

        factory.assert_called_once()

    def test_ttl_passed_to_backend(self, cache_service, mocker):
        set_spy = mocker.spy(cache_service._cache, "set")

        cache_service.get_or_create("key", lambda: 1, timedelta(hours=24))

        set_spy.assert_called_once_with("key", 1, timeout=86400.0)

    def test_default_ttl_is_five_minutes(self, cache_service, mocker):
        set_spy = mocker.spy(cache_service._cache, "set")

        cache_service.get_or_create("key", lambda: 1)

        set_spy.assert_called_once_with("key", 1, timeout=300.0)

    def test_zero_ttl_is_honoured(self, mocker):
        cache_service = DjangoCacheService(default_ttl=timedelta(0))
        set_spy = mocker.spy(cache_service._cache, "set")

        cache_service.get_or_create("a", lambda: 1)
        cache_service.get_or_create("b", lambda: 2, timedelta(0))

        assert cache_service.default_ttl == timedelta(0)
        assert [c.kwargs["timeout"] for c in set_spy.call_args_list] == [0.0, 0.0]

    def test_expired_entry_is_recomputed(self, cache_service, mocker):
        factory = Mock(side_effect=["old", "new"])
        cache_service.get_or_create("key", factory, timedelta(seconds=10))

        # LocMemCache checks expiry against time.time()
        now = mocker.patch("django.core.cache.backends.locmem.time.time")
        now.return_value = 10 ** 10

        assert cache_service.get_or_create("key", factory, timedelta(seconds=10)) == "new"

    def test_remove(self, cache_service):
        factory = Mock(side_effect=["first", "second"])
        cache_service.get_or_create("key", factory)

        cache_service.remove("key")

        assert cache_service.get_or_create("key", factory) == "second"

    def test_remove_missing_key(self, cache_service):
        cache_service.remove("does-not-exist")
