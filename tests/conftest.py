import pytest
from django.core.cache import cache

from apps.exchange.infrastructure.providers.registry import get_provider_instance


@pytest.fixture(autouse=True)
def clean_state():
    """Every test starts with an empty cache and fresh provider instances."""
    cache.clear()
    get_provider_instance.cache_clear()
    yield
    cache.clear()
    get_provider_instance.cache_clear()
