"""
Provider Registry - Maps provider names to adapter classes.
A single provider is active at a time, selected by settings.CURRENCY_PROVIDER.
"""

from functools import lru_cache

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.infrastructure.providers.frankfurter import FrankfurterProvider
from apps.exchange.infrastructure.providers.mock import MockProvider


# Registry: Maps provider name to the corresponding adapter class
PROVIDER_REGISTRY: dict[str, type[BaseExchangeRateProvider]] = {
    FrankfurterProvider.name: FrankfurterProvider,
    MockProvider.name: MockProvider,
}


@lru_cache(maxsize=None)
def get_provider_instance(provider_name: str) -> BaseExchangeRateProvider:
    """
    Get the shared instance of a provider by its name.

    Instances are kept for the life of the process so that circuit breaker
    state is shared by every request.

    Raises:
        ImproperlyConfigured: if the name is not in the registry
    """
    provider_class = PROVIDER_REGISTRY.get(provider_name.lower())

    if provider_class is None:
        raise ImproperlyConfigured(
            f"Currency provider '{provider_name}' not found. "
            f"Available providers: {', '.join(sorted(PROVIDER_REGISTRY))}"
        )

    return provider_class()


def get_configured_provider() -> BaseExchangeRateProvider:
    return get_provider_instance((settings.CURRENCY_PROVIDER or FrankfurterProvider.name).lower())
