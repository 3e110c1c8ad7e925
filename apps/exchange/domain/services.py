"""
Domain services - Core business logic.
Serves latest and historical rates through the cache and converts amounts,
pivoting through EUR when no direct quote exists.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal, localcontext
from typing import Iterable, List, Optional

from django.conf import settings
from django.utils import timezone

from apps.exchange.domain.exceptions import ConversionPathNotFound, CurrencyExcluded
from apps.exchange.domain.interfaces import BaseCacheService, BaseExchangeRateProvider
from apps.exchange.domain.models import ConversionRequest, ConversionResult, ExchangeRate
from apps.exchange.infrastructure.cache import DjangoCacheService
from apps.exchange.infrastructure.providers.registry import get_configured_provider

logger = logging.getLogger(__name__)

PIVOT_CURRENCY = "EUR"
QUANTUM = Decimal("0.000001")


class CurrencyService:
    """
    Domain service coordinating the rate provider and the cache.

    Rules:
    1. Excluded currencies are rejected before any fetch
    2. Excluded targets never reach the cache or the caller
    3. Conversion uses the direct rate, else a single hop through EUR
    4. Provider errors propagate unchanged, nothing is retried here
    """

    def __init__(
        self,
        provider: BaseExchangeRateProvider,
        cache: BaseCacheService,
        excluded_currencies: Iterable[str] = (),
        latest_ttl: timedelta = timedelta(minutes=15),
        historical_ttl: timedelta = timedelta(hours=24),
    ):
        self.provider = provider
        self.cache = cache
        self.excluded_currencies = frozenset(c.strip().upper() for c in excluded_currencies)
        self.latest_ttl = latest_ttl
        self.historical_ttl = historical_ttl

    def is_excluded(self, currency: str) -> bool:
        return currency.upper() in self.excluded_currencies

    def get_latest_rates(self, base_currency: str, correlation_id: Optional[str] = None) -> List[ExchangeRate]:
        base = base_currency.upper()
        if self.is_excluded(base):
            raise CurrencyExcluded(base)

        def fetch():
            rates = self.provider.get_latest_rates(base, correlation_id=correlation_id)
            if rates is None:
                return None
            return self._without_excluded(rates)

        return self.cache.get_or_create(f"latest_rates_{base}", fetch, self.latest_ttl)

    def get_historical_rates(
        self,
        base_currency: str,
        from_date: date,
        to_date: date,
        page: int = 1,
        page_size: int = 10,
        correlation_id: Optional[str] = None
    ) -> List[ExchangeRate]:
        """
        Get one page of historical rates.

        Pagination applies to the flat, already filtered (date x target) list,
        and every page is cached under its own key.
        """
        base = base_currency.upper()
        if self.is_excluded(base):
            raise CurrencyExcluded(base)

        def fetch():
            rates = self.provider.get_historical_rates(base, from_date, to_date, correlation_id=correlation_id)
            if rates is None:
                return None
            start = (page - 1) * page_size
            return self._without_excluded(rates)[start:start + page_size]

        cache_key = f"historical_rates_{base}_{from_date:%Y%m%d}_{to_date:%Y%m%d}_{page}_{page_size}"
        return self.cache.get_or_create(cache_key, fetch, self.historical_ttl)

    def convert(self, request: ConversionRequest, correlation_id: Optional[str] = None) -> ConversionResult:
        """
        Convert an amount from one currency to another.

        Raises:
            CurrencyExcluded: either currency is excluded
            ConversionPathNotFound: neither a direct nor an EUR-pivoted rate exists

        Example:
            >>> service.convert(ConversionRequest(Decimal("100"), "USD", "EUR"))
            ConversionResult(converted_amount=Decimal('90.000000'), ..., rate=Decimal('0.9'), ...)
        """
        source, target = request.from_currency.upper(), request.to_currency.upper()
        excluded = [c for c in (source, target) if self.is_excluded(c)]
        if excluded:
            raise CurrencyExcluded(*excluded)

        latest_rates = self.get_latest_rates(source, correlation_id=correlation_id) or []

        direct = _find_rate(latest_rates, target)
        if direct is not None:
            return self._result(direct.convert(request.amount), source, target, direct.rate)

        if source == target:
            return self._result(request.amount, source, target, Decimal("1"))

        if source == PIVOT_CURRENCY:
            # EUR is the upstream's own base, a missing quote cannot be pivoted
            logger.warning("No %s rate for %s", target, PIVOT_CURRENCY)
            raise ConversionPathNotFound(source, target)

        source_to_pivot = _find_rate(latest_rates, PIVOT_CURRENCY)
        if source_to_pivot is None:
            raise ConversionPathNotFound(source, target)

        pivot_rates = self.get_latest_rates(PIVOT_CURRENCY, correlation_id=correlation_id) or []
        pivot_to_target = _find_rate(pivot_rates, target)
        if pivot_to_target is None:
            raise ConversionPathNotFound(source, target)

        logger.info("Converting %s -> %s via %s", source, target, PIVOT_CURRENCY)
        converted_amount = pivot_to_target.convert(request.amount / source_to_pivot.rate)
        rate = _quantize(pivot_to_target.rate / source_to_pivot.rate)
        return self._result(converted_amount, source, target, rate)

    def _without_excluded(self, rates: Iterable[ExchangeRate]) -> List[ExchangeRate]:
        return [r for r in rates if not self.is_excluded(r.target_currency)]

    @staticmethod
    def _result(amount: Decimal, source: str, target: str, rate: Decimal) -> ConversionResult:
        return ConversionResult(
            converted_amount=_quantize(amount),
            from_currency=source,
            to_currency=target,
            rate=rate,
            date=timezone.now(),
        )


def _quantize(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        # room for every integer digit plus the six decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 7)
        return value.quantize(QUANTUM)


def _find_rate(rates: Iterable[ExchangeRate], target_currency: str) -> Optional[ExchangeRate]:
    target_currency = target_currency.upper()
    return next((r for r in rates if r.target_currency.upper() == target_currency), None)


def build_currency_service() -> CurrencyService:
    """Wire a CurrencyService from Django settings."""
    return CurrencyService(
        provider=get_configured_provider(),
        cache=DjangoCacheService(),
        excluded_currencies=settings.EXCLUDED_CURRENCIES,
        latest_ttl=timedelta(seconds=settings.LATEST_RATES_CACHE_TTL),
        historical_ttl=timedelta(seconds=settings.HISTORICAL_RATES_CACHE_TTL),
    )
