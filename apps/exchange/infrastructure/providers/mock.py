"""
Mock provider for development and integration tests.
Generates deterministic, realistic exchange rates without network access.
"""

import random
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.domain.models import ExchangeRate


class MockProvider(BaseExchangeRateProvider):
    """
    Mock provider quoting a fixed basket of currencies.
    Useful for:
    - Testing without external API calls
    - Development without network access
    """

    name = "mock"

    # Units per 1 EUR (approximate real-world values)
    BASE_RATES = {
        "EUR": Decimal("1.0"),
        "USD": Decimal("1.08"),
        "GBP": Decimal("0.85"),
        "CHF": Decimal("0.95"),
        "JPY": Decimal("162.5"),
        "TRY": Decimal("35.1"),
        "PLN": Decimal("4.31"),
    }

    def get_latest_rates(self, base_currency: str, correlation_id: Optional[str] = None) -> List[ExchangeRate]:
        return self._rates_for(base_currency.upper(), date.today())

    def get_historical_rates(
        self,
        base_currency: str,
        from_date: date,
        to_date: date,
        correlation_id: Optional[str] = None
    ) -> List[ExchangeRate]:
        rates = []
        current_date = from_date
        while current_date <= to_date:
            # like the ECB, no fixings on weekends
            if current_date.weekday() < 5:
                rates.extend(self._rates_for(base_currency.upper(), current_date))
            current_date += timedelta(days=1)
        return rates

    def _rates_for(self, base: str, valuation_date: date) -> List[ExchangeRate]:
        base_rate = self.BASE_RATES.get(base)
        if base_rate is None:
            return []

        rates = []
        for target, target_rate in self.BASE_RATES.items():
            if target == base:
                continue
            # Small variation (±2%), seeded by pair and date for reproducibility
            variation = Decimal(str(random.Random(f"{base}{target}{valuation_date}").uniform(0.98, 1.02)))
            rate = (target_rate / base_rate * variation).quantize(Decimal("0.000001"))
            rates.append(ExchangeRate(base_currency=base, target_currency=target, rate=rate, date=valuation_date))
        return rates
