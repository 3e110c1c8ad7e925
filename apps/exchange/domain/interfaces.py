from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Callable, List, Optional, TypeVar

from apps.exchange.domain.models import ExchangeRate

T = TypeVar("T")


class BaseExchangeRateProvider(ABC):
    @abstractmethod
    def get_latest_rates(self, base_currency: str, correlation_id: Optional[str] = None) -> List[ExchangeRate]:
        pass

    @abstractmethod
    def get_historical_rates(
        self,
        base_currency: str,
        from_date: date,
        to_date: date,
        correlation_id: Optional[str] = None
    ) -> List[ExchangeRate]:
        pass


class BaseCacheService(ABC):
    @abstractmethod
    def get_or_create(self, key: str, factory: Callable[[], Optional[T]], ttl: Optional[timedelta] = None) -> Optional[T]:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass
