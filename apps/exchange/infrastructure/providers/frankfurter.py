import logging
import time
import uuid
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

import requests
from django.conf import settings

from apps.exchange.domain.exceptions import MalformedResponse, UpstreamError
from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.domain.models import ExchangeRate
from apps.exchange.infrastructure.resilience import CircuitBreaker, retry

logger = logging.getLogger(__name__)


class FrankfurterProvider(BaseExchangeRateProvider):
    """
    Frankfurter API provider (ECB reference rates, EUR based).

    Every HTTP attempt runs through the circuit breaker, and failed attempts
    are retried with exponential backoff:

        GET /latest?from=USD
        GET /2024-01-01..2024-01-31?from=USD
    """

    name = "frankfurter"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_count: Optional[int] = None,
        failure_threshold: Optional[int] = None,
        reset_timeout: Optional[float] = None,
        sleep=time.sleep,
        clock=time.monotonic,
    ):
        self.base_url = (base_url or settings.FRANKFURTER_URL).rstrip("/")
        self.timeout = _setting(timeout, settings.FRANKFURTER_TIMEOUT)
        retry_count = _setting(retry_count, settings.PROVIDER_RETRY_COUNT)

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=_setting(failure_threshold, settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD),
            reset_timeout=_setting(reset_timeout, settings.CIRCUIT_BREAKER_RESET_TIMEOUT),
            clock=clock,
            name=self.name,
        )
        self._get = retry(count=retry_count, sleep=sleep)(self.circuit_breaker(self._send))

    def get_latest_rates(self, base_currency: str, correlation_id: Optional[str] = None) -> List[ExchangeRate]:
        """
        Fetch the latest rates for every target relative to base_currency.

        Response format: {"base": "USD", "date": "2024-05-21", "rates": {"EUR": 0.92}}
        """
        correlation_id = correlation_id or str(uuid.uuid4())
        data = self._get_json("/latest", {"from": base_currency.upper()}, correlation_id)

        try:
            base = _currency_code(data["base"])
            valuation_date = date.fromisoformat(data["date"])
            return [
                ExchangeRate(
                    base_currency=base,
                    target_currency=_currency_code(target),
                    rate=_to_decimal(value),
                    date=valuation_date,
                )
                for target, value in _mapping(data["rates"]).items()
            ]
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise self._malformed(correlation_id, "/latest", e) from e

    def get_historical_rates(
        self,
        base_currency: str,
        from_date: date,
        to_date: date,
        correlation_id: Optional[str] = None
    ) -> List[ExchangeRate]:
        """
        Fetch a date range and flatten it to one rate per (date, target).

        Response format: {"base": "USD", "rates": {"2024-05-21": {"EUR": 0.92}}}
        Dates come out ascending, targets in payload order.
        """
        correlation_id = correlation_id or str(uuid.uuid4())
        path = f"/{from_date:%Y-%m-%d}..{to_date:%Y-%m-%d}"
        data = self._get_json(path, {"from": base_currency.upper()}, correlation_id)

        try:
            base = _currency_code(data["base"])
            days = sorted(
                (date.fromisoformat(day), _mapping(rates))
                for day, rates in _mapping(data["rates"]).items()
            )
            return [
                ExchangeRate(
                    base_currency=base,
                    target_currency=_currency_code(target),
                    rate=_to_decimal(value),
                    date=valuation_date,
                )
                for valuation_date, rates in days
                for target, value in rates.items()
            ]
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise self._malformed(correlation_id, path, e) from e

    def _get_json(self, path: str, params: Dict[str, str], correlation_id: str) -> dict:
        response = self._get(path, params, correlation_id)
        try:
            data = response.json(parse_float=Decimal)
        except ValueError as e:
            raise self._malformed(correlation_id, path, e) from e
        if not isinstance(data, dict):
            raise self._malformed(correlation_id, path, f"expected a JSON object, got {type(data).__name__}")
        return data

    def _send(self, path: str, params: Dict[str, str], correlation_id: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info("[%s] GET %s params=%s", correlation_id, url, params)
        started = time.perf_counter()

        try:
            response = requests.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(
                "[%s] GET %s failed after %.0fms: %s",
                correlation_id, url, (time.perf_counter() - started) * 1000, e
            )
            raise UpstreamError(f"Request to {url} failed: {e}") from e

        logger.info(
            "[%s] GET %s -> %s in %.0fms",
            correlation_id, url, response.status_code, (time.perf_counter() - started) * 1000
        )
        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                f"Frankfurter returned HTTP {response.status_code} for {url}",
                status_code=response.status_code,
            )
        return response

    def _malformed(self, correlation_id: str, path: str, cause) -> MalformedResponse:
        logger.error("[%s] Invalid response from Frankfurter for %s: %s", correlation_id, path, cause)
        return MalformedResponse(f"Invalid response from Frankfurter for {path}: {cause}")


def _setting(value, default):
    return default if value is None else value


def _mapping(value) -> dict:
    if not isinstance(value, dict):
        raise TypeError(f"expected an object, got {type(value).__name__}")
    return value


def _currency_code(value) -> str:
    if not isinstance(value, str) or len(value) != 3:
        raise ValueError(f"invalid currency code {value!r}")
    return value.upper()


def _to_decimal(value) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise TypeError(f"rate must be a number, got {value!r}")
    return value if isinstance(value, Decimal) else Decimal(str(value))
