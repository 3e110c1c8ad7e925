import pytest
from decimal import Decimal
from datetime import date

from apps.exchange.domain.models import ConversionRequest, ExchangeRate


class TestExchangeRate:
    """Tests for the ExchangeRate entity."""

    def test_create_exchange_rate(self):
        """Test ExchangeRate structure and default created_at."""
        rate = ExchangeRate(
            base_currency="USD",
            target_currency="EUR",
            rate=Decimal("0.92"),
            date=date(2024, 5, 21)
        )

        assert rate.base_currency == "USD"
        assert rate.target_currency == "EUR"
        assert rate.rate == Decimal("0.92")
        assert rate.created_at is not None
        assert rate.created_at.tzinfo is not None

    @pytest.mark.parametrize("value", [Decimal("0"), Decimal("-1.5")])
    def test_rate_must_be_positive(self, value):
        """Test that a non-positive rate is rejected."""
        with pytest.raises(ValueError):
            ExchangeRate(base_currency="USD", target_currency="EUR", rate=value, date=date(2024, 5, 21))

    def test_self_rate_allowed(self):
        """Test that a rate of a currency against itself is accepted."""
        rate = ExchangeRate(base_currency="EUR", target_currency="EUR", rate=Decimal("1"), date=date(2024, 5, 21))

        assert rate.rate == Decimal("1")

    def test_is_immutable(self):
        """Test that ExchangeRate cannot be modified once built."""
        rate = ExchangeRate(base_currency="USD", target_currency="EUR", rate=Decimal("0.92"), date=date(2024, 5, 21))

        with pytest.raises(AttributeError):
            rate.rate = Decimal("1")

    def test_convert(self):
        rate = ExchangeRate(base_currency="USD", target_currency="EUR", rate=Decimal("0.9"), date=date(2024, 5, 21))

        assert rate.convert(Decimal("100")) == Decimal("90")


class TestConversionRequest:
    """Tests for the ConversionRequest value object."""

    def test_normalizes_currency_codes(self):
        """Test that currency codes are upper-cased."""
        request = ConversionRequest(amount=Decimal("10"), from_currency="usd", to_currency=" eur ")

        assert request.from_currency == "USD"
        assert request.to_currency == "EUR"

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10")])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ValueError):
            ConversionRequest(amount=amount, from_currency="USD", to_currency="EUR")

    def test_currency_code_length(self):
        """Test that codes must be exactly 3 characters."""
        with pytest.raises(ValueError):
            ConversionRequest(amount=Decimal("10"), from_currency="US", to_currency="EUR")
