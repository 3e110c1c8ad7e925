"""
Domain exceptions for the exchange bounded context.

The API layer maps each of these to an HTTP status; nothing below it catches them.
"""


class ExchangeError(Exception):
    pass


class CurrencyExcluded(ExchangeError, ValueError):

    def __init__(self, *currencies: str):
        self.currencies = tuple(c.upper() for c in currencies)
        if len(self.currencies) == 1:
            message = f"Currency {self.currencies[0]} is excluded."
        else:
            message = f"One of the currencies is excluded: {', '.join(self.currencies)}."
        super().__init__(message)


class ConversionPathNotFound(ExchangeError):

    def __init__(self, from_currency: str, to_currency: str):
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(f"No conversion path from {from_currency} to {to_currency}")


class ProviderError(ExchangeError):
    """Base class for failures raised by an exchange rate provider."""


class UpstreamUnavailable(ProviderError):
    """The circuit breaker is open; the call was not attempted."""


class UpstreamError(ProviderError):

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponse(ProviderError):
    """The upstream payload could not be mapped to exchange rates."""
