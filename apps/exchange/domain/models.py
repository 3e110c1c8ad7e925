"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ExchangeRate:

    base_currency: str
    target_currency: str
    rate: Decimal
    date: date
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")

    def convert(self, amount: Decimal) -> Decimal:
        return amount * self.rate


@dataclass(frozen=True)
class ConversionRequest:

    amount: Decimal
    from_currency: str
    to_currency: str

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f"amount must be positive, got {self.amount}")
        for name in ("from_currency", "to_currency"):
            code = (getattr(self, name) or "").strip().upper()
            if len(code) != 3:
                raise ValueError(f"{name} must be exactly 3 characters, got '{code}'")
            object.__setattr__(self, name, code)


@dataclass(frozen=True)
class ConversionResult:

    converted_amount: Decimal
    from_currency: str
    to_currency: str
    rate: Decimal
    date: datetime
