"""
Serializers for the exchange bounded context.
Handles validation of API input and rendering of domain objects.
"""

from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from apps.exchange.domain.models import ConversionRequest


class CurrencyCodeField(serializers.CharField):

    def __init__(self, **kwargs):
        kwargs.setdefault("min_length", 3)
        kwargs.setdefault("max_length", 3)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data).upper()
        if not value.isalpha():
            raise serializers.ValidationError("Currency code must contain letters only.")
        return value


class ExchangeRateSerializer(serializers.Serializer):
    base_currency = serializers.CharField(read_only=True)
    target_currency = serializers.CharField(read_only=True)
    rate = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    date = serializers.DateField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class LatestRatesRequestSerializer(serializers.Serializer):
    base_currency = CurrencyCodeField(default="EUR")


class ConversionRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=20,
        decimal_places=6,
        min_value=Decimal("0.000001"),
        error_messages={"min_value": "Amount must be greater than zero."},
    )
    from_currency = CurrencyCodeField()
    to_currency = CurrencyCodeField()

    def to_domain(self) -> ConversionRequest:
        return ConversionRequest(**self.validated_data)


class ConversionResultSerializer(serializers.Serializer):
    converted_amount = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    from_currency = serializers.CharField(read_only=True)
    to_currency = serializers.CharField(read_only=True)
    rate = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    date = serializers.DateTimeField(read_only=True)


class HistoricalRatesRequestSerializer(serializers.Serializer):
    base_currency = CurrencyCodeField()
    from_date = serializers.DateField()
    to_date = serializers.DateField()
    page = serializers.IntegerField(min_value=1, default=1)
    page_size = serializers.IntegerField(min_value=1, max_value=100, default=10)

    def validate(self, attrs):
        today = timezone.localdate()
        if attrs["from_date"] > attrs["to_date"]:
            raise serializers.ValidationError({"from_date": "from_date cannot be after to_date."})
        if attrs["from_date"] > today:
            raise serializers.ValidationError({"from_date": "from_date cannot be in the future."})
        if attrs["to_date"] > today:
            raise serializers.ValidationError({"to_date": "to_date cannot be in the future."})
        return attrs
