"""
ViewSets for the exchange API v1.
Thin HTTP layer over CurrencyService; domain errors are mapped to status codes here.
"""

import logging
import uuid

from django.conf import settings
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.exchange.api.v1.serializers import (
    ConversionRequestSerializer,
    ConversionResultSerializer,
    ExchangeRateSerializer,
    HistoricalRatesRequestSerializer,
    LatestRatesRequestSerializer,
)
from apps.exchange.domain.exceptions import (
    ConversionPathNotFound,
    CurrencyExcluded,
    ProviderError,
    UpstreamUnavailable,
)
from apps.exchange.domain.services import build_currency_service
from apps.exchange.infrastructure.providers.registry import get_configured_provider

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _correlation_id(header):
    """Reuse a caller-supplied UUID, otherwise start a new one."""
    if header:
        try:
            return str(uuid.UUID(header))
        except ValueError:
            logger.debug("Ignoring malformed %s header", CORRELATION_HEADER)
    return str(uuid.uuid4())


@extend_schema(tags=['Rates'])
class ExchangeRateViewSet(viewsets.ViewSet):

    def initial(self, request, *args, **kwargs):
        self.correlation_id = _correlation_id(request.headers.get(CORRELATION_HEADER))
        super().initial(request, *args, **kwargs)

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        correlation_id = getattr(self, "correlation_id", None)
        if correlation_id:
            response[CORRELATION_HEADER] = correlation_id
        return response

    def handle_exception(self, exc):
        if isinstance(exc, CurrencyExcluded):
            return Response({"error": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if isinstance(exc, ConversionPathNotFound):
            return Response(
                {"error": "Conversion failed. Please check your input currencies and amount."},
                status=status.HTTP_400_BAD_REQUEST
            )
        if isinstance(exc, UpstreamUnavailable):
            logger.warning("[%s] Rate provider unavailable: %s", getattr(self, "correlation_id", "-"), exc)
            return Response({"error": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        if isinstance(exc, ProviderError):
            logger.warning("[%s] Rate provider failed: %s", getattr(self, "correlation_id", "-"), exc)
            return Response(
                {"error": "Could not get exchange rates from the provider."},
                status=status.HTTP_502_BAD_GATEWAY
            )
        return super().handle_exception(exc)

    def get_service(self):
        return build_currency_service()

    @extend_schema(
        parameters=[
            OpenApiParameter("base_currency", OpenApiTypes.STR, description="Base currency code (default EUR)"),
        ],
        responses=ExchangeRateSerializer(many=True),
        description="Get the latest exchange rates for a base currency"
    )
    @action(detail=False, methods=['get'], url_path='latest')
    def latest(self, request):
        params = LatestRatesRequestSerializer(data=request.query_params)
        if not params.is_valid():
            return Response({"error": params.errors}, status=status.HTTP_400_BAD_REQUEST)

        rates = self.get_service().get_latest_rates(
            params.validated_data["base_currency"],
            correlation_id=self.correlation_id
        )
        if not rates:
            return Response({"error": "Could not retrieve latest rates."}, status=status.HTTP_404_NOT_FOUND)

        return Response(ExchangeRateSerializer(rates, many=True).data)

    @extend_schema(
        request=ConversionRequestSerializer,
        responses=ConversionResultSerializer,
        description="Convert an amount from one currency to another"
    )
    @action(detail=False, methods=['post'], url_path='convert')
    def convert(self, request):
        serializer = ConversionRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().convert(serializer.to_domain(), correlation_id=self.correlation_id)
        return Response(ConversionResultSerializer(result).data)

    @extend_schema(
        parameters=[
            OpenApiParameter("base_currency", OpenApiTypes.STR, required=True, description="Base currency code (e.g. USD)"),
            OpenApiParameter("from_date", OpenApiTypes.DATE, required=True, description="Start date (YYYY-MM-DD)"),
            OpenApiParameter("to_date", OpenApiTypes.DATE, required=True, description="End date (YYYY-MM-DD)"),
            OpenApiParameter("page", OpenApiTypes.INT, description="Page number, starting at 1"),
            OpenApiParameter("page_size", OpenApiTypes.INT, description="Rates per page (max 100)"),
        ],
        responses=ExchangeRateSerializer(many=True),
        description="Get a page of historical exchange rates for a base currency"
    )
    @action(detail=False, methods=['get'], url_path='historical')
    def historical(self, request):
        params = HistoricalRatesRequestSerializer(data=request.query_params)
        if not params.is_valid():
            return Response({"error": params.errors}, status=status.HTTP_400_BAD_REQUEST)

        data = params.validated_data
        rates = self.get_service().get_historical_rates(
            data["base_currency"],
            data["from_date"],
            data["to_date"],
            page=data["page"],
            page_size=data["page_size"],
            correlation_id=self.correlation_id
        )
        if not rates:
            return Response(
                {"error": "No historical rates found for the specified criteria."},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response(ExchangeRateSerializer(rates, many=True).data)


@extend_schema(tags=['Health'], responses=OpenApiTypes.OBJECT)
class HealthView(APIView):

    def get(self, request):
        provider = get_configured_provider()
        breaker = getattr(provider, "circuit_breaker", None)
        logger.info("Health check requested")

        return Response({
            "status": "Healthy",
            "timestamp": timezone.now(),
            "version": settings.API_VERSION,
            "service": "Currency Converter API",
            "provider": getattr(provider, "name", provider.__class__.__name__),
            "circuit_state": breaker.state if breaker is not None else None,
        })
