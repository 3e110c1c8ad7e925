from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.exchange.api.v1.views import ExchangeRateViewSet, HealthView

router = DefaultRouter()
router.register(r'rates', ExchangeRateViewSet, basename='exchange-rate')

urlpatterns = [
    path('health/', HealthView.as_view(), name='health'),
    path('', include(router.urls)),
]
