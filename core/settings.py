"""
Django settings for the currency exchange service.
Every exchange setting can be overridden by an environment variable of the same name.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-change-me")
DEBUG = os.getenv("DJANGO_DEBUG", "False").lower() in ("1", "true", "yes")
ALLOWED_HOSTS = [h for h in os.getenv("DJANGO_ALLOWED_HOSTS", "*").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "drf_spectacular",
    "apps.exchange",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "core.urls"
WSGI_APPLICATION = "core.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "exchange-rates",
    }
}

REST_FRAMEWORK = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
    "COERCE_DECIMAL_TO_STRING": True,
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Currency Converter API",
    "DESCRIPTION": "Latest rates, historical rates and currency conversion backed by Frankfurter",
    "VERSION": "1.0.0",
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "main_formatter",
        },
    },
    "loggers": {
        "": {
            "handlers": ["console"],
            "level": os.getenv("DJANGO_LOG_LEVEL", "INFO"),
        },
    },
    "formatters": {
        "main_formatter": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
}

# Exchange rate provider
CURRENCY_PROVIDER = os.getenv("CURRENCY_PROVIDER", "frankfurter")
FRANKFURTER_URL = os.getenv("FRANKFURTER_URL", "https://api.frankfurter.app")
FRANKFURTER_TIMEOUT = float(os.getenv("FRANKFURTER_TIMEOUT", "10"))

# Resilience
PROVIDER_RETRY_COUNT = int(os.getenv("PROVIDER_RETRY_COUNT", "3"))
CIRCUIT_BREAKER_FAILURE_THRESHOLD = int(os.getenv("CIRCUIT_BREAKER_FAILURE_THRESHOLD", "5"))
CIRCUIT_BREAKER_RESET_TIMEOUT = float(os.getenv("CIRCUIT_BREAKER_RESET_TIMEOUT", "30"))

# Currency policy and caching (TTLs in seconds)
EXCLUDED_CURRENCIES = [
    c.strip().upper() for c in os.getenv("EXCLUDED_CURRENCIES", "TRY,PLN,THB,MXN").split(",") if c.strip()
]
EXCHANGE_CACHE_ALIAS = os.getenv("EXCHANGE_CACHE_ALIAS", "default")
DEFAULT_CACHE_TTL = int(os.getenv("DEFAULT_CACHE_TTL", "300"))
LATEST_RATES_CACHE_TTL = int(os.getenv("LATEST_RATES_CACHE_TTL", "900"))
HISTORICAL_RATES_CACHE_TTL = int(os.getenv("HISTORICAL_RATES_CACHE_TTL", "86400"))

API_VERSION = "1.0"
