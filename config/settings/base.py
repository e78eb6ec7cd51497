"""Base settings shared by every environment.

Environment specific modules (`dev.py`, `test.py`) import everything from
here and override what they need. Values that differ per deployment are
read with python-decouple so they can come from the process environment or
a `.env` file.
"""
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

from decouple import Csv, config

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = config("DJANGO_SECRET_KEY", default="replace-me-in-production")
DEBUG = config("DEBUG", default=False, cast=bool)
ALLOWED_HOSTS = config("DJANGO_ALLOWED_HOSTS", default="*", cast=Csv())

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third-party apps
    "rest_framework",
    "django_filters",
    "cloudinary",
    # Domain apps
    "users",
    "customers.apps.CustomersConfig",
    "booking",
    "payments",
    "commissions",
    "leads.apps.LeadsConfig",
    "notifications.apps.NotificationsConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": config("DB_ENGINE", default="django.db.backends.sqlite3"),
        "NAME": config("DB_NAME", default=str(BASE_DIR / "db.sqlite3")),
        "USER": config("DB_USER", default=""),
        "PASSWORD": config("DB_PASSWORD", default=""),
        "HOST": config("DB_HOST", default=""),
        "PORT": config("DB_PORT", default=""),
    }
}

AUTH_USER_MODEL = "users.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = config("TIME_ZONE", default="UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.OrderingFilter",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 10,
    "EXCEPTION_HANDLER": "booking.exceptions.engine_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=config("JWT_ACCESS_MINUTES", default=60, cast=int)),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
}

# Cloudinary (agent avatars)
CLOUDINARY_URL = config("CLOUDINARY_URL", default="")

# Money
DEFAULT_CURRENCY = config("DEFAULT_CURRENCY", default="USD")

# Payments
PAYMENTS_GATEWAY = config("PAYMENTS_GATEWAY", default="fake")
DUPLICATE_PAYMENT_WINDOW_MINUTES = config("DUPLICATE_PAYMENT_WINDOW_MINUTES", default=5, cast=int)

# Commissions: (tier, min, max, rate %) checked in order, max=None means unbounded
COMMISSION_TIERS = [
    ("junior", Decimal("0"), Decimal("50000"), Decimal("8")),
    ("standard", Decimal("50001"), Decimal("200000"), Decimal("10")),
    ("senior", Decimal("200001"), Decimal("500000"), Decimal("12")),
    ("premium", Decimal("500001"), None, Decimal("15")),
]
DEFAULT_COMMISSION_TIER = ("standard", Decimal("10"))
LARGE_DEAL_THRESHOLD = config("LARGE_DEAL_THRESHOLD", default="500000", cast=Decimal)
LARGE_DEAL_BONUS_RATE = Decimal("10")

# Adapters, keyed by namespaced adapter name
ADAPTERS_CONFIG = {
    "payments.fake": {
        "success_rate": config("FAKE_GATEWAY_SUCCESS_RATE", default=0.95, cast=float),
    },
    "payments.stripe": {
        "api_key": config("STRIPE_SECRET_KEY", default=""),
        "webhook_secret": config("STRIPE_WEBHOOK_SECRET", default=""),
    },
    "notifications.sendgrid": {
        "api_key": config("SENDGRID_API_KEY", default=""),
        "from_email": config("DEFAULT_FROM_EMAIL", default="no-reply@agencydesk.local"),
    },
    "notifications.twilio": {
        "account_sid": config("TWILIO_ACCOUNT_SID", default=""),
        "auth_token": config("TWILIO_AUTH_TOKEN", default=""),
        "from_number": config("TWILIO_FROM_NUMBER", default=""),
    },
}

NOTIFICATIONS = {
    "email": config("NOTIFICATIONS_EMAIL_ADAPTER", default="fake_email"),
    "sms": config("NOTIFICATIONS_SMS_ADAPTER", default="fake_sms"),
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {process:d} {thread:d} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {asctime} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": config("LOG_LEVEL", default="INFO"),
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "django.request": {
            "handlers": ["console"],
            "level": "ERROR",
            "propagate": False,
        },
    },
}
