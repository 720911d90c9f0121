import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me-in-production")

DEBUG = False

ALLOWED_HOSTS: list[str] = os.getenv("ALLOWED_HOSTS", "*").split(",")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third-party
    "rest_framework",
    "rest_framework_simplejwt",
    "django_filters",
    "corsheaders",
    "drf_yasg",
    # Local apps
    "core",
    "apps.authentication",
    "apps.products",
    "apps.announcements",
    "apps.contacts",
    "apps.shipping",
    "apps.orders",
    "apps.payments",
    "apps.notifications",
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "core.middleware.RequestLogMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
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
ASGI_APPLICATION = "config.asgi.application"


DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("POSTGRES_DB", "poolbeanbags"),
        "USER": os.getenv("POSTGRES_USER", "poolbeanbags"),
        "PASSWORD": os.getenv("POSTGRES_PASSWORD", "poolbeanbags"),
        "HOST": os.getenv("POSTGRES_HOST", "localhost"),
        "PORT": os.getenv("POSTGRES_PORT", "5432"),
    }
}

AUTH_USER_MODEL = "authentication.User"

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

LANGUAGE_CODE = "en-za"

TIME_ZONE = "Africa/Johannesburg"

USE_I18N = True

USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_PAGINATION_CLASS": "core.pagination.CustomPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_FILTER_BACKENDS": (
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.OrderingFilter",
    ),
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": "300/hour",
        "user": "1000/hour",
        "contact": "10/hour",
    },
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=8),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
}

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
CELERY_TASK_ACKS_LATE = True

USE_REDIS_CACHE = bool(os.getenv("REDIS_CACHE_URL")) and not os.getenv("DISABLE_REDIS_CACHE")

if USE_REDIS_CACHE:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": os.getenv("REDIS_CACHE_URL", "redis://127.0.0.1:6379/1"),
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
            },
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        }
    }

CLIENT_ORIGIN = os.getenv("CLIENT_ORIGIN", "")
if CLIENT_ORIGIN:
    CORS_ALLOWED_ORIGINS = CLIENT_ORIGIN.split(",")
else:
    CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Email
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")
EMAIL_HOST = os.getenv("EMAIL_HOST", "smtp.resend.com")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "465"))
EMAIL_HOST_USER = os.getenv("EMAIL_HOST_USER", "resend")
EMAIL_HOST_PASSWORD = os.getenv("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_SSL = os.getenv("EMAIL_USE_SSL", "true").lower() == "true"
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "Pool Beanbags <orders@poolbeanbags.co.za>")
ORDERS_INBOX = os.getenv("ORDERS_INBOX", "orders@poolbeanbags.co.za")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "apps": {"handlers": ["console"], "level": os.getenv("LOG_LEVEL", "INFO"), "propagate": False},
        "core": {"handlers": ["console"], "level": os.getenv("LOG_LEVEL", "INFO"), "propagate": False},
    },
}

# Payments / external services
PAYMENT_GATEWAYS = [g.strip() for g in os.getenv("PAYMENT_GATEWAYS", "ozow,payfast").split(",") if g.strip()]

OZOW = {
    "SITE_CODE": os.getenv("OZOW_SITE_CODE", ""),
    "PRIVATE_KEY": os.getenv("OZOW_PRIVATE_KEY", ""),
    "API_KEY": os.getenv("OZOW_API_KEY", ""),
    "SUCCESS_URL": os.getenv("OZOW_SUCCESS_URL", ""),
    "CANCEL_URL": os.getenv("OZOW_CANCEL_URL", ""),
    "ERROR_URL": os.getenv("OZOW_ERROR_URL", ""),
    "NOTIFY_URL": os.getenv("OZOW_NOTIFY_URL", ""),
    "IS_TEST": os.getenv("OZOW_IS_TEST", "true").lower() == "true",
    "POST_URL": os.getenv("OZOW_POST_URL", "https://pay.ozow.com/"),
    "API_URL": os.getenv("OZOW_API_URL", "https://api.ozow.com"),
}

PAYFAST = {
    "MERCHANT_ID": os.getenv("PAYFAST_MERCHANT_ID", ""),
    "MERCHANT_KEY": os.getenv("PAYFAST_MERCHANT_KEY", ""),
    "PASSPHRASE": os.getenv("PAYFAST_PASSPHRASE", ""),
    "RETURN_URL": os.getenv("PAYFAST_RETURN_URL", ""),
    "CANCEL_URL": os.getenv("PAYFAST_CANCEL_URL", ""),
    "NOTIFY_URL": os.getenv("PAYFAST_NOTIFY_URL", ""),
    "IS_SANDBOX": os.getenv("PAYFAST_IS_SANDBOX", "true").lower() == "true",
    "VALIDATE_SOURCE_IP": os.getenv("PAYFAST_VALIDATE_SOURCE_IP", "false").lower() == "true",
    "VALID_NETWORKS": ["196.33.190.0/23", "197.221.189.0/24"],
}
