from .base import *  # noqa

DEBUG = True

# Use SQLite for testing to avoid needing a running PostgreSQL instance.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": [],
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

OZOW = {
    **OZOW,
    "SITE_CODE": "TEST-001",
    "PRIVATE_KEY": "SECRET",
    "API_KEY": "api-key",
    "SUCCESS_URL": "https://shop.test/checkout/success",
    "CANCEL_URL": "https://shop.test/checkout/cancel",
    "ERROR_URL": "https://shop.test/checkout/error",
    "NOTIFY_URL": "https://api.shop.test/api/payments/ozow/notify/",
    "IS_TEST": True,
}

PAYFAST = {
    **PAYFAST,
    "MERCHANT_ID": "10000100",
    "MERCHANT_KEY": "46f0cd694581a",
    "PASSPHRASE": "",
    "RETURN_URL": "https://shop.test/checkout/success",
    "CANCEL_URL": "https://shop.test/checkout/cancel",
    "NOTIFY_URL": "https://api.shop.test/api/payments/payfast/itn/",
    "IS_SANDBOX": True,
    "VALIDATE_SOURCE_IP": False,
}
