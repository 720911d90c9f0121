from django.conf import settings
from django.core import checks

from .config import OzowConfig, PayFastConfig

GATEWAY_CHECKS = (
    ("ozow", OzowConfig, "payments.E001"),
    ("payfast", PayFastConfig, "payments.E002"),
)


def check_gateway_configuration(app_configs=None, **kwargs):
    errors = []
    enabled = getattr(settings, "PAYMENT_GATEWAYS", [])
    for name, config_cls, check_id in GATEWAY_CHECKS:
        if name not in enabled:
            continue
        missing = config_cls.from_settings().missing()
        if missing:
            errors.append(
                checks.Error(
                    f"{name} gateway is enabled but not configured",
                    hint=f"Set {', '.join(missing)} in settings.{name.upper()} (or disable it in PAYMENT_GATEWAYS).",
                    id=check_id,
                )
            )
    return errors
