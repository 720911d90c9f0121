from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.payments"

    def ready(self) -> None:
        from django.core import checks

        from .checks import check_gateway_configuration

        checks.register(check_gateway_configuration, "payments")
