from django.db import models


class PaymentLog(models.Model):
    """
    Raw record of every inbound gateway callback, valid or not.
    """

    KIND_CHOICES = [
        ("notify", "Server notify"),
        ("redirect", "Browser redirect"),
        ("itn", "PayFast ITN"),
    ]

    provider = models.CharField(max_length=20, db_index=True)
    reference = models.CharField(max_length=100, blank=True, db_index=True)
    transaction_id = models.CharField(max_length=100, blank=True)
    raw_status = models.CharField(max_length=50, blank=True)
    kind = models.CharField(max_length=20, choices=KIND_CHOICES)
    outcome = models.CharField(max_length=30, blank=True)
    raw_payload = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.provider}:{self.reference} {self.raw_status} ({self.outcome or 'received'})"
