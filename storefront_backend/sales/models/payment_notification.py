# sales/models/payment_notification.py

import uuid

from django.db import models


class PaymentNotification(models.Model):
    """
    Audit log of every payment signal received (webhook or return page).

    - order is NULL when the external_reference matched no order; those rows
      are the ones to investigate (possible lost order)
    - outcome records what the lifecycle did with the signal
    """

    SOURCE_WEBHOOK = "webhook"
    SOURCE_RETURN_PAGE = "return_page"

    SOURCE_CHOICES = [
        (SOURCE_WEBHOOK, "Webhook"),
        (SOURCE_RETURN_PAGE, "Return page"),
    ]

    OUTCOME_APPLIED = "applied"
    OUTCOME_DUPLICATE = "duplicate"
    OUTCOME_STALE = "stale"
    OUTCOME_IGNORED = "ignored"
    OUTCOME_UNKNOWN_ORDER = "unknown_order"

    OUTCOME_CHOICES = [
        (OUTCOME_APPLIED, "Applied"),
        (OUTCOME_DUPLICATE, "Duplicate (no-op)"),
        (OUTCOME_STALE, "Stale (not applied)"),
        (OUTCOME_IGNORED, "Ignored"),
        (OUTCOME_UNKNOWN_ORDER, "Unknown order"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "sales.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payment_notifications",
    )

    source = models.CharField(max_length=20, choices=SOURCE_CHOICES)
    external_reference = models.CharField(max_length=128, blank=True, default="")
    payment_id = models.CharField(max_length=64, blank=True, default="")

    gateway_status = models.CharField(max_length=40, blank=True, default="")
    mapped_status = models.CharField(max_length=20, blank=True, default="")
    previous_status = models.CharField(max_length=20, blank=True, default="")
    outcome = models.CharField(max_length=20, choices=OUTCOME_CHOICES)

    payload = models.JSONField(default=dict, blank=True)

    received_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-received_at"]
        indexes = [
            models.Index(fields=["payment_id"], name="payment_notif_payment_idx"),
            models.Index(fields=["outcome"], name="payment_notif_outcome_idx"),
            models.Index(fields=["received_at"], name="payment_notif_received_idx"),
        ]

    def __str__(self):
        return f"{self.source}:{self.payment_id or '-'} -> {self.outcome}"
