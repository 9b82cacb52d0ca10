# users/models/address.py

import uuid

from django.conf import settings
from django.db import models, transaction
from django.db.models import Q


class UserAddress(models.Model):
    """
    Saved shipping address. At most one default per user.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )

    label = models.CharField(max_length=60, blank=True, default="")
    postal_code = models.CharField(max_length=8)
    street = models.CharField(max_length=255)
    number = models.CharField(max_length=20)
    complement = models.CharField(max_length=120, blank=True, default="")
    neighborhood = models.CharField(max_length=120, blank=True, default="")
    city = models.CharField(max_length=120)
    state = models.CharField(max_length=60)
    country = models.CharField(max_length=2, default="BR")

    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_default", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=Q(is_default=True),
                name="uniq_default_address_per_user",
            ),
        ]

    @transaction.atomic
    def save(self, *args, **kwargs):
        if self.is_default:
            (
                UserAddress.objects.filter(user_id=self.user_id, is_default=True)
                .exclude(pk=self.pk)
                .update(is_default=False)
            )
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.street}, {self.number} - {self.city}/{self.state}"
