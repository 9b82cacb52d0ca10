# users/models/profile.py

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from users.accounts import (
    ACCOUNT_BUSINESS,
    ACCOUNT_PERSONAL,
    ACCOUNT_TYPE_CHOICES,
)


class CustomerProfile(models.Model):
    """
    Shopper profile + PF/PJ documents.

    Storage is flat; users/accounts.py is the typed view over it
    (PersonalAccountInfo | BusinessAccountInfo). Only the active variant's
    fields may be filled.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )

    full_name = models.CharField(max_length=160, blank=True, default="")
    phone = models.CharField(max_length=40, blank=True, default="")

    account_type = models.CharField(
        max_length=2,
        choices=ACCOUNT_TYPE_CHOICES,
        default=ACCOUNT_PERSONAL,
    )

    # PF
    cpf = models.CharField(max_length=11, blank=True, default="")
    birth_date = models.DateField(null=True, blank=True)

    # PJ
    cnpj = models.CharField(max_length=14, blank=True, default="")
    state_registration = models.CharField(max_length=30, blank=True, default="")
    xml_email = models.EmailField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def clean(self):
        if self.account_type == ACCOUNT_PERSONAL and (
            self.cnpj or self.state_registration or self.xml_email
        ):
            raise ValidationError("PF profile cannot carry company documents")
        if self.account_type == ACCOUNT_BUSINESS and (self.cpf or self.birth_date):
            raise ValidationError("PJ profile cannot carry personal documents")

    def __str__(self):
        return f"{self.user} [{self.account_type}]"
