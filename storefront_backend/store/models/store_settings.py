# store/models/store_settings.py

from django.db import models


class StoreSettings(models.Model):
    """
    Store-wide configuration, edited from the back office.

    Singleton: always row pk=1 (use StoreSettings.load()).

    - Store identity (name, CNPJ, contact)
    - Sender address printed on shipping labels
    - Mercado Pago credentials. The access token is server-only and never
      serialized back out; the public key is safe for the storefront widget.
    """

    SINGLETON_PK = 1

    store_name = models.CharField(max_length=160, blank=True, default="")
    store_cnpj = models.CharField(max_length=18, blank=True, default="")
    store_email = models.EmailField(blank=True, default="")
    store_phone = models.CharField(max_length=40, blank=True, default="")
    whatsapp_number = models.CharField(max_length=40, blank=True, default="")

    sender_name = models.CharField(max_length=160, blank=True, default="")
    sender_street = models.CharField(max_length=255, blank=True, default="")
    sender_number = models.CharField(max_length=20, blank=True, default="")
    sender_complement = models.CharField(max_length=120, blank=True, default="")
    sender_neighborhood = models.CharField(max_length=120, blank=True, default="")
    sender_city = models.CharField(max_length=120, blank=True, default="")
    sender_state = models.CharField(max_length=60, blank=True, default="")
    sender_postal_code = models.CharField(max_length=8, blank=True, default="")

    mercadopago_access_token = models.CharField(max_length=255, blank=True, default="")
    mercadopago_public_key = models.CharField(max_length=255, blank=True, default="")

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "store settings"
        verbose_name_plural = "store settings"

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        super().save(*args, **kwargs)

    @classmethod
    def load(cls) -> "StoreSettings":
        obj, _ = cls.objects.get_or_create(pk=cls.SINGLETON_PK)
        return obj

    @property
    def sender_display_name(self) -> str:
        return self.sender_name or self.store_name

    def __str__(self):
        return self.store_name or "Store settings"
