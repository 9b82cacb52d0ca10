# public/apps.py

"""
PUBLIC APP CONFIG

Storefront (AllowAny) module:
- Product catalog, store config, CEP lookup, freight quotes
- Checkout + Mercado Pago preference
- Mercado Pago webhook + return pages
"""

from django.apps import AppConfig


class PublicConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "public"
    verbose_name = "Public Online Store"
