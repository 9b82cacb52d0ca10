# public/views/config.py
"""
GET /api/public/config/

Storefront bootstrap values: Mercado Pago public key (never the access
token), currency, subscription pricing and store contact.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from public.serializers import PublicConfigSerializer
from public.services.mercadopago import get_currency, get_public_key
from public.views.common import PublicCatalogThrottle
from store.models import StoreSettings


class PublicConfigView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicCatalogThrottle]

    @extend_schema(tags=["Public"], responses={200: PublicConfigSerializer})
    def get(self, request, *args, **kwargs):
        store = StoreSettings.load()
        subscription = getattr(settings, "SUBSCRIPTION", {}) or {}

        payload = {
            "mercadopago_public_key": get_public_key(),
            "currency": get_currency(),
            "subscription_unit_price": Decimal(str(subscription.get("UNIT_PRICE", "35.00"))),
            "subscription_min_products": int(subscription.get("MIN_PRODUCTS", 2)),
            "store_name": store.store_name,
            "whatsapp_number": store.whatsapp_number,
        }
        return Response(PublicConfigSerializer(payload).data, status=status.HTTP_200_OK)
