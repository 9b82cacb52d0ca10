# public/views/shipping.py
"""
GET /api/public/shipping/quotes/?weight_grams=<int>

Quotes from every active carrier for a cart weight
(fixed_price + price_per_kg x kg), cheapest first.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from public.serializers import ShippingQuoteQuerySerializer
from public.views.common import PublicCatalogThrottle
from store.models import ShippingCarrier
from store.serializers import CarrierQuoteSerializer


class ShippingQuoteView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicCatalogThrottle]

    @extend_schema(
        tags=["Public"],
        parameters=[ShippingQuoteQuerySerializer],
        responses={
            200: CarrierQuoteSerializer(many=True),
            400: OpenApiResponse(description="weight_grams must be a non-negative integer"),
        },
    )
    def get(self, request, *args, **kwargs):
        s = ShippingQuoteQuerySerializer(data=request.query_params)
        s.is_valid(raise_exception=True)
        weight = s.validated_data["weight_grams"]

        quotes = [
            {
                "carrier_id": carrier.id,
                "name": carrier.name,
                "code": carrier.code,
                "delivery_time_days": carrier.delivery_time_days,
                "price": carrier.quote(weight_grams=weight),
            }
            for carrier in ShippingCarrier.objects.filter(is_active=True)
        ]
        quotes.sort(key=lambda q: (q["price"], q["name"]))

        return Response(CarrierQuoteSerializer(quotes, many=True).data, status=status.HTTP_200_OK)
