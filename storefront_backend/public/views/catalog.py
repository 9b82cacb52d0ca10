# public/views/catalog.py
"""
PUBLIC CATALOG (ONLINE STORE)

GET /api/public/catalog/
GET /api/public/catalog/<product_id>/

Rules:
- AllowAny (public)
- Active products only, in storefront order (positioned first, then name)
- Backend is source of truth for price; no sku / timestamps exposed

Security hardening:
- Throttle to reduce scraping/abuse
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from products.models import Product
from products.serializers import PublicProductSerializer
from public.views.common import PublicCatalogThrottle


def _truthy(value) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes"}


class PublicCatalogView(APIView):
    """
    GET /api/public/catalog/?featured=true&category=café
    """

    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicCatalogThrottle]

    @extend_schema(
        tags=["Public"],
        parameters=[
            OpenApiParameter(
                name="featured",
                type=bool,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Only featured products.",
            ),
            OpenApiParameter(
                name="category",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
            ),
        ],
        responses={
            200: PublicProductSerializer(many=True),
            429: OpenApiResponse(description="Rate limited"),
        },
        description="Public product catalog (AllowAny).",
    )
    def get(self, request, *args, **kwargs):
        products = Product.objects.for_catalog()

        if _truthy(request.query_params.get("featured")):
            products = products.filter(featured=True)

        category = (request.query_params.get("category") or "").strip()
        if category:
            products = products.filter(category__iexact=category)

        return Response(
            PublicProductSerializer(products, many=True).data,
            status=status.HTTP_200_OK,
        )


class PublicProductDetailView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicCatalogThrottle]

    @extend_schema(
        tags=["Public"],
        responses={
            200: PublicProductSerializer,
            404: OpenApiResponse(description="Product not found or inactive"),
        },
    )
    def get(self, request, product_id, *args, **kwargs):
        product = get_object_or_404(Product.objects.active(), id=product_id)
        return Response(PublicProductSerializer(product).data, status=status.HTTP_200_OK)
