# products/views/product.py

"""
PRODUCT VIEWSET (BACK OFFICE)

- Staff CRUD (capability: catalog.edit)
- Delete is admin-only; products referenced by orders keep their order
  lines (OrderItem.product is SET_NULL and the name is snapshotted)
- Low-stock listing for restocking
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_CATALOG_EDIT, ROLE_ADMIN, HasCapability
from products.models import Product
from products.serializers import ProductSerializer


class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CATALOG_EDIT
    filterset_fields = ["is_active", "featured", "category"]

    def get_queryset(self):
        qs = Product.objects.all().order_by("display_order", "name")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(sku__icontains=q))

        return qs

    # -----------------------------
    # Admin-only delete
    # -----------------------------
    def destroy(self, request, *args, **kwargs):
        if getattr(request.user, "role", None) != ROLE_ADMIN:
            return Response(
                {"detail": "Only admins can delete products."},
                status=status.HTTP_403_FORBIDDEN,
            )
        return super().destroy(request, *args, **kwargs)

    # -----------------------------
    # Low stock
    # -----------------------------
    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="threshold",
                type=int,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Stock at or below this value (default 5).",
            ),
        ],
        responses={200: ProductSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        """
        GET /api/products/products/low-stock/?threshold=5
        """
        raw_threshold = (request.query_params.get("threshold") or "5").strip()
        try:
            threshold = int(raw_threshold)
            if threshold < 0:
                raise ValueError
        except ValueError:
            return Response(
                {"detail": "threshold must be a non-negative integer"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        qs = Product.objects.active().filter(stock__lte=threshold).order_by("stock", "name")
        data = self.get_serializer(qs, many=True).data
        return Response({"count": len(data), "results": data})
