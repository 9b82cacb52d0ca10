# sales/views/reports.py

"""
PATH: sales/views/reports.py

BACK-OFFICE DASHBOARD

GET /api/sales/reports/dashboard/   (capability: reports.view)

Figures:
- total_revenue / revenue_this_month: paid orders only (approved, shipped, delivered)
- total_orders / orders_this_month / pending_orders
- total_customers, total_products (active)
- top_products: top 5 by quantity sold on paid orders
"""

from __future__ import annotations

from datetime import datetime, time
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import Count, Q, Sum
from django.utils import timezone
from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import CAP_REPORTS_VIEW, ROLE_CUSTOMER, HasCapability
from products.models import Product
from sales.models import Order, OrderItem

User = get_user_model()

TOP_PRODUCTS_LIMIT = 5


def _money(x) -> str:
    """
    JSON-safe money string.
    """
    if x is None:
        return "0.00"
    if isinstance(x, Decimal):
        return f"{x:.2f}"
    return f"{Decimal(str(x)):.2f}"


def _month_start():
    tz = timezone.get_current_timezone()
    today = timezone.localdate()
    return timezone.make_aware(datetime.combine(today.replace(day=1), time.min), tz)


def top_products(limit: int = TOP_PRODUCTS_LIMIT) -> list[dict]:
    rows = (
        OrderItem.objects.filter(order__status__in=Order.PAID_STATUSES)
        .values("product_id", "product_name")
        .annotate(quantity=Sum("quantity"), revenue=Sum("subtotal"))
        .order_by("-quantity", "product_name")[:limit]
    )
    return [
        {
            "product_id": str(r["product_id"]) if r["product_id"] else None,
            "product_name": r["product_name"],
            "quantity": int(r["quantity"] or 0),
            "revenue": _money(r["revenue"]),
        }
        for r in rows
    ]


class DashboardView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        month_start = _month_start()

        paid = Order.objects.filter(status__in=Order.PAID_STATUSES)
        paid_totals = paid.aggregate(revenue=Sum("total_amount"))
        month_totals = paid.filter(created_at__gte=month_start).aggregate(revenue=Sum("total_amount"))

        order_counts = Order.objects.aggregate(
            total=Count("id"),
            this_month=Count("id", filter=Q(created_at__gte=month_start)),
            pending=Count("id", filter=Q(status=Order.STATUS_PENDING)),
        )

        return Response(
            {
                "total_revenue": _money(paid_totals["revenue"]),
                "revenue_this_month": _money(month_totals["revenue"]),
                "total_orders": order_counts["total"],
                "orders_this_month": order_counts["this_month"],
                "pending_orders": order_counts["pending"],
                "total_customers": User.objects.filter(role=ROLE_CUSTOMER).count(),
                "total_products": Product.objects.active().count(),
                "top_products": top_products(),
            }
        )
