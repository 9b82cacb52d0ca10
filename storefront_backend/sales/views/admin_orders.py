# sales/views/admin_orders.py

"""
ORDERS (BACK OFFICE)

GET  /api/sales/orders/?status=&order_type=&q=
GET  /api/sales/orders/<id>/
POST /api/sales/orders/<id>/set-status/       (capability: orders.manage)
GET  /api/sales/orders/<id>/print/summary/    A4 HTML
GET  /api/sales/orders/<id>/print/label/?label_format=<uuid>

Status writes go through sales.services.order_lifecycle only.
"""

import uuid

from django.db.models import Count, Q
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_ORDERS_MANAGE, CAP_ORDERS_VIEW, HasCapability
from sales.models import Order
from sales.serializers import OrderDetailSerializer, OrderListSerializer, OrderStatusUpdateSerializer
from sales.services.labels import render_order_summary, render_shipping_label
from sales.services.order_lifecycle import InvalidOrderStatusError, set_order_status_by_admin
from store.models import LabelFormat, ShippingCarrier


class OrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_VIEW
    filterset_fields = ["status", "order_type", "status_source"]

    def get_required_capability(self):
        if self.action == "set_status":
            return CAP_ORDERS_MANAGE
        return CAP_ORDERS_VIEW

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        return OrderDetailSerializer

    def get_queryset(self):
        if self.action == "list":
            qs = Order.objects.annotate(item_count=Count("items"))
        else:
            qs = Order.objects.select_related("carrier").prefetch_related("items", "payment_notifications")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(order_number__icontains=q)
                | Q(customer_name__icontains=q)
                | Q(customer_email__icontains=q)
                | Q(tracking_code__icontains=q)
            )

        return qs.order_by("-created_at")

    # -----------------------------
    # Status override
    # -----------------------------
    @extend_schema(
        request=OrderStatusUpdateSerializer,
        responses={
            200: OrderDetailSerializer,
            400: OpenApiResponse(description="Validation error"),
            404: OpenApiResponse(description="Order or carrier not found"),
        },
    )
    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):
        order = get_object_or_404(Order, pk=pk)

        s = OrderStatusUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        carrier = None
        if data.get("carrier_id"):
            carrier = get_object_or_404(ShippingCarrier, id=data["carrier_id"])

        try:
            order = set_order_status_by_admin(
                order_id=order.id,
                status=data["status"],
                actor=request.user,
                tracking_code=data.get("tracking_code"),
                carrier=carrier,
            )
        except InvalidOrderStatusError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        order = self.get_queryset().get(pk=order.pk)
        return Response(OrderDetailSerializer(order).data, status=status.HTTP_200_OK)

    # -----------------------------
    # Printables
    # -----------------------------
    @extend_schema(responses={(200, "text/html"): OpenApiResponse(description="Printable A4 order summary")})
    @action(detail=True, methods=["get"], url_path="print/summary")
    def print_summary(self, request, pk=None):
        order = self.get_object()
        return HttpResponse(render_order_summary(order), content_type="text/html; charset=utf-8")

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="label_format",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                description="LabelFormat id (defaults to the default format).",
            ),
        ],
        responses={(200, "text/html"): OpenApiResponse(description="Printable shipping label")},
    )
    @action(detail=True, methods=["get"], url_path="print/label")
    def print_label(self, request, pk=None):
        order = self.get_object()

        label_format = None
        raw_format = (request.query_params.get("label_format") or "").strip()
        if raw_format:
            if _is_uuid(raw_format):
                label_format = LabelFormat.objects.filter(id=raw_format, is_active=True).first()
            if label_format is None:
                return Response({"detail": "Label format not found"}, status=status.HTTP_404_NOT_FOUND)

        return HttpResponse(render_shipping_label(order, label_format), content_type="text/html; charset=utf-8")


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True
