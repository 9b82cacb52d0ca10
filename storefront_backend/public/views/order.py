# public/views/order.py
"""
PUBLIC ORDER ENDPOINTS (ONLINE STORE)

POST /api/public/orders/                       checkout: pending order + MP preference
POST /api/public/orders/<order_id>/preference/ retry the preference for a pending order
GET  /api/public/orders/<order_id>/            status polling (result page)

Rules:
- Prices come from the catalog; client totals are ignored
- The order is written before the gateway call: when Mercado Pago is down the
  response is 502 and carries the pending order_id so the shopper can retry
- Status is never written here; see sales.services.order_lifecycle
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from public.serializers import (
    PublicCheckoutResponseSerializer,
    PublicCheckoutSerializer,
    PublicOrderStatusResponseSerializer,
)
from public.services.mercadopago import get_currency, get_public_key
from public.views.common import PublicPollThrottle, PublicWriteThrottle, error_response
from sales.models import Order
from sales.services.checkout_orchestrator import (
    CheckoutError,
    CheckoutResult,
    OrderNotPayable,
    PreferenceCreationFailed,
    ProductUnavailable,
    request_preference,
    start_checkout,
)
from sales.services.order_service import (
    CheckoutCustomer,
    EmptyCartError,
    MissingCheckoutFields,
    OrderPartiallyCreated,
)
from store.models import ShippingCarrier


def checkout_payload(result: CheckoutResult) -> dict:
    order = result.order
    payload = {
        "order_id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "subtotal_amount": order.subtotal_amount,
        "shipping_cost": order.shipping_cost,
        "total_amount": order.total_amount,
        "currency": get_currency(),
        "preference_id": result.preference_id,
        "init_point": result.init_point,
        "public_key": get_public_key(),
    }
    return dict(PublicCheckoutResponseSerializer(payload).data)


def preference_failed_response(exc: PreferenceCreationFailed):
    return error_response(
        code="PAYMENT_PROVIDER_UNAVAILABLE" if exc.retryable else "PAYMENT_PROVIDER_ERROR",
        message="Could not start the Mercado Pago payment. Your order was saved; please try again.",
        http_status=status.HTTP_502_BAD_GATEWAY,
        order_id=str(exc.order.id),
        order_number=exc.order.order_number,
        retryable=exc.retryable,
    )


class PublicCheckoutView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        tags=["Public"],
        request=PublicCheckoutSerializer,
        responses={
            201: PublicCheckoutResponseSerializer,
            400: OpenApiResponse(description="Validation error / product unavailable"),
            429: OpenApiResponse(description="Rate limited"),
            500: OpenApiResponse(description="Order could not be written"),
            502: OpenApiResponse(description="Payment provider error (order kept pending)"),
        },
        description="Create a pending order and a Mercado Pago checkout preference.",
    )
    def post(self, request, *args, **kwargs):
        s = PublicCheckoutSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        carrier = None
        if data.get("carrier_id"):
            carrier = ShippingCarrier.objects.filter(id=data["carrier_id"], is_active=True).first()
            if carrier is None:
                return error_response(
                    code="INVALID_CARRIER",
                    message="Shipping carrier not available.",
                    http_status=status.HTTP_400_BAD_REQUEST,
                )

        try:
            result = start_checkout(
                customer=CheckoutCustomer(**data["customer"]),
                items=data["items"],
                user=request.user,
                carrier=carrier,
            )

        except PreferenceCreationFailed as exc:
            return preference_failed_response(exc)

        except MissingCheckoutFields as exc:
            return error_response(
                code="MISSING_FIELDS",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
                fields=exc.missing,
            )

        except EmptyCartError as exc:
            return error_response(
                code="EMPTY_CART",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        except ProductUnavailable as exc:
            return error_response(
                code="PRODUCT_UNAVAILABLE",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        except OrderPartiallyCreated as exc:
            return error_response(
                code="ORDER_WRITE_FAILED",
                message=str(exc),
                http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        except CheckoutError as exc:
            return error_response(
                code="CHECKOUT_FAILED",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(checkout_payload(result), status=status.HTTP_201_CREATED)


class PublicOrderPreferenceView(APIView):
    """
    Retry after a 502: asks Mercado Pago for a fresh preference for the same
    pending order (no new order is written).
    """

    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        tags=["Public"],
        request=None,
        responses={
            200: PublicCheckoutResponseSerializer,
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Order is no longer pending"),
            502: OpenApiResponse(description="Payment provider error"),
        },
    )
    def post(self, request, order_id, *args, **kwargs):
        order = get_object_or_404(Order, id=order_id)

        try:
            result = request_preference(order=order)
        except OrderNotPayable as exc:
            return error_response(
                code="ORDER_NOT_PAYABLE",
                message=str(exc),
                http_status=status.HTTP_409_CONFLICT,
            )
        except PreferenceCreationFailed as exc:
            return preference_failed_response(exc)

        return Response(checkout_payload(result), status=status.HTTP_200_OK)


class PublicOrderStatusView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        tags=["Public"],
        responses={
            200: PublicOrderStatusResponseSerializer,
            404: OpenApiResponse(description="Order not found"),
            429: OpenApiResponse(description="Rate limited"),
        },
    )
    def get(self, request, order_id, *args, **kwargs):
        order = get_object_or_404(Order.objects.prefetch_related("items"), id=order_id)
        return Response(
            PublicOrderStatusResponseSerializer(order).data,
            status=status.HTTP_200_OK,
        )
