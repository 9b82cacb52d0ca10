# public/views/subscription.py
"""
SUBSCRIPTION BOX (STOREFRONT)

POST /api/public/subscriptions/quote/   AllowAny: subtotal + freight for a selection
POST /api/public/subscriptions/         authenticated: subscription + first order + preference

Pricing and freight rules live in sales.services.subscription_service / freight.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from public.serializers import (
    FreightQuoteResponseSerializer,
    SubscriptionCheckoutSerializer,
    SubscriptionQuoteSerializer,
)
from public.views.common import PublicWriteThrottle, error_response
from public.views.order import checkout_payload, preference_failed_response
from sales.services.checkout_orchestrator import PreferenceCreationFailed, ProductUnavailable
from sales.services.order_service import CheckoutCustomer, MissingCheckoutFields, OrderPartiallyCreated
from sales.services.subscription_service import (
    SubscriptionError,
    create_subscription,
    quote_subscription,
)


def _freight_payload(cart, freight) -> dict:
    subtotal = cart.display_total()
    return {
        "method": freight.method,
        "label": freight.label,
        "price": freight.price,
        "subtotal": subtotal,
        "total": subtotal + freight.price,
    }


class SubscriptionQuoteView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        tags=["Public"],
        request=SubscriptionQuoteSerializer,
        responses={
            200: FreightQuoteResponseSerializer,
            400: OpenApiResponse(description="Invalid selection"),
        },
    )
    def post(self, request, *args, **kwargs):
        s = SubscriptionQuoteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            cart, freight = quote_subscription(
                account_type=data["account_type"],
                state=data["state"],
                product_ids=data["product_ids"],
                grind_type=data["grind_type"],
            )
        except (SubscriptionError, ProductUnavailable) as exc:
            return error_response(
                code="INVALID_SUBSCRIPTION",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(
            FreightQuoteResponseSerializer(_freight_payload(cart, freight)).data,
            status=status.HTTP_200_OK,
        )


class SubscriptionCheckoutView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        tags=["Public"],
        request=SubscriptionCheckoutSerializer,
        responses={
            201: OpenApiResponse(description="Subscription + pending order + preference"),
            400: OpenApiResponse(description="Invalid selection / missing fields"),
            401: OpenApiResponse(description="Login required"),
            502: OpenApiResponse(description="Payment provider error (order kept pending)"),
        },
    )
    def post(self, request, *args, **kwargs):
        s = SubscriptionCheckoutSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = create_subscription(
                user=request.user,
                account_type=data["account_type"],
                product_ids=data["product_ids"],
                grind_type=data["grind_type"],
                shipping_day=data["shipping_day"],
                customer=CheckoutCustomer(**data["customer"]),
            )

        except PreferenceCreationFailed as exc:
            return preference_failed_response(exc)

        except (SubscriptionError, ProductUnavailable) as exc:
            return error_response(
                code="INVALID_SUBSCRIPTION",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        except MissingCheckoutFields as exc:
            return error_response(
                code="MISSING_FIELDS",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
                fields=exc.missing,
            )

        except OrderPartiallyCreated as exc:
            return error_response(
                code="ORDER_WRITE_FAILED",
                message=str(exc),
                http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        body = checkout_payload(result.checkout)
        body.update(
            {
                "subscription_id": result.subscription.id,
                "shipping_day": result.subscription.shipping_day,
                "freight": {
                    "method": result.freight.method,
                    "label": result.freight.label,
                    "price": str(result.freight.price),
                },
            }
        )
        return Response(body, status=status.HTTP_201_CREATED)
