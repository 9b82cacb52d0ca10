# public/views/payment_return.py
"""
PAYMENT RETURN PAGES

GET /api/public/payments/return/<success|pending|failure>/
    ?external_reference=&payment_id=&collection_id=&collection_status=

Called by the storefront when the shopper's browser comes back from
Mercado Pago. Best effort: the webhook is authoritative.

Rules:
- Target status: mapped collection_status when present, else the page
  default (success -> approved, pending -> in_process, failure -> no write)
- Goes through the same entry point as the webhook, so a late or stale
  return never downgrades an order
- Always answers 200 with the outcome observed in the URL, even when the
  write was skipped or the reference is unknown
"""

from __future__ import annotations

from django.http import Http404
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from public.serializers import (
    PaymentReturnQuerySerializer,
    PublicOrderStatusResponseSerializer,
)
from public.views.common import PublicPollThrottle
from sales.models import Order, PaymentNotification
from sales.services.order_lifecycle import (
    UnknownOrderReference,
    apply_payment_status,
    map_gateway_status,
)

OUTCOME_SUCCESS = "success"
OUTCOME_PENDING = "pending"
OUTCOME_FAILURE = "failure"

PAGE_DEFAULT_STATUS = {
    OUTCOME_SUCCESS: Order.STATUS_APPROVED,
    OUTCOME_PENDING: Order.STATUS_IN_PROCESS,
    OUTCOME_FAILURE: None,
}


class PaymentReturnView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        tags=["Public"],
        parameters=[PaymentReturnQuerySerializer],
        responses={
            200: OpenApiResponse(description="Outcome + order summary (when the reference is known)"),
            404: OpenApiResponse(description="Unknown return page"),
        },
    )
    def get(self, request, outcome, *args, **kwargs):
        if outcome not in PAGE_DEFAULT_STATUS:
            raise Http404

        s = PaymentReturnQuerySerializer(data=request.query_params)
        s.is_valid(raise_exception=True)
        params = s.validated_data

        collection_status = params["collection_status"].strip().lower()
        target = map_gateway_status(collection_status) if collection_status else None
        if target is None:
            target = PAGE_DEFAULT_STATUS[outcome]

        body = {"outcome": outcome, "applied": False, "order": None}

        reference = params["external_reference"].strip()
        if not reference:
            return Response(body, status=status.HTTP_200_OK)

        try:
            change = apply_payment_status(
                external_reference=reference,
                status=target,
                source=PaymentNotification.SOURCE_RETURN_PAGE,
                raw_status=collection_status or outcome,
                payment_id=params["payment_id"],
                collection_id=params["collection_id"],
                collection_status=collection_status,
                payment_method=params["payment_type"],
                payload={"outcome": outcome, "query": dict(request.query_params.items())},
            )
        except UnknownOrderReference:
            return Response(body, status=status.HTTP_200_OK)

        body["applied"] = change.applied
        body["order"] = PublicOrderStatusResponseSerializer(change.order).data
        return Response(body, status=status.HTTP_200_OK)
