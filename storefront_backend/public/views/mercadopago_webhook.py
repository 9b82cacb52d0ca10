# public/views/mercadopago_webhook.py
"""
MERCADO PAGO WEBHOOK

POST /api/public/payments/mercadopago/webhook/

Accepted shapes:
- body   {"type": "payment", "data": {"id": "<payment_id>"}}
- query  ?type=payment&data.id=<payment_id>
- legacy ?topic=payment&id=<payment_id>

Rules:
- Body status is never trusted: the payment is re-read from the API
- Non-payment topics are acknowledged and ignored
- Redeliveries are safe (same status again is a no-op)
- Unknown order references are acknowledged (200) so MP stops retrying;
  they are recorded and logged at ERROR for follow-up
- Gateway read failures answer 502 so MP retries later
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from public.serializers import PublicWebhookAckSerializer
from public.services.mercadopago import (
    PaymentGatewayError,
    get_payment,
    verify_webhook_signature,
)
from public.views.common import WebhookThrottle
from sales.models import PaymentNotification
from sales.services.order_lifecycle import (
    UnknownOrderReference,
    apply_payment_status,
    map_gateway_status,
)

logger = logging.getLogger(__name__)


def _first(*values) -> str:
    for value in values:
        value = str(value or "").strip()
        if value:
            return value
    return ""


class MercadoPagoWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [JSONParser]
    throttle_classes = [WebhookThrottle]

    @extend_schema(
        tags=["Public"],
        request=None,
        responses={
            200: PublicWebhookAckSerializer,
            401: OpenApiResponse(description="Invalid signature"),
            502: OpenApiResponse(description="Payment lookup failed; MP will retry"),
        },
    )
    def post(self, request, *args, **kwargs):
        payload = request.data if isinstance(request.data, dict) else {}
        query = request.query_params
        data = payload.get("data") if isinstance(payload.get("data"), dict) else {}

        topic = _first(payload.get("type"), payload.get("topic"), query.get("type"), query.get("topic")).lower()
        payment_id = _first(query.get("data.id"), data.get("id"), query.get("id"))

        if not verify_webhook_signature(
            signature=request.headers.get("x-signature"),
            request_id=request.headers.get("x-request-id"),
            data_id=payment_id,
        ):
            logger.warning("Invalid Mercado Pago webhook signature", extra={"payment_id": payment_id})
            return Response({"ok": False, "detail": "Invalid signature"}, status=status.HTTP_401_UNAUTHORIZED)

        if topic != "payment":
            logger.info("Mercado Pago notification ignored", extra={"topic": topic})
            return Response({"ok": True, "detail": "Ignored"}, status=status.HTTP_200_OK)

        if not payment_id:
            logger.warning("Payment notification without payment id")
            return Response({"ok": True, "detail": "No payment id"}, status=status.HTTP_200_OK)

        try:
            payment = get_payment(payment_id)
        except PaymentGatewayError:
            logger.exception("Mercado Pago payment lookup failed", extra={"payment_id": payment_id})
            return Response({"ok": False, "detail": "Payment lookup failed"}, status=status.HTTP_502_BAD_GATEWAY)

        try:
            change = apply_payment_status(
                external_reference=payment["external_reference"],
                status=map_gateway_status(payment["status"]),
                source=PaymentNotification.SOURCE_WEBHOOK,
                raw_status=payment["status"],
                payment_id=payment["id"],
                # the return page reports the payment id as collection_id
                collection_id=payment["id"],
                collection_status=payment["status"],
                payment_method=payment["payment_method"],
                payload={"notification": payload, "payment_status_detail": payment["status_detail"]},
            )
        except UnknownOrderReference:
            return Response({"ok": True, "detail": "Unknown order"}, status=status.HTTP_200_OK)

        return Response(
            {
                "ok": True,
                "detail": change.outcome,
                "order_id": str(change.order.id),
                "status": change.status,
            },
            status=status.HTTP_200_OK,
        )
