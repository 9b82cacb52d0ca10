# public/tests/test_webhook.py

import hashlib
import hmac
import uuid
from decimal import Decimal
from unittest.mock import patch

from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from products.models import Product
from public.services.mercadopago import PaymentGatewayUnavailable
from sales.models import Order, PaymentNotification
from sales.services.cart import Cart
from sales.services.order_service import CheckoutCustomer, create_order

WEBHOOK_URL = "/api/public/payments/mercadopago/webhook/"

CUSTOMER = CheckoutCustomer(
    name="Ana Souza",
    email="ana@example.com",
    phone="11999990000",
    postal_code="01310-100",
    street="Av. Paulista",
    number="1000",
    neighborhood="Bela Vista",
    city="São Paulo",
    state="SP",
)


def _payment(*, order, status="approved", payment_id="123456"):
    return {
        "id": payment_id,
        "status": status,
        "status_detail": "accredited",
        "external_reference": str(order.id) if order else str(uuid.uuid4()),
        "payment_method": "pix",
        "transaction_amount": 80.0,
        "raw": {},
    }


class MercadoPagoWebhookTests(TestCase):
    """
    GUARANTEES:
    - Redelivery of the same notification leaves identical state
    - Unknown references answer 200 and are recorded
    - Non-payment topics are acknowledged without a gateway call
    - Gateway read failures answer 502 (MP retries)
    """

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        product = Product.objects.create(name="Catuaí Amarelo", price=Decimal("40.00"), weight_grams=250)
        cart = Cart()
        cart.add(product)
        cart.add(product)
        self.order = create_order(customer=CUSTOMER, cart=cart)

    def _notify(self, payment_id="123456"):
        return self.client.post(
            WEBHOOK_URL,
            {"type": "payment", "action": "payment.updated", "data": {"id": payment_id}},
            format="json",
        )

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_approved_payment_marks_order_paid(self, mock_get_payment):
        mock_get_payment.return_value = _payment(order=self.order)

        res = self._notify()
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["ok"])

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_APPROVED)
        self.assertEqual(self.order.status_source, Order.SOURCE_GATEWAY)
        self.assertEqual(self.order.mercadopago_payment_id, "123456")
        self.assertEqual(self.order.payment_method, "pix")
        self.assertEqual(self.order.mercadopago_collection_status, "approved")
        self.assertEqual(self.order.mercadopago_collection_id, "123456")
        self.assertIsNotNone(self.order.paid_at)
        mock_get_payment.assert_called_once_with("123456")

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_redelivery_is_idempotent(self, mock_get_payment):
        mock_get_payment.return_value = _payment(order=self.order)

        self._notify()
        self.order.refresh_from_db()
        first_paid_at = self.order.paid_at

        res = self._notify()
        self.assertEqual(res.status_code, 200)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_APPROVED)
        self.assertEqual(self.order.paid_at, first_paid_at)

        outcomes = sorted(
            PaymentNotification.objects.filter(order=self.order).values_list("outcome", flat=True)
        )
        self.assertEqual(
            outcomes,
            sorted([PaymentNotification.OUTCOME_APPLIED, PaymentNotification.OUTCOME_DUPLICATE]),
        )

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_unknown_reference_is_acknowledged_and_recorded(self, mock_get_payment):
        mock_get_payment.return_value = _payment(order=None)

        with self.assertLogs("sales.services.order_lifecycle", level="ERROR"):
            res = self._notify()

        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["ok"])

        notification = PaymentNotification.objects.get()
        self.assertIsNone(notification.order)
        self.assertEqual(notification.outcome, PaymentNotification.OUTCOME_UNKNOWN_ORDER)
        self.assertEqual(notification.gateway_status, "approved")

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_non_payment_topic_is_ignored(self, mock_get_payment):
        res = self.client.post(
            WEBHOOK_URL,
            {"type": "merchant_order", "data": {"id": "999"}},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["detail"], "Ignored")
        mock_get_payment.assert_not_called()
        self.assertFalse(PaymentNotification.objects.exists())

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_legacy_query_notification(self, mock_get_payment):
        mock_get_payment.return_value = _payment(order=self.order, status="in_process", payment_id="777")

        res = self.client.post(f"{WEBHOOK_URL}?topic=payment&id=777", {}, format="json")
        self.assertEqual(res.status_code, 200)
        mock_get_payment.assert_called_once_with("777")

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_IN_PROCESS)
        self.assertIsNone(self.order.paid_at)

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_gateway_failure_returns_502(self, mock_get_payment):
        mock_get_payment.side_effect = PaymentGatewayUnavailable("Mercado Pago HTTP 503")

        res = self._notify()
        self.assertEqual(res.status_code, 502)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.assertFalse(PaymentNotification.objects.exists())

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_stale_in_process_does_not_downgrade(self, mock_get_payment):
        mock_get_payment.return_value = _payment(order=self.order, status="approved")
        self._notify()

        mock_get_payment.return_value = _payment(order=self.order, status="in_process")
        res = self._notify()
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["detail"], PaymentNotification.OUTCOME_STALE)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_APPROVED)
        self.assertEqual(self.order.mercadopago_collection_status, "approved")


@override_settings(
    PAYMENTS={"MERCADOPAGO": {"ACCESS_TOKEN": "TEST-token", "WEBHOOK_SECRET": "whsec"}}
)
class MercadoPagoWebhookSignatureTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def _signature(self, *, data_id, request_id, ts="1700000000"):
        manifest = f"id:{data_id};request-id:{request_id};ts:{ts};"
        digest = hmac.new(b"whsec", manifest.encode("utf-8"), hashlib.sha256).hexdigest()
        return f"ts={ts},v1={digest}"

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_invalid_signature_is_rejected(self, mock_get_payment):
        res = self.client.post(
            f"{WEBHOOK_URL}?type=payment&data.id=123",
            {"type": "payment", "data": {"id": "123"}},
            format="json",
            HTTP_X_SIGNATURE="ts=1700000000,v1=deadbeef",
            HTTP_X_REQUEST_ID="req-1",
        )
        self.assertEqual(res.status_code, 401)
        mock_get_payment.assert_not_called()

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_missing_signature_is_rejected(self, mock_get_payment):
        res = self.client.post(WEBHOOK_URL, {"type": "payment", "data": {"id": "123"}}, format="json")
        self.assertEqual(res.status_code, 401)
        mock_get_payment.assert_not_called()

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_valid_signature_is_processed(self, mock_get_payment):
        mock_get_payment.return_value = _payment(order=None, payment_id="123")

        res = self.client.post(
            f"{WEBHOOK_URL}?type=payment&data.id=123",
            {"type": "payment", "data": {"id": "123"}},
            format="json",
            HTTP_X_SIGNATURE=self._signature(data_id="123", request_id="req-1"),
            HTTP_X_REQUEST_ID="req-1",
        )
        self.assertEqual(res.status_code, 200)
        mock_get_payment.assert_called_once_with("123")
