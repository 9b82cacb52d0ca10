# public/tests/test_payment_return.py

import uuid
from decimal import Decimal
from unittest.mock import patch

from django.core.cache import cache
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product
from sales.models import Order, PaymentNotification
from sales.services.cart import Cart
from sales.services.order_service import CheckoutCustomer, create_order

RETURN_URL = "/api/public/payments/return/{outcome}/"


class PaymentReturnTests(TestCase):
    """
    GUARANTEES:
    - Return pages write through the same rank-checked entry point as the webhook
    - Response always echoes the outcome in the URL (200), even when nothing was written
    - A stale return never downgrades a webhook-approved order
    """

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        product = Product.objects.create(name="Mundo Novo", price=Decimal("45.00"))
        cart = Cart()
        cart.add(product)
        self.order = create_order(
            customer=CheckoutCustomer(
                name="Bruno Lima",
                email="bruno@example.com",
                phone="21988887777",
                postal_code="20040020",
                street="Rua da Assembleia",
                number="10",
                neighborhood="Centro",
                city="Rio de Janeiro",
                state="RJ",
            ),
            cart=cart,
        )

    def _get(self, outcome, **params):
        return self.client.get(RETURN_URL.format(outcome=outcome), params)

    def test_success_page_approves_order(self):
        res = self._get(
            "success",
            external_reference=str(self.order.id),
            payment_id="555",
            collection_id="555",
            collection_status="approved",
            payment_type="credit_card",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["outcome"], "success")
        self.assertTrue(res.data["applied"])
        self.assertEqual(res.data["order"]["status"], Order.STATUS_APPROVED)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_APPROVED)
        self.assertEqual(self.order.mercadopago_collection_id, "555")
        self.assertEqual(self.order.mercadopago_collection_status, "approved")
        self.assertIsNotNone(self.order.paid_at)

        notification = PaymentNotification.objects.get()
        self.assertEqual(notification.source, PaymentNotification.SOURCE_RETURN_PAGE)

    def test_pending_page_without_status_uses_page_default(self):
        res = self._get("pending", external_reference=str(self.order.id))
        self.assertEqual(res.status_code, 200)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_IN_PROCESS)

    def test_failure_page_without_status_does_not_write(self):
        res = self._get("failure", external_reference=str(self.order.id))
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.data["applied"])

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.assertEqual(
            PaymentNotification.objects.get().outcome,
            PaymentNotification.OUTCOME_IGNORED,
        )

    def test_failure_page_with_rejected_status(self):
        self._get("failure", external_reference=str(self.order.id), collection_status="rejected")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_REJECTED)

    @patch("public.views.mercadopago_webhook.get_payment")
    def test_late_return_after_webhook_keeps_approved(self, mock_get_payment):
        mock_get_payment.return_value = {
            "id": "555",
            "status": "approved",
            "status_detail": "accredited",
            "external_reference": str(self.order.id),
            "payment_method": "pix",
            "transaction_amount": 45.0,
            "raw": {},
        }
        self.client.post(
            "/api/public/payments/mercadopago/webhook/",
            {"type": "payment", "data": {"id": "555"}},
            format="json",
        )

        res = self._get(
            "pending",
            external_reference=str(self.order.id),
            collection_status="in_process",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["outcome"], "pending")
        self.assertFalse(res.data["applied"])

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_APPROVED)

    def test_unknown_reference_still_renders(self):
        res = self._get("success", external_reference=str(uuid.uuid4()), collection_status="approved")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["outcome"], "success")
        self.assertIsNone(res.data["order"])
        self.assertEqual(
            PaymentNotification.objects.get().outcome,
            PaymentNotification.OUTCOME_UNKNOWN_ORDER,
        )

    def test_missing_reference_renders_without_write(self):
        res = self._get("success")
        self.assertEqual(res.status_code, 200)
        self.assertFalse(PaymentNotification.objects.exists())

    def test_unknown_page(self):
        res = self._get("maybe", external_reference=str(self.order.id))
        self.assertEqual(res.status_code, 404)
