# sales/tests/test_admin_orders.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product
from sales.models import Order
from sales.tests.utils import checkout_customer, make_order
from store.models import LabelFormat, ShippingCarrier, StoreSettings

User = get_user_model()


class OrderAdminApiTests(TestCase):
    """
    GUARANTEES:
    - Only staff with orders.view read orders; customers get 403
    - set-status goes through the admin writer (tracking generated on shipped)
    - Printables render as HTML with the selected label size
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.customer = User.objects.create_user(email="customer@example.com", password="pass")

        product = Product.objects.create(name="Arábica", price=Decimal("35.00"), weight_grams=250)
        self.order = make_order(products=[product], quantity=2)
        self.other = make_order(
            products=[product],
            customer=checkout_customer(name="Diego Rocha", email="diego@example.com"),
        )

    def test_customer_forbidden(self):
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get("/api/sales/orders/").status_code, 403)
        res = self.client.post(
            f"/api/sales/orders/{self.order.id}/set-status/",
            {"status": "shipped"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)

    def test_anonymous_unauthorized(self):
        self.assertEqual(self.client.get("/api/sales/orders/").status_code, 401)

    def test_list_search_and_filter(self):
        Order.objects.filter(id=self.other.id).update(status=Order.STATUS_APPROVED)
        self.client.force_authenticate(self.manager)

        res = self.client.get("/api/sales/orders/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 2)

        res = self.client.get("/api/sales/orders/?status=approved")
        self.assertEqual([o["id"] for o in res.data["results"]], [str(self.other.id)])
        self.assertEqual(res.data["results"][0]["status_label"], "Pago")

        res = self.client.get("/api/sales/orders/?q=diego")
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["item_count"], 1)

    def test_detail_includes_items(self):
        self.client.force_authenticate(self.manager)
        res = self.client.get(f"/api/sales/orders/{self.order.id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data["items"]), 1)
        self.assertEqual(res.data["items"][0]["subtotal"], "70.00")

    def test_set_status_shipped_generates_tracking(self):
        self.client.force_authenticate(self.manager)
        carrier = ShippingCarrier.objects.create(name="Jadlog")

        res = self.client.post(
            f"/api/sales/orders/{self.order.id}/set-status/",
            {"status": "shipped", "carrier_id": str(carrier.id)},
            format="json",
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], Order.STATUS_SHIPPED)
        self.assertEqual(res.data["status_source"], Order.SOURCE_ADMIN)
        self.assertRegex(res.data["tracking_code"], r"^BR\d{9}BR$")
        self.assertEqual(res.data["carrier_name"], "Jadlog")
        self.assertIsNotNone(res.data["shipped_at"])

    def test_set_status_accepts_paid_alias(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            f"/api/sales/orders/{self.order.id}/set-status/",
            {"status": "paid"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], Order.STATUS_APPROVED)

    def test_set_status_rejects_unknown_value(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            f"/api/sales/orders/{self.order.id}/set-status/",
            {"status": "lost"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_set_status_unknown_carrier(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            f"/api/sales/orders/{self.order.id}/set-status/",
            {"status": "shipped", "carrier_id": "7b0c6a0e-3f7d-4a57-9d8e-0a0b0c0d0e0f"},
            format="json",
        )
        self.assertEqual(res.status_code, 404)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)

    def test_print_summary(self):
        store = StoreSettings.load()
        store.store_name = "Café do Sítio"
        store.save()

        self.client.force_authenticate(self.manager)
        res = self.client.get(f"/api/sales/orders/{self.order.id}/print/summary/")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res["Content-Type"].startswith("text/html"))

        html = res.content.decode("utf-8")
        self.assertIn(self.order.order_number, html)
        self.assertIn("CAFÉ DO SÍTIO", html)
        self.assertIn("30130-010", html)
        self.assertIn("500g", html)

    def test_print_label_uses_default_format(self):
        LabelFormat.objects.create(name="A6", code="a6", width_mm=105, height_mm=148, is_default=True)

        self.client.force_authenticate(self.manager)
        res = self.client.get(f"/api/sales/orders/{self.order.id}/print/label/")
        html = res.content.decode("utf-8")

        self.assertIn("size: 105mm 148mm", html)
        self.assertIn("AGUARDANDO POSTAGEM", html)
        self.assertIn("DESTINATÁRIO", html)

    def test_print_label_with_selected_format_and_tracking(self):
        thermal = LabelFormat.objects.create(name="Térmica", code="termica", width_mm=100, height_mm=100)
        Order.objects.filter(id=self.order.id).update(tracking_code="BR123456789BR")

        self.client.force_authenticate(self.manager)
        res = self.client.get(f"/api/sales/orders/{self.order.id}/print/label/?label_format={thermal.id}")
        html = res.content.decode("utf-8")

        self.assertIn("size: 100mm 100mm", html)
        self.assertIn("BR123456789BR", html)
        self.assertNotIn("AGUARDANDO POSTAGEM", html)

    def test_print_label_unknown_format(self):
        self.client.force_authenticate(self.manager)
        res = self.client.get(f"/api/sales/orders/{self.order.id}/print/label/?label_format=nope")
        self.assertEqual(res.status_code, 404)
