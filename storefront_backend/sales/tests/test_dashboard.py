# sales/tests/test_dashboard.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product
from sales.models import Order
from sales.tests.utils import make_order

User = get_user_model()

DASHBOARD_URL = "/api/sales/reports/dashboard/"


class DashboardTests(TestCase):
    """
    GUARANTEES:
    - Revenue counts paid orders only (approved, shipped, delivered)
    - Pending orders are counted but never summed
    - top_products ranks by quantity sold on paid orders
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.customer = User.objects.create_user(email="carla@example.com", password="pass")

        self.santos = Product.objects.create(name="Bourbon Santos", price=Decimal("40.00"), weight_grams=250)
        self.cerrado = Product.objects.create(name="Cerrado Mineiro", price=Decimal("30.00"), weight_grams=250)
        Product.objects.create(name="Descontinuado", price=Decimal("10.00"), is_active=False)

        paid = make_order(products=[self.santos], quantity=3)
        shipped = make_order(products=[self.cerrado], quantity=1)
        make_order(products=[self.cerrado], quantity=5)
        rejected = make_order(products=[self.cerrado], quantity=4)

        Order.objects.filter(id=paid.id).update(status=Order.STATUS_APPROVED)
        Order.objects.filter(id=shipped.id).update(status=Order.STATUS_SHIPPED)
        Order.objects.filter(id=rejected.id).update(status=Order.STATUS_REJECTED)

    def test_figures(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(DASHBOARD_URL)
        self.assertEqual(res.status_code, 200)

        self.assertEqual(res.data["total_revenue"], "150.00")
        self.assertEqual(res.data["revenue_this_month"], "150.00")
        self.assertEqual(res.data["total_orders"], 4)
        self.assertEqual(res.data["orders_this_month"], 4)
        self.assertEqual(res.data["pending_orders"], 1)
        self.assertEqual(res.data["total_customers"], 1)
        self.assertEqual(res.data["total_products"], 2)

    def test_top_products_ignore_unpaid_orders(self):
        self.client.force_authenticate(self.admin)
        top = self.client.get(DASHBOARD_URL).data["top_products"]

        self.assertEqual([row["product_name"] for row in top], ["Bourbon Santos", "Cerrado Mineiro"])
        self.assertEqual(top[0]["quantity"], 3)
        self.assertEqual(top[0]["revenue"], "120.00")
        self.assertEqual(top[1]["quantity"], 1)

    def test_customer_forbidden(self):
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get(DASHBOARD_URL).status_code, 403)
