# users/tests/test_customers.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from sales.models import Order
from sales.tests.utils import make_order
from users.models import CustomerProfile

User = get_user_model()


class CustomerListTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.carla = User.objects.create_user(email="carla@example.com", password="pass", first_name="Carla")
        self.diego = User.objects.create_user(email="diego@example.com", password="pass", first_name="Diego")
        CustomerProfile.objects.create(user=self.carla, phone="31977776666", account_type="PJ")

        paid = make_order(user=self.carla, quantity=2)
        make_order(user=self.carla)
        Order.objects.filter(id=paid.id).update(status=Order.STATUS_DELIVERED)

    def test_order_stats(self):
        self.client.force_authenticate(self.manager)
        res = self.client.get("/api/auth/customers/")
        self.assertEqual(res.status_code, 200)

        rows = {row["email"]: row for row in res.data["results"]}
        self.assertEqual(set(rows), {"carla@example.com", "diego@example.com"})

        self.assertEqual(rows["carla@example.com"]["order_count"], 2)
        self.assertEqual(rows["carla@example.com"]["total_spent"], "70.00")
        self.assertEqual(rows["carla@example.com"]["account_type"], "PJ")
        self.assertEqual(rows["diego@example.com"]["order_count"], 0)
        self.assertEqual(rows["diego@example.com"]["total_spent"], "0.00")

    def test_search(self):
        self.client.force_authenticate(self.manager)
        res = self.client.get("/api/auth/customers/?search=3197777")
        self.assertEqual([row["email"] for row in res.data["results"]], ["carla@example.com"])

    def test_customer_forbidden(self):
        self.client.force_authenticate(self.carla)
        self.assertEqual(self.client.get("/api/auth/customers/").status_code, 403)
