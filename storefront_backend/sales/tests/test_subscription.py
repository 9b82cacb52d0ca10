# sales/tests/test_subscription.py

from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from products.models import Product
from sales.models import Order, Subscription
from sales.services.checkout_orchestrator import ProductUnavailable
from sales.services.freight import (
    METHOD_COMPANY,
    METHOD_CORREIOS,
    METHOD_CUSTOMER_CARRIER,
    METHOD_FREE,
    is_sao_paulo,
    quote_subscription_freight,
)
from sales.services.subscription_service import (
    SubscriptionError,
    build_subscription_cart,
    create_subscription,
)
from sales.tests.utils import checkout_customer
from users.accounts import ACCOUNT_BUSINESS, ACCOUNT_PERSONAL

User = get_user_model()

SUBSCRIPTION_SETTINGS = {"UNIT_PRICE": "35.00", "MIN_PRODUCTS": 2}

PREFERENCE = {"id": "pref-sub", "init_point": "https://mp.example/pay/pref-sub", "sandbox_init_point": ""}


class SubscriptionFreightTests(SimpleTestCase):
    def _quote(self, account_type, state, subtotal):
        return quote_subscription_freight(account_type=account_type, state=state, subtotal=Decimal(subtotal))

    def test_personal_free_from_threshold(self):
        q = self._quote(ACCOUNT_PERSONAL, "MG", "100.00")
        self.assertEqual((q.method, q.price), (METHOD_FREE, Decimal("0.00")))

        q = self._quote(ACCOUNT_PERSONAL, "SP", "140.00")
        self.assertEqual(q.method, METHOD_FREE)

    def test_personal_sao_paulo_below_threshold(self):
        q = self._quote(ACCOUNT_PERSONAL, "SP", "70.00")
        self.assertEqual((q.method, q.price), (METHOD_COMPANY, Decimal("15.00")))

    def test_personal_elsewhere_below_threshold(self):
        q = self._quote(ACCOUNT_PERSONAL, "RJ", "99.99")
        self.assertEqual((q.method, q.price), (METHOD_CORREIOS, Decimal("25.00")))
        self.assertEqual(q.label, "Correios")

    def test_business_never_pays_freight(self):
        q = self._quote(ACCOUNT_BUSINESS, "SP", "70.00")
        self.assertEqual((q.method, q.price), (METHOD_COMPANY, Decimal("0.00")))

        q = self._quote(ACCOUNT_BUSINESS, "PR", "70.00")
        self.assertEqual((q.method, q.price), (METHOD_CUSTOMER_CARRIER, Decimal("0.00")))

        # threshold does not apply to PJ
        q = self._quote(ACCOUNT_BUSINESS, "PR", "500.00")
        self.assertEqual(q.method, METHOD_CUSTOMER_CARRIER)

    def test_sao_paulo_spellings(self):
        for value in ("SP", "sp", " Sp ", "São Paulo", "sao paulo", "SAO PAULO"):
            self.assertTrue(is_sao_paulo(value), value)
        for value in ("", None, "MG", "Santa Catarina"):
            self.assertFalse(is_sao_paulo(value), value)


@override_settings(SUBSCRIPTION=SUBSCRIPTION_SETTINGS)
class SubscriptionServiceTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="carla@example.com", password="pass")
        self.santos = Product.objects.create(name="Bourbon Santos", price=Decimal("52.00"), weight_grams=250)
        self.mogiana = Product.objects.create(name="Alta Mogiana", price=Decimal("48.00"), weight_grams=500)
        self.cerrado = Product.objects.create(name="Cerrado Mineiro", price=Decimal("44.00"), weight_grams=250)

    def test_cart_uses_subscription_unit_price(self):
        cart = build_subscription_cart(
            product_ids=[self.santos.id, self.mogiana.id],
            grind_type="coado",
        )
        self.assertEqual(cart.display_total(), Decimal("70.00"))
        self.assertEqual({line.grind_type for line in cart}, {"coado"})
        self.assertEqual({line.quantity for line in cart}, {1})

    def test_repeated_products_count_once(self):
        with self.assertRaises(SubscriptionError):
            build_subscription_cart(product_ids=[self.santos.id, self.santos.id], grind_type="coado")

    def test_minimum_products(self):
        with self.assertRaises(SubscriptionError):
            build_subscription_cart(product_ids=[self.santos.id], grind_type="coado")

    def test_invalid_grind(self):
        with self.assertRaises(SubscriptionError):
            build_subscription_cart(product_ids=[self.santos.id, self.mogiana.id], grind_type="turco")

    def test_inactive_product(self):
        self.cerrado.is_active = False
        self.cerrado.save(update_fields=["is_active"])
        with self.assertRaises(ProductUnavailable):
            build_subscription_cart(product_ids=[self.santos.id, self.cerrado.id], grind_type="coado")

    @patch("sales.services.checkout_orchestrator.create_preference", return_value=PREFERENCE)
    def test_create_subscription_writes_box_and_first_order(self, mock_pref):
        result = create_subscription(
            user=self.user,
            account_type=ACCOUNT_PERSONAL,
            product_ids=[self.santos.id, self.mogiana.id],
            grind_type="coado",
            shipping_day=15,
            customer=checkout_customer(state="SP", city="São Paulo"),
        )

        subscription = Subscription.objects.get()
        self.assertEqual(result.subscription, subscription)
        self.assertEqual(subscription.status, Subscription.STATUS_ACTIVE)
        self.assertEqual(subscription.shipping_day, 15)
        self.assertEqual(set(subscription.products.all()), {self.santos, self.mogiana})

        order = Order.objects.get()
        self.assertEqual(order.order_type, Order.TYPE_SUBSCRIPTION)
        self.assertEqual(order.subscription, subscription)
        self.assertEqual(order.subscription_shipping_day, 15)
        self.assertEqual(order.user, self.user)
        self.assertEqual(order.shipping_method, METHOD_COMPANY)
        self.assertEqual(order.shipping_cost, Decimal("15.00"))
        self.assertEqual(order.total_amount, Decimal("85.00"))
        self.assertEqual(order.mercadopago_preference_id, "pref-sub")
        mock_pref.assert_called_once()

    @patch("sales.services.checkout_orchestrator.create_preference", return_value=PREFERENCE)
    def test_invalid_shipping_day(self, mock_pref):
        with self.assertRaises(SubscriptionError):
            create_subscription(
                user=self.user,
                account_type=ACCOUNT_PERSONAL,
                product_ids=[self.santos.id, self.mogiana.id],
                grind_type="coado",
                shipping_day=10,
                customer=checkout_customer(),
            )
        self.assertFalse(Subscription.objects.exists())
        self.assertFalse(Order.objects.exists())
        mock_pref.assert_not_called()


@override_settings(SUBSCRIPTION=SUBSCRIPTION_SETTINGS)
class SubscriptionApiTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.user = User.objects.create_user(email="carla@example.com", password="pass")
        self.products = [
            Product.objects.create(name=name, price=Decimal("50.00"), weight_grams=250)
            for name in ("Bourbon Santos", "Alta Mogiana", "Cerrado Mineiro")
        ]

    def _ids(self, count):
        return [str(p.id) for p in self.products[:count]]

    def _customer(self, **overrides):
        data = {
            "name": "Carla Mendes",
            "email": "carla@example.com",
            "phone": "31977776666",
            "postal_code": "30130-010",
            "street": "Av. Afonso Pena",
            "number": "500",
            "neighborhood": "Centro",
            "city": "Belo Horizonte",
            "state": "MG",
        }
        data.update(overrides)
        return data

    def test_quote_below_threshold(self):
        res = self.client.post(
            "/api/public/subscriptions/quote/",
            {"account_type": "PF", "state": "MG", "product_ids": self._ids(2), "grind_type": "beans"},
            format="json",
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["method"], METHOD_CORREIOS)
        self.assertEqual(res.data["price"], "25.00")
        self.assertEqual(res.data["subtotal"], "70.00")
        self.assertEqual(res.data["total"], "95.00")

    def test_quote_free_from_three_coffees(self):
        res = self.client.post(
            "/api/public/subscriptions/quote/",
            {"account_type": "PF", "state": "MG", "product_ids": self._ids(3), "grind_type": "beans"},
            format="json",
        )
        self.assertEqual(res.data["method"], METHOD_FREE)
        self.assertEqual(res.data["total"], "105.00")

    def test_quote_rejects_single_coffee(self):
        res = self.client.post(
            "/api/public/subscriptions/quote/",
            {"account_type": "PF", "state": "MG", "product_ids": self._ids(1), "grind_type": "beans"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_SUBSCRIPTION")

    def test_checkout_requires_login(self):
        res = self.client.post("/api/public/subscriptions/", {}, format="json")
        self.assertEqual(res.status_code, 401)

    @patch("sales.services.checkout_orchestrator.create_preference", return_value=PREFERENCE)
    def test_checkout_business_account(self, mock_pref):
        self.client.force_authenticate(self.user)
        res = self.client.post(
            "/api/public/subscriptions/",
            {
                "account_type": "PJ",
                "product_ids": self._ids(2),
                "grind_type": "coado",
                "shipping_day": 1,
                "customer": self._customer(),
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["preference_id"], "pref-sub")
        self.assertEqual(res.data["total_amount"], "70.00")
        self.assertEqual(res.data["shipping_day"], 1)
        self.assertEqual(res.data["freight"]["method"], METHOD_CUSTOMER_CARRIER)
        self.assertEqual(res.data["freight"]["price"], "0.00")

        subscription = Subscription.objects.get(id=res.data["subscription_id"])
        self.assertEqual(subscription.account_type, ACCOUNT_BUSINESS)
        self.assertEqual(subscription.user, self.user)


class MySubscriptionApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="carla@example.com", password="pass")
        self.other = User.objects.create_user(email="diego@example.com", password="pass")
        self.subscription = Subscription.objects.create(user=self.user, grind_type="coado", shipping_day=1)
        self.foreign = Subscription.objects.create(user=self.other, grind_type="beans", shipping_day=15)
        self.client.force_authenticate(self.user)

    def _action(self, name, subscription=None):
        subscription = subscription or self.subscription
        return self.client.post(f"/api/sales/my-subscriptions/{subscription.id}/{name}/", format="json")

    def test_list_is_scoped_to_owner(self):
        res = self.client.get("/api/sales/my-subscriptions/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual([s["id"] for s in res.data["results"]], [str(self.subscription.id)])

    def test_pause_resume_cancel(self):
        res = self._action("pause")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], Subscription.STATUS_PAUSED)

        res = self._action("pause")
        self.assertEqual(res.status_code, 409)

        res = self._action("resume")
        self.assertEqual(res.data["status"], Subscription.STATUS_ACTIVE)

        res = self._action("cancel")
        self.assertEqual(res.data["status"], Subscription.STATUS_CANCELLED)

        res = self._action("resume")
        self.assertEqual(res.status_code, 409)

        self.subscription.refresh_from_db()
        self.assertEqual(self.subscription.status, Subscription.STATUS_CANCELLED)

    def test_cannot_touch_someone_elses_subscription(self):
        res = self._action("cancel", self.foreign)
        self.assertEqual(res.status_code, 404)
        self.foreign.refresh_from_db()
        self.assertEqual(self.foreign.status, Subscription.STATUS_ACTIVE)
