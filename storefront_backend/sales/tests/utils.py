# sales/tests/utils.py

from decimal import Decimal

from products.models import Product
from sales.services.cart import Cart
from sales.services.order_service import CheckoutCustomer, create_order


def checkout_customer(**overrides):
    data = dict(
        name="Carla Mendes",
        email="carla@example.com",
        phone="31977776666",
        postal_code="30130-010",
        street="Av. Afonso Pena",
        number="500",
        neighborhood="Centro",
        city="Belo Horizonte",
        state="MG",
    )
    data.update(overrides)
    return CheckoutCustomer(**data)


def make_order(*, products=None, quantity=1, **kwargs):
    """
    Pending order for one or more products (a default product is created).
    """
    if products is None:
        products = [Product.objects.create(name="Arábica", price=Decimal("35.00"), weight_grams=250)]

    cart = Cart()
    for product in products:
        cart.add(product)
        cart.set_quantity(product.id, quantity)

    kwargs.setdefault("customer", checkout_customer())
    return create_order(cart=cart, **kwargs)
