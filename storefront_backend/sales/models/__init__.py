# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS
"""

from .order import Order
from .order_item import OrderItem
from .payment_notification import PaymentNotification
from .subscription import Subscription

__all__ = [
    "Order",
    "OrderItem",
    "PaymentNotification",
    "Subscription",
]
