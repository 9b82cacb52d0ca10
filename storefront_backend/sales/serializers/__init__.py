from .order import (
    OrderDetailSerializer,
    OrderItemSerializer,
    OrderListSerializer,
    OrderStatusUpdateSerializer,
    PaymentNotificationSerializer,
)
from .subscription import SubscriptionSerializer

__all__ = [
    "OrderListSerializer",
    "OrderDetailSerializer",
    "OrderItemSerializer",
    "OrderStatusUpdateSerializer",
    "PaymentNotificationSerializer",
    "SubscriptionSerializer",
]
