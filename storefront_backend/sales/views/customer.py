# sales/views/customer.py

"""
CUSTOMER AREA

GET  /api/sales/my-orders/                 own orders (newest first)
GET  /api/sales/my-orders/<id>/
GET  /api/sales/my-subscriptions/
POST /api/sales/my-subscriptions/<id>/pause/
POST /api/sales/my-subscriptions/<id>/resume/
POST /api/sales/my-subscriptions/<id>/cancel/
"""

import logging

from django.db.models import Count
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from sales.models import Order, Subscription
from sales.serializers import OrderDetailSerializer, OrderListSerializer, SubscriptionSerializer

logger = logging.getLogger(__name__)


class MyOrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated]

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        return OrderDetailSerializer

    def get_queryset(self):
        qs = Order.objects.filter(user=self.request.user)
        if self.action == "list":
            return qs.annotate(item_count=Count("items")).order_by("-created_at")
        return qs.prefetch_related("items")


# current status -> allowed target, per action
SUBSCRIPTION_ACTIONS = {
    "pause": ({Subscription.STATUS_ACTIVE}, Subscription.STATUS_PAUSED),
    "resume": ({Subscription.STATUS_PAUSED}, Subscription.STATUS_ACTIVE),
    "cancel": ({Subscription.STATUS_ACTIVE, Subscription.STATUS_PAUSED}, Subscription.STATUS_CANCELLED),
}


class MySubscriptionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SubscriptionSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Subscription.objects.filter(user=self.request.user).prefetch_related("products")

    def _move(self, request, name):
        subscription = self.get_object()
        allowed_from, target = SUBSCRIPTION_ACTIONS[name]

        if subscription.status not in allowed_from:
            return Response(
                {"detail": f"Cannot {name} a subscription that is '{subscription.status}'."},
                status=status.HTTP_409_CONFLICT,
            )

        subscription.status = target
        subscription.save(update_fields=["status", "updated_at"])
        logger.info(
            "Subscription status changed",
            extra={"subscription_id": str(subscription.id), "status": target},
        )
        return Response(self.get_serializer(subscription).data)

    @action(detail=True, methods=["post"])
    def pause(self, request, pk=None):
        return self._move(request, "pause")

    @action(detail=True, methods=["post"])
    def resume(self, request, pk=None):
        return self._move(request, "resume")

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        return self._move(request, "cancel")
