# store/views/shipping.py

"""
SHIPPING CONFIGURATION (BACK OFFICE)

/api/store/carriers/        ShippingCarrier CRUD
/api/store/label-formats/   LabelFormat CRUD + set-default

Capability: shipping.manage
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_SHIPPING_MANAGE, HasCapability
from store.models import LabelFormat, ShippingCarrier
from store.serializers import LabelFormatSerializer, ShippingCarrierSerializer


class ShippingCarrierViewSet(viewsets.ModelViewSet):
    queryset = ShippingCarrier.objects.all().order_by("name")
    serializer_class = ShippingCarrierSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SHIPPING_MANAGE
    filterset_fields = ["is_active"]


class LabelFormatViewSet(viewsets.ModelViewSet):
    queryset = LabelFormat.objects.all()
    serializer_class = LabelFormatSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SHIPPING_MANAGE
    filterset_fields = ["is_active", "format_type"]

    @action(detail=True, methods=["post"], url_path="set-default")
    def set_default(self, request, pk=None):
        label_format = self.get_object()
        if not label_format.is_active:
            return Response(
                {"detail": "Inactive label formats cannot be the default."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        label_format.is_default = True
        label_format.save()
        return Response(self.get_serializer(label_format).data)
