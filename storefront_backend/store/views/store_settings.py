# store/views/store_settings.py

"""
STORE SETTINGS

GET/PUT/PATCH /api/store/settings/   (capability: settings.manage)

Singleton row; the Mercado Pago access token saved here takes precedence
over the MERCADOPAGO_ACCESS_TOKEN environment value.
"""

import logging

from rest_framework import generics
from rest_framework.permissions import IsAuthenticated

from permissions.roles import CAP_SETTINGS_MANAGE, HasCapability
from store.models import StoreSettings
from store.serializers import StoreSettingsSerializer

logger = logging.getLogger(__name__)


class StoreSettingsView(generics.RetrieveUpdateAPIView):
    serializer_class = StoreSettingsSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SETTINGS_MANAGE

    def get_object(self):
        return StoreSettings.load()

    def perform_update(self, serializer):
        token_changed = "mercadopago_access_token" in serializer.validated_data
        serializer.save()
        logger.info(
            "Store settings updated",
            extra={"user_id": str(self.request.user.id), "access_token_changed": token_changed},
        )
