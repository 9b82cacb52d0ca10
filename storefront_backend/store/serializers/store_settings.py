# store/serializers/store_settings.py

import string

from rest_framework import serializers

from store.models import StoreSettings


class StoreSettingsSerializer(serializers.ModelSerializer):
    """
    The Mercado Pago access token is write-only: it can be replaced from the
    back office but is never returned. has_access_token tells the UI whether
    one is stored.
    """

    mercadopago_access_token = serializers.CharField(
        write_only=True,
        required=False,
        allow_blank=True,
        style={"input_type": "password"},
    )
    has_access_token = serializers.SerializerMethodField()

    class Meta:
        model = StoreSettings
        fields = [
            "store_name",
            "store_cnpj",
            "store_email",
            "store_phone",
            "whatsapp_number",
            "sender_name",
            "sender_street",
            "sender_number",
            "sender_complement",
            "sender_neighborhood",
            "sender_city",
            "sender_state",
            "sender_postal_code",
            "mercadopago_public_key",
            "mercadopago_access_token",
            "has_access_token",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]

    def get_has_access_token(self, obj) -> bool:
        return bool((obj.mercadopago_access_token or "").strip())

    def validate_sender_postal_code(self, value):
        digits = "".join(ch for ch in str(value or "") if ch in string.digits)
        if value and len(digits) != 8:
            raise serializers.ValidationError("CEP must have 8 digits")
        return digits

    def validate_mercadopago_access_token(self, value):
        return (value or "").strip()
