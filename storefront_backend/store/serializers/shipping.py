# store/serializers/shipping.py

from rest_framework import serializers

from store.models import LabelFormat, ShippingCarrier, normalize_carrier_code


def _unique_code(model, value, instance) -> str:
    """
    Codes are compared after normalization, so "Jadlog Express" and
    "jadlog-express" collide.
    """
    code = normalize_carrier_code(value)
    if not code:
        raise serializers.ValidationError("code is required")

    qs = model.objects.filter(code=code)
    if instance is not None:
        qs = qs.exclude(pk=instance.pk)
    if qs.exists():
        raise serializers.ValidationError("This code is already in use.")
    return code


class ShippingCarrierSerializer(serializers.ModelSerializer):
    class Meta:
        model = ShippingCarrier
        fields = [
            "id",
            "name",
            "code",
            "price_per_kg",
            "fixed_price",
            "delivery_time_days",
            "logo_url",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {"code": {"validators": []}}

    def validate_code(self, value):
        return _unique_code(ShippingCarrier, value, self.instance)

    def validate_delivery_time_days(self, value):
        if value < 1:
            raise serializers.ValidationError("delivery_time_days must be at least 1")
        return value


class LabelFormatSerializer(serializers.ModelSerializer):
    class Meta:
        model = LabelFormat
        fields = [
            "id",
            "name",
            "code",
            "width_mm",
            "height_mm",
            "format_type",
            "is_active",
            "is_default",
            "notes",
            "created_at",
        ]
        read_only_fields = ["id", "created_at"]
        extra_kwargs = {"code": {"validators": []}}

    def validate_code(self, value):
        return _unique_code(LabelFormat, value, self.instance)


class CarrierQuoteSerializer(serializers.Serializer):
    carrier_id = serializers.UUIDField()
    name = serializers.CharField()
    code = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    delivery_time_days = serializers.IntegerField()
