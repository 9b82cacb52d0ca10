# store/admin.py

from django.contrib import admin

from store.models import LabelFormat, ShippingCarrier, StoreSettings


@admin.register(StoreSettings)
class StoreSettingsAdmin(admin.ModelAdmin):
    list_display = ("store_name", "store_email", "sender_city", "updated_at")

    def has_add_permission(self, request):
        return not StoreSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ShippingCarrier)
class ShippingCarrierAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "fixed_price", "price_per_kg", "delivery_time_days", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "code")


@admin.register(LabelFormat)
class LabelFormatAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "width_mm", "height_mm", "format_type", "is_default", "is_active")
    list_filter = ("format_type", "is_active")
