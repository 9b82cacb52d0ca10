# products/admin.py

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "sku",
        "category",
        "price",
        "weight_grams",
        "stock",
        "featured",
        "is_active",
        "display_order",
    )
    list_filter = ("is_active", "featured", "category")
    list_editable = ("display_order", "featured", "is_active")
    search_fields = ("name", "sku")
    ordering = ("display_order", "name")
    readonly_fields = ("created_at", "updated_at")
