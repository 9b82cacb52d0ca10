from .shipping import LabelFormatViewSet, ShippingCarrierViewSet
from .store_settings import StoreSettingsView

__all__ = [
    "StoreSettingsView",
    "ShippingCarrierViewSet",
    "LabelFormatViewSet",
]
