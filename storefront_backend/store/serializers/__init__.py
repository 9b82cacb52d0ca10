from .shipping import CarrierQuoteSerializer, LabelFormatSerializer, ShippingCarrierSerializer
from .store_settings import StoreSettingsSerializer

__all__ = [
    "StoreSettingsSerializer",
    "ShippingCarrierSerializer",
    "LabelFormatSerializer",
    "CarrierQuoteSerializer",
]
