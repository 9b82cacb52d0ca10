# store/models/__init__.py

from .carrier import ShippingCarrier, normalize_carrier_code
from .label_format import LabelFormat
from .store_settings import StoreSettings

__all__ = [
    "StoreSettings",
    "ShippingCarrier",
    "LabelFormat",
    "normalize_carrier_code",
]
