# store/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from store.views import LabelFormatViewSet, ShippingCarrierViewSet, StoreSettingsView

router = DefaultRouter()
router.register(r"carriers", ShippingCarrierViewSet, basename="carriers")
router.register(r"label-formats", LabelFormatViewSet, basename="label-formats")

urlpatterns = [
    path("settings/", StoreSettingsView.as_view(), name="store-settings"),
    path("", include(router.urls)),
]
