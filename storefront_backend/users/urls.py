# users/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    CustomerViewSet,
    LoginView,
    MeView,
    ProfileView,
    RegisterView,
    UserAddressViewSet,
)

app_name = "users"

router = DefaultRouter()
router.register(r"addresses", UserAddressViewSet, basename="addresses")
router.register(r"customers", CustomerViewSet, basename="customers")

urlpatterns = [
    # ---------------- PUBLIC AUTH ----------------
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    # ---------------- AUTHENTICATED ----------------
    path("me/", MeView.as_view(), name="me"),
    path("profile/", ProfileView.as_view(), name="profile"),
    path("", include(router.urls)),
]
