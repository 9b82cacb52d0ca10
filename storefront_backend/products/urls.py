# products/urls.py

"""
PRODUCTS URLS

Back-office catalog routes under /api/products/
(the storefront reads the catalog through /api/public/catalog/).
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import ProductViewSet

router = DefaultRouter()
router.register(r"products", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
