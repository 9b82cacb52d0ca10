# sales/api/urls.py

"""
SALES API URLS

Mounted at /api/sales/ (backend/urls.py).

Back office:
    /api/sales/orders/                       list / detail / set-status / print
    GET /api/sales/reports/dashboard/

Customer area:
    /api/sales/my-orders/
    /api/sales/my-subscriptions/

Public storefront endpoints live under /api/public/ and must NOT be added here.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.views.admin_orders import OrderViewSet
from sales.views.customer import MyOrderViewSet, MySubscriptionViewSet
from sales.views.reports import DashboardView

router = DefaultRouter()
router.register(r"orders", OrderViewSet, basename="orders")
router.register(r"my-orders", MyOrderViewSet, basename="my-orders")
router.register(r"my-subscriptions", MySubscriptionViewSet, basename="my-subscriptions")

urlpatterns = [
    # explicit routes before router URLs
    path("reports/dashboard/", DashboardView.as_view(), name="sales-reports-dashboard"),
    path("", include(router.urls)),
]
