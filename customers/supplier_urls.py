from django.urls import path, include
from rest_framework.routers import SimpleRouter

from reports.views import SupplierCreditReportView
from .views import SupplierViewSet, SupplierCreditViewSet

router = SimpleRouter()
router.register(r"credits", SupplierCreditViewSet, basename="supplier-credit")
router.register(r"", SupplierViewSet, basename="supplier")

urlpatterns = [
    path("credits/report/", SupplierCreditReportView.as_view(), name="supplier-credit-report"),
    path("", include(router.urls)),
]
