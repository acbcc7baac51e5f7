from django.urls import path, include
from rest_framework.routers import SimpleRouter

from reports.views import CustomerCreditReportView
from .views import CustomerViewSet, CustomerCreditViewSet

router = SimpleRouter()
# Credit routes first so "credits/" is not taken for a customer id
router.register(r"credits", CustomerCreditViewSet, basename="customer-credit")
router.register(r"", CustomerViewSet, basename="customer")

urlpatterns = [
    path("credits/report/", CustomerCreditReportView.as_view(), name="customer-credit-report"),
    path("", include(router.urls)),
]
