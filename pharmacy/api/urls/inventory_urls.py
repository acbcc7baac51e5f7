# pharmacy/api/urls/inventory_urls.py
from django.urls import path
from rest_framework.routers import SimpleRouter

from pharmacy.api.views.catalog_views import CategoryViewSet, DosageFormViewSet
from pharmacy.api.views.expire_views import ExpiredMedicinesView, ExpiryAlertsView
from pharmacy.api.views.medicine_views import MedicineViewSet

router = SimpleRouter()

# ===================== CATALOG ROUTES =====================
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"dosage-forms", DosageFormViewSet, basename="dosage-form")

# ===================== MEDICINE ROUTES =====================
router.register(r"medicines", MedicineViewSet, basename="medicine")

urlpatterns = [
    path("expire/expired/", ExpiredMedicinesView.as_view(), name="expired-medicines"),
    path("expire/alerts/", ExpiryAlertsView.as_view(), name="expiry-alerts"),
] + router.urls
