# pharmacy_backend/urls.py
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from reports.views import ExpenseReportView, ExpirationReportView, MedicineReportView, SalesReportView

urlpatterns = [
    # -------------------------
    # Admin Panel
    # -------------------------
    path("admin/", admin.site.urls),

    # -------------------------
    # Reports (ahead of the routers so "report" is not read as an id)
    # -------------------------
    path("api/medicines/report/", MedicineReportView.as_view(), name="medicine-report"),
    path("api/expire/report/", ExpirationReportView.as_view(), name="expiration-report"),
    path("api/sales/report/", SalesReportView.as_view(), name="sales-report"),
    path("api/expenses/report/", ExpenseReportView.as_view(), name="expense-report"),

    # -------------------------
    # Customers / Suppliers and their credits
    # -------------------------
    path("api/customers/", include("customers.urls")),
    path("api/suppliers/", include("customers.supplier_urls")),

    # -------------------------
    # OKR
    # -------------------------
    path("api/okr/", include("okr.urls")),

    # -------------------------
    # Inventory, sales, returns, expenses
    # -------------------------
    path("api/", include("pharmacy.api.urls.inventory_urls")),
    path("api/", include("pharmacy.api.urls.sale_urls")),

    # -------------------------
    # Auth, users, members
    # -------------------------
    path("api/", include("core.urls")),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
