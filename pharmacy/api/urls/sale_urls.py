# pharmacy/api/urls/sale_urls.py
from rest_framework.routers import SimpleRouter

from pharmacy.api.views.expense_views import ExpenseViewSet
from pharmacy.api.views.sale_views import SaleReturnViewSet, SaleViewSet

router = SimpleRouter()

# ===================== SALES ROUTES =====================
router.register(r"sales", SaleViewSet, basename="sale")

# ===================== RETURN ROUTES =====================
router.register(r"returns", SaleReturnViewSet, basename="return")

# ===================== EXPENSE ROUTES =====================
router.register(r"expenses", ExpenseViewSet, basename="expense")

urlpatterns = router.urls
