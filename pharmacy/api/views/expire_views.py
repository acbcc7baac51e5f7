from datetime import timedelta
from decimal import Decimal

from django.db.models import Sum
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsStaff
from core.utils import eat_today
from pharmacy.api.serializers import MedicineSerializer
from pharmacy.models import Medicine

EXPIRY_ALERT_WINDOW_DAYS = 365


def _medicines():
    return Medicine.objects.select_related("category", "dosage_form", "supplier")


class ExpiredMedicinesView(APIView):
    permission_classes = [IsStaff]

    def get(self, request):
        medicines = _medicines().filter(expire_date__lte=eat_today()).order_by("expire_date")
        total_value = medicines.aggregate(total=Sum("total_price"))["total"] or Decimal("0")
        return Response({
            "count": medicines.count(),
            "totalValue": str(total_value),
            "medicines": MedicineSerializer(medicines, many=True).data,
        })


class ExpiryAlertsView(APIView):
    """Batches that are still sellable but expire within a year."""

    permission_classes = [IsStaff]

    def get(self, request):
        today = eat_today()
        medicines = _medicines().filter(
            expire_date__gt=today,
            expire_date__lte=today + timedelta(days=EXPIRY_ALERT_WINDOW_DAYS),
        ).order_by("expire_date")
        return Response({"count": medicines.count(), "medicines": MedicineSerializer(medicines, many=True).data})
