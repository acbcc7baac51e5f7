# pharmacy/api/views/medicine_views.py
import logging
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.exceptions import ConflictError, ValidationFailed
from core.permissions import IsManager, IsStaff
from core.utils import (
    discard_file_on_commit, eat_today, get_or_404, parse_bool, parse_date_value, parse_decimal, require_fields,
)
from core.validators import validate_document_upload
from customers.credit import normalize_payment_method
from customers.models import Supplier
from pharmacy.api.serializers import MedicineSerializer
from pharmacy.models import Category, DosageForm, Medicine, Sale, SaleReturn

logger = logging.getLogger(__name__)

MEDICINE_REQUIRED_FIELDS = [
    "medicine_name", "supplier_id", "unit_price", "sell_price", "quantity",
    "category_id", "dosage_form_id", "expire_date",
]

EXPIRY_ALERT_DAYS = 30


def parse_stock_quantity(value):
    try:
        quantity = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationFailed("Quantity must be a non-negative integer")
    if quantity < 0:
        raise ValidationFailed("Quantity must be a non-negative integer")
    return quantity


def normalize_batch_number(value):
    """Batch numbers are stored trimmed and upper-cased; blank means no batch."""
    if value is None:
        return None
    batch = str(value).strip().upper()
    return batch or None


def _medicines():
    return Medicine.objects.select_related("category", "dosage_form", "supplier", "created_by", "updated_by")


# ===================== MEDICINE VIEWSET =====================
class MedicineViewSet(viewsets.ViewSet):
    """
    Stock ledger for medicine batches. Create and edit recompute
    total_price from quantity and sell_price; sales and returns move it
    through pharmacy.services.stock.
    """

    def get_permissions(self):
        if self.action == "destroy":
            return [IsManager()]
        return [IsStaff()]

    def _check_batch(self, batch, exclude_pk=None):
        if not batch:
            return
        duplicates = Medicine.objects.filter(batch_number=batch)
        if exclude_pk is not None:
            duplicates = duplicates.exclude(pk=exclude_pk)
        if duplicates.exists():
            raise ConflictError(f"Batch number {batch} already exists")

    def _payment_file(self, request):
        upload = request.FILES.get("payment_file")
        if upload:
            try:
                validate_document_upload(upload)
            except ValidationError as e:
                raise ValidationFailed(e.messages[0])
        return upload

    def _apply_relations(self, medicine, data):
        if data.get("category_id"):
            medicine.category = get_or_404(Category, data["category_id"], "Category")
        if data.get("dosage_form_id"):
            medicine.dosage_form = get_or_404(DosageForm, data["dosage_form_id"], "Dosage form")
        if data.get("supplier_id"):
            medicine.supplier = get_or_404(Supplier, data["supplier_id"], "Supplier")

    def _apply_details(self, medicine, data):
        for field in ("medicine_name", "brand_name", "details", "invoice_number"):
            if data.get(field) is not None:
                setattr(medicine, field, str(data[field]).strip())
        if data.get("medicine_weight") not in (None, ""):
            medicine.medicine_weight = parse_decimal(data["medicine_weight"], "Invalid medicine weight")
        if data.get("expire_date"):
            medicine.expire_date = parse_date_value(data["expire_date"], "expire_date")
        if "required_prescription" in data:
            medicine.required_prescription = parse_bool(data.get("required_prescription"))
        if "payment_method" in data:
            medicine.payment_method = normalize_payment_method(data.get("payment_method"))

    def _check_prices(self, medicine):
        if medicine.sell_price < medicine.unit_price:
            raise ValidationFailed("Sell price must be greater than or equal to unit price")

    def list(self, request):
        return Response(MedicineSerializer(_medicines(), many=True).data)

    def retrieve(self, request, pk=None):
        return Response(MedicineSerializer(get_or_404(_medicines(), pk, "Medicine")).data)

    @transaction.atomic
    def create(self, request):
        data = request.data
        require_fields(data, MEDICINE_REQUIRED_FIELDS)

        batch = normalize_batch_number(data.get("batch_number"))
        self._check_batch(batch)

        quantity = parse_stock_quantity(data["quantity"])
        medicine = Medicine(
            batch_number=batch,
            quantity=quantity,
            initial_quantity=quantity,
            unit_price=parse_decimal(data["unit_price"], "Invalid unit price"),
            sell_price=parse_decimal(data["sell_price"], "Invalid sell price"),
            created_by=request.user,
        )
        self._apply_relations(medicine, data)
        self._apply_details(medicine, data)
        self._check_prices(medicine)
        medicine.payment_file = self._payment_file(request)
        medicine.recompute_total_price()
        medicine.save()

        logger.info(f"Medicine {medicine.id} ({medicine.batch_number}) created by user {request.user.id}")
        return Response(MedicineSerializer(medicine).data, status=status.HTTP_201_CREATED)

    @transaction.atomic
    def update(self, request, pk=None):
        medicine = get_or_404(Medicine.objects.select_for_update(), pk, "Medicine")
        data = request.data

        if "batch_number" in data:
            batch = normalize_batch_number(data.get("batch_number"))
            self._check_batch(batch, exclude_pk=medicine.pk)
            medicine.batch_number = batch

        if data.get("quantity") not in (None, ""):
            quantity = parse_stock_quantity(data["quantity"])
            # Restocking counts toward the units received for this batch
            if quantity > medicine.quantity:
                medicine.initial_quantity += quantity - medicine.quantity
            medicine.quantity = quantity
        if data.get("unit_price") not in (None, ""):
            medicine.unit_price = parse_decimal(data["unit_price"], "Invalid unit price")
        if data.get("sell_price") not in (None, ""):
            medicine.sell_price = parse_decimal(data["sell_price"], "Invalid sell price")

        self._apply_relations(medicine, data)
        self._apply_details(medicine, data)
        self._check_prices(medicine)

        upload = self._payment_file(request)
        if upload:
            discard_file_on_commit(medicine.payment_file)
            medicine.payment_file = upload
        medicine.recompute_total_price()
        medicine.updated_by = request.user
        medicine.save()

        logger.info(f"Medicine {medicine.id} updated by user {request.user.id}")
        return Response(MedicineSerializer(medicine).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        medicine = get_or_404(Medicine, pk, "Medicine")
        with transaction.atomic():
            returns_deleted, _ = SaleReturn.objects.filter(medicine=medicine).delete()
            sales_deleted, _ = Sale.objects.filter(medicine=medicine).delete()
            medicine.delete()
            discard_file_on_commit(medicine.payment_file)

        logger.info(
            f"Medicine {pk} deleted by user {request.user.id} "
            f"with {sales_deleted} sale rows and {returns_deleted} return rows"
        )
        return Response({"message": "Medicine and its sales and returns deleted successfully"})

    # ===================== STOCK QUERIES =====================
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        medicines = _medicines().filter(quantity__lte=settings.LOW_STOCK_THRESHOLD).order_by("quantity")
        return Response({"count": medicines.count(), "medicines": MedicineSerializer(medicines, many=True).data})

    @action(detail=False, methods=["get"])
    def alerts(self, request):
        today = eat_today()
        medicines = _medicines().filter(
            expire_date__gt=today, expire_date__lte=today + timedelta(days=EXPIRY_ALERT_DAYS)
        ).order_by("expire_date")
        return Response({"count": medicines.count(), "medicines": MedicineSerializer(medicines, many=True).data})

    @action(detail=False, methods=["get"])
    def expired(self, request):
        medicines = _medicines().filter(expire_date__lte=eat_today()).order_by("expire_date")
        return Response({"count": medicines.count(), "medicines": MedicineSerializer(medicines, many=True).data})

    @action(detail=False, methods=["get"], url_path=r"batch/(?P<batch>[^/]+)")
    def by_batch(self, request, batch=None):
        medicines = _medicines().filter(batch_number__icontains=batch.strip())
        if not medicines.exists():
            return Response({"message": f"No medicines found for batch {batch}"}, status=status.HTTP_404_NOT_FOUND)
        return Response(MedicineSerializer(medicines, many=True).data)
