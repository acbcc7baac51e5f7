# reports/views.py
import logging
from datetime import datetime, time, timedelta

from django.db.models import Sum
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import ValidationFailed
from core.permissions import IsManager, IsStaff
from core.utils import EAT, eat_now, eat_start_of_day, eat_today, get_or_404, parse_date_value
from customers.models import Customer, CustomerCredit, Supplier, SupplierCredit
from customers.serializers import CustomerCreditSerializer, SupplierCreditSerializer
from pharmacy.api.serializers import MedicineSerializer, SaleSerializer
from pharmacy.models import Expense, Medicine, Sale
from reports import aggregators

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def parse_pagination(params):
    try:
        limit = int(params.get("limit", DEFAULT_LIMIT))
    except (TypeError, ValueError):
        raise ValidationFailed("Invalid limit value")
    try:
        offset = int(params.get("offset", 0))
    except (TypeError, ValueError):
        raise ValidationFailed("Invalid offset value")
    if limit <= 0:
        raise ValidationFailed("Invalid limit value")
    if offset < 0:
        raise ValidationFailed("Invalid offset value")
    return min(limit, MAX_LIMIT), offset


def parse_date_range(params):
    """start_date/end_date as YYYY-MM-DD; end_date covers the whole EAT day."""
    start = end = None
    if params.get("start_date"):
        start = eat_start_of_day(parse_date_value(params["start_date"], "start_date"))
    if params.get("end_date"):
        end = datetime.combine(parse_date_value(params["end_date"], "end_date"), time.max, tzinfo=EAT)
    if start and end and start > end:
        raise ValidationFailed("start_date must be before end_date")
    return start, end


def _date_filters(field, start, end):
    filters = {}
    if start:
        filters[f"{field}__gte"] = start
    if end:
        filters[f"{field}__lte"] = end
    return filters


# ===================== SALES REPORT =====================
class SalesReportView(APIView):
    permission_classes = [IsStaff]

    def get(self, request):
        params = request.query_params
        limit, offset = parse_pagination(params)
        start, end = parse_date_range(params)

        filters = _date_filters("sealed_date", start, end)
        customer_id = params.get("customer_id")
        if customer_id:
            filters["customer"] = get_or_404(Customer, customer_id, "Customer")

        # Totals cover every matching sale; only the listed rows are paged
        queryset = Sale.objects.filter(**filters).order_by("-sealed_date")
        summary = aggregators.sales_summary(list(queryset.only("quantity", "total_amount", "payment_method")))
        summary.update(aggregators.page_info(summary["salesCount"], limit, offset))
        summary.update({"startDate": start, "endDate": end, "customerId": customer_id or None})

        page = queryset.select_related("medicine", "customer", "dosage_form", "created_by", "updated_by")
        sales = list(page[offset:offset + limit])

        logger.info(f"Sales report generated with {len(sales)} sales by user {request.user.id}")
        return Response({
            "summary": summary,
            "sales": SaleSerializer(sales, many=True).data,
            "message": "Sales report generated successfully" if sales else "No sales found for the specified filters",
        })


# ===================== MEDICINE REPORT =====================
class MedicineReportView(APIView):
    permission_classes = [IsStaff]

    def get(self, request):
        medicines = list(
            Medicine.objects.select_related("category", "dosage_form", "created_by", "updated_by")
        )
        units_sold = {
            row["medicine_id"]: row["units"]
            for row in Sale.objects.values("medicine_id").annotate(units=Sum("quantity"))
        }
        recent = [m for m in medicines if m.created_at >= eat_now() - timedelta(days=7)]

        report = aggregators.medicine_report(medicines, units_sold, recent)
        report["generatedAt"] = eat_now()
        logger.info(f"Medicine report generated over {len(medicines)} medicines by user {request.user.id}")
        return Response(report)


# ===================== EXPIRATION REPORT =====================
class ExpirationReportView(APIView):
    permission_classes = [IsStaff]

    def get(self, request):
        params = request.query_params
        time_period = params.get("time_period") or aggregators.DEFAULT_TIME_PERIOD
        if time_period not in aggregators.TIME_PERIOD_DAYS:
            raise ValidationFailed(
                f"Invalid time_period. Use one of: {', '.join(aggregators.TIME_PERIOD_DAYS)}"
            )
        limit, offset = parse_pagination(params)
        today = eat_today()

        medicines = Medicine.objects.select_related("category", "dosage_form", "supplier").order_by("expire_date")
        if time_period != "all":
            medicines = medicines.filter(expire_date__lte=today + timedelta(days=aggregators.EXPIRY_HORIZON_DAYS))
        if params.get("category"):
            medicines = medicines.filter(category__name=params["category"])

        # Counts and value cover every matching batch; the listed batches are one page
        medicines = list(medicines)
        report = aggregators.expiration_report(medicines, today, time_period)
        page_ids = {m.id for m in medicines[offset:offset + limit]}
        for key in ("expiredMedicines", "expiringSoonMedicines", "expiringLaterMedicines"):
            listed = [m for m in report[key] if m.id in page_ids]
            report[key] = MedicineSerializer(listed, many=True).data
        report.update(aggregators.page_info(len(medicines), limit, offset))
        report["generatedAt"] = eat_now()
        return Response(report)


# ===================== CREDIT REPORTS =====================
class CreditReportView(APIView):
    """Paginated credit listing with totals over the returned page."""

    permission_classes = [IsManager]
    model = None
    party_model = None
    party_field = None
    party_label = None
    serializer_class = None

    def get(self, request):
        params = request.query_params
        limit, offset = parse_pagination(params)
        start, end = parse_date_range(params)

        filters = _date_filters("credit_date", start, end)
        party_id = params.get(f"{self.party_field}_id")
        if party_id:
            filters[self.party_field] = get_or_404(self.party_model, party_id, self.party_label)

        queryset = self.model.objects.filter(**filters)
        total_records = queryset.count()
        credits = list(
            queryset.select_related(self.party_field, "created_by", "updated_by")
            .order_by("-credit_date")[offset:offset + limit]
        )

        logger.info(f"{self.party_label} credit report with {len(credits)} rows by user {request.user.id}")
        return Response({
            "summary": aggregators.credit_summary(credits, total_records, limit, offset),
            "credits": self.serializer_class(credits, many=True).data,
        })


class CustomerCreditReportView(CreditReportView):
    model = CustomerCredit
    party_model = Customer
    party_field = "customer"
    party_label = "Customer"
    serializer_class = CustomerCreditSerializer


class SupplierCreditReportView(CreditReportView):
    model = SupplierCredit
    party_model = Supplier
    party_field = "supplier"
    party_label = "Supplier"
    serializer_class = SupplierCreditSerializer


# ===================== EXPENSE REPORT =====================
class ExpenseReportView(APIView):
    permission_classes = [IsManager]

    def get(self, request):
        start, end = parse_date_range(request.query_params)
        filters = {}
        if start:
            filters["date__gte"] = start.date()
        if end:
            filters["date__lte"] = end.date()
        expenses = list(Expense.objects.filter(**filters))

        report = aggregators.expense_report(expenses)
        logger.info(f"Expense report generated over {len(expenses)} expenses by user {request.user.id}")
        return Response(report)
