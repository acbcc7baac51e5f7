import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.choices import AccountStatus
from core.exceptions import ValidationFailed
from core.permissions import IsManager, IsStaff
from core.utils import eat_start_of_day, get_or_404, parse_date_value
from core.validators import PHONE_PATTERN, validate_document_upload
from customers.credit import apply_credit_amounts, normalize_payment_method
from customers.models import Customer, CustomerCredit, Supplier, SupplierCredit
from customers.serializers import (
    CustomerCreditSerializer,
    CustomerSerializer,
    SupplierCreditSerializer,
    SupplierSerializer,
)

logger = logging.getLogger(__name__)

SUPPLIER_PAYMENT_FIELDS = [
    "payment_info_cbe", "payment_info_coop", "payment_info_boa", "payment_info_awash", "payment_info_ebirr",
]


def _check_phone(value, message="Invalid phone number format"):
    if not PHONE_PATTERN.match(str(value).strip()):
        raise ValidationFailed(message)


class PartyViewSet(viewsets.ViewSet):
    """Shared list/retrieve/delete and per-party credit listing for customers and suppliers."""

    model = None
    serializer_class = None
    credit_serializer_class = None
    label = None

    def get_permissions(self):
        if self.action in ["update", "partial_update", "destroy"]:
            return [IsManager()]
        return [IsStaff()]

    def list(self, request):
        return Response(self.serializer_class(self.model.objects.all(), many=True).data)

    def retrieve(self, request, pk=None):
        return Response(self.serializer_class(get_or_404(self.model, pk, self.label)).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def delete_blockers(self, party):
        return False

    def destroy(self, request, pk=None):
        party = get_or_404(self.model, pk, self.label)
        if self.delete_blockers(party):
            raise ValidationFailed(self.blocked_message)
        party.delete()
        logger.info(f"{self.label} {pk} deleted by user {request.user.id}")
        return Response({"message": f"{self.label} deleted successfully"})

    @action(detail=True, methods=["get"])
    def credits(self, request, pk=None):
        party = get_or_404(self.model, pk, self.label)
        credits = party.credits.select_related("created_by", "updated_by").order_by("-credit_date")
        return Response({
            "creditCount": credits.count(),
            "credits": self.credit_serializer_class(credits, many=True).data,
        })


# ===================== CUSTOMER VIEWSET =====================
class CustomerViewSet(PartyViewSet):
    model = Customer
    serializer_class = CustomerSerializer
    credit_serializer_class = CustomerCreditSerializer
    label = "Customer"
    blocked_message = "Cannot delete customer with associated sales or credits"

    def _status_from(self, value, default):
        if not value:
            return default
        normalized = str(value).strip().upper()
        if normalized not in AccountStatus.values:
            raise ValidationFailed("Invalid customer status")
        return normalized

    def create(self, request):
        data = request.data
        if not data.get("name") or not data.get("phone") or not data.get("address"):
            raise ValidationFailed("Name, phone, and address are required")
        _check_phone(data["phone"])

        customer = Customer.objects.create(
            name=data["name"].strip(),
            phone=str(data["phone"]).strip(),
            address=data["address"].strip(),
            status=self._status_from(data.get("status"), AccountStatus.ACTIVE),
        )
        logger.info(f"Customer {customer.id} created by user {request.user.id}")
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        customer = get_or_404(Customer, pk, "Customer")
        data = request.data
        if data.get("phone"):
            _check_phone(data["phone"])
            customer.phone = str(data["phone"]).strip()
        if data.get("name"):
            customer.name = data["name"].strip()
        if data.get("address"):
            customer.address = data["address"].strip()
        customer.status = self._status_from(data.get("status"), customer.status)
        customer.save()
        logger.info(f"Customer {customer.id} updated by user {request.user.id}")
        return Response(CustomerSerializer(customer).data)

    def delete_blockers(self, customer):
        return customer.sales.exists() or customer.credits.exists()


# ===================== SUPPLIER VIEWSET =====================
class SupplierViewSet(PartyViewSet):
    model = Supplier
    serializer_class = SupplierSerializer
    credit_serializer_class = SupplierCreditSerializer
    label = "Supplier"
    blocked_message = "Cannot delete supplier with associated credits or medicines"

    def _apply(self, supplier, data):
        for field in ["supplier_name", "location", "email"] + SUPPLIER_PAYMENT_FIELDS:
            if data.get(field) is not None:
                setattr(supplier, field, str(data[field]).strip() or None)
        if data.get("contact_info"):
            _check_phone(data["contact_info"], "Invalid contact number format")
            supplier.contact_info = str(data["contact_info"]).strip()

    def create(self, request):
        data = request.data
        if not data.get("supplier_name") or not data.get("contact_info") or not data.get("location"):
            raise ValidationFailed("Name, contact info, and location are required")

        supplier = Supplier()
        self._apply(supplier, data)
        supplier.save()
        logger.info(f"Supplier {supplier.id} created by user {request.user.id}")
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        supplier = get_or_404(Supplier, pk, "Supplier")
        self._apply(supplier, request.data)
        supplier.save()
        logger.info(f"Supplier {supplier.id} updated by user {request.user.id}")
        return Response(SupplierSerializer(supplier).data)

    def delete_blockers(self, supplier):
        return supplier.credits.exists() or supplier.medicines.exists()


# ===================== CREDIT VIEWSETS =====================
class CreditViewSet(viewsets.ViewSet):
    """
    Create/edit/delete for one side of the credit ledger. unpaid_amount and
    the status column are recomputed on every write; an unknown payment
    method is stored as NONE.
    """

    model = None
    party_model = None
    party_field = None
    party_label = None
    serializer_class = None

    def get_permissions(self):
        if self.action == "list":
            return [IsStaff()]
        return [IsManager()]

    def _get_credit(self, pk):
        return get_or_404(self.model, pk, f"{self.party_label} credit")

    def _payment_file(self, request):
        upload = request.FILES.get("payment_file")
        if upload:
            try:
                validate_document_upload(upload)
            except ValidationError as e:
                raise ValidationFailed(e.messages[0])
        return upload

    def _apply_details(self, credit, data):
        for field in ("medicine_name", "description"):
            if data.get(field) is not None:
                setattr(credit, field, data[field])
        if data.get("credit_date"):
            credit.credit_date = eat_start_of_day(parse_date_value(data["credit_date"], "credit_date"))

    def list(self, request):
        credits = self.model.objects.select_related(self.party_field, "created_by", "updated_by")
        return Response(self.serializer_class(credits, many=True).data)

    @transaction.atomic
    def create(self, request):
        data = request.data
        party_key = f"{self.party_field}_id"
        if not data.get(party_key) or data.get("credit_amount") in (None, ""):
            raise ValidationFailed(f"{self.party_label} ID and credit amount are required")

        party = get_or_404(self.party_model, data[party_key], self.party_label)
        credit = self.model(**{self.party_field: party})
        apply_credit_amounts(credit, data.get("credit_amount"), data.get("paid_amount"))
        credit.payment_method = normalize_payment_method(data.get("payment_method"))
        self._apply_details(credit, data)
        credit.payment_file = self._payment_file(request)
        credit.created_by = request.user
        credit.save()

        logger.info(f"{self.party_label} credit {credit.id} created by user {request.user.id}")
        return Response(self.serializer_class(credit).data, status=status.HTTP_201_CREATED)

    @transaction.atomic
    def update(self, request, pk=None):
        credit = self._get_credit(pk)
        data = request.data

        party_key = f"{self.party_field}_id"
        if data.get(party_key):
            setattr(credit, self.party_field, get_or_404(self.party_model, data[party_key], self.party_label))

        apply_credit_amounts(
            credit,
            data.get("credit_amount", credit.credit_amount),
            data.get("paid_amount", credit.paid_amount),
        )
        if "payment_method" in data:
            credit.payment_method = normalize_payment_method(data.get("payment_method"))
        self._apply_details(credit, data)

        upload = self._payment_file(request)
        if upload:
            credit.payment_file = upload
        credit.updated_by = request.user
        credit.save()

        logger.info(f"{self.party_label} credit {credit.id} updated by user {request.user.id}")
        return Response(self.serializer_class(credit).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        credit = self._get_credit(pk)
        credit.delete()
        logger.info(f"{self.party_label} credit {pk} deleted by user {request.user.id}")
        return Response({"message": f"{self.party_label} credit deleted successfully"})


class CustomerCreditViewSet(CreditViewSet):
    model = CustomerCredit
    party_model = Customer
    party_field = "customer"
    party_label = "Customer"
    serializer_class = CustomerCreditSerializer


class SupplierCreditViewSet(CreditViewSet):
    model = SupplierCredit
    party_model = Supplier
    party_field = "supplier"
    party_label = "Supplier"
    serializer_class = SupplierCreditSerializer
