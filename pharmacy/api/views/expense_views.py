import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.response import Response

from core.choices import PaymentMethod
from core.exceptions import ValidationFailed
from core.permissions import IsManager
from core.utils import discard_file_on_commit, get_or_404, parse_date_value, parse_decimal, require_fields
from core.validators import validate_receipt_upload
from pharmacy.api.serializers import ExpenseSerializer
from pharmacy.models import Expense

logger = logging.getLogger(__name__)

EXPENSE_REQUIRED_FIELDS = ["reason", "amount", "date", "payment_method"]


def parse_expense_payment_method(value):
    method = str(value or "").strip().upper()
    if method not in PaymentMethod.values or method == PaymentMethod.NONE:
        raise ValidationFailed("A valid payment method is required")
    return method


def parse_expense_amount(value):
    amount = parse_decimal(value, "Amount must be greater than zero")
    if amount <= 0:
        raise ValidationFailed("Amount must be greater than zero")
    return amount


# ===================== EXPENSE VIEWSET =====================
class ExpenseViewSet(viewsets.ViewSet):
    permission_classes = [IsManager]

    def _receipt(self, request):
        upload = request.FILES.get("receipt")
        if upload:
            try:
                validate_receipt_upload(upload)
            except ValidationError as e:
                raise ValidationFailed(e.messages[0])
        return upload

    def _apply(self, expense, data):
        if data.get("reason"):
            expense.reason = str(data["reason"]).strip()
        if data.get("amount") not in (None, ""):
            expense.amount = parse_expense_amount(data["amount"])
        if data.get("date"):
            expense.date = parse_date_value(data["date"], "date")
        if "payment_method" in data:
            expense.payment_method = parse_expense_payment_method(data.get("payment_method"))
        for field in ("description", "additional_info"):
            if data.get(field) is not None:
                setattr(expense, field, data[field])

    def list(self, request):
        expenses = Expense.objects.select_related("created_by", "updated_by")
        return Response(ExpenseSerializer(expenses, many=True).data)

    def retrieve(self, request, pk=None):
        return Response(ExpenseSerializer(get_or_404(Expense, pk, "Expense")).data)

    @transaction.atomic
    def create(self, request):
        require_fields(request.data, EXPENSE_REQUIRED_FIELDS)
        expense = Expense(created_by=request.user)
        self._apply(expense, request.data)
        expense.receipt = self._receipt(request)
        expense.save()

        logger.info(f"Expense {expense.id} of {expense.amount} recorded by user {request.user.id}")
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @transaction.atomic
    def update(self, request, pk=None):
        expense = get_or_404(Expense, pk, "Expense")
        self._apply(expense, request.data)

        upload = self._receipt(request)
        if upload:
            # Replaced receipts are removed from disk after commit
            discard_file_on_commit(expense.receipt)
            expense.receipt = upload
        expense.updated_by = request.user
        expense.save()

        logger.info(f"Expense {expense.id} updated by user {request.user.id}")
        return Response(ExpenseSerializer(expense).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        expense = get_or_404(Expense, pk, "Expense")
        with transaction.atomic():
            expense.delete()
            discard_file_on_commit(expense.receipt)
        logger.info(f"Expense {pk} deleted by user {request.user.id}")
        return Response({"message": "Expense deleted successfully"})
