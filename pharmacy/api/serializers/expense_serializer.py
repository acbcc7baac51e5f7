from rest_framework import serializers

from pharmacy.models import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    created_by = serializers.ReadOnlyField(source="created_by.username", default=None)
    updated_by = serializers.ReadOnlyField(source="updated_by.username", default=None)

    class Meta:
        model = Expense
        fields = [
            "id", "reason", "amount", "description", "date", "payment_method", "receipt",
            "additional_info", "created_by", "updated_by", "created_at", "updated_at",
        ]
