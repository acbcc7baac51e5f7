from rest_framework import serializers

from .models import Customer, CustomerCredit, Supplier, SupplierCredit


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ["id", "name", "phone", "address", "status", "created_at", "updated_at"]


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = [
            "id", "supplier_name", "contact_info", "payment_info_cbe", "payment_info_coop",
            "payment_info_boa", "payment_info_awash", "payment_info_ebirr", "location", "email",
            "created_at", "updated_at",
        ]


class CreditSerializerMixin(serializers.Serializer):
    created_by = serializers.ReadOnlyField(source="created_by.username", default=None)
    updated_by = serializers.ReadOnlyField(source="updated_by.username", default=None)


class CustomerCreditSerializer(CreditSerializerMixin, serializers.ModelSerializer):
    customer = serializers.SerializerMethodField()

    class Meta:
        model = CustomerCredit
        fields = [
            "id", "customer", "credit_amount", "paid_amount", "unpaid_amount", "medicine_name",
            "payment_method", "description", "status", "credit_date", "payment_file",
            "created_by", "updated_by", "created_at", "updated_at",
        ]

    def get_customer(self, obj):
        return {"id": obj.customer_id, "name": obj.customer.name, "phone": obj.customer.phone}


class SupplierCreditSerializer(CreditSerializerMixin, serializers.ModelSerializer):
    supplier = serializers.SerializerMethodField()

    class Meta:
        model = SupplierCredit
        fields = [
            "id", "supplier", "credit_amount", "paid_amount", "unpaid_amount", "medicine_name",
            "payment_method", "description", "payment_status", "credit_date", "payment_file",
            "created_by", "updated_by", "created_at", "updated_at",
        ]

    def get_supplier(self, obj):
        return {"id": obj.supplier_id, "supplier_name": obj.supplier.supplier_name}
