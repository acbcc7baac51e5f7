from rest_framework import serializers

from pharmacy.models import Sale, SaleReturn


# ===================== SALE SERIALIZER =====================
class SaleSerializer(serializers.ModelSerializer):
    medicine = serializers.SerializerMethodField()
    customer = serializers.SerializerMethodField()
    dosage_form = serializers.SerializerMethodField()
    created_by = serializers.ReadOnlyField(source="created_by.username", default=None)
    updated_by = serializers.ReadOnlyField(source="updated_by.username", default=None)

    class Meta:
        model = Sale
        fields = [
            "id", "medicine", "customer", "dosage_form", "product_name", "product_batch_number",
            "quantity", "price", "total_amount", "payment_method", "prescription", "sealed_date",
            "created_by", "updated_by", "created_at", "updated_at",
        ]

    def get_medicine(self, obj):
        return {
            "id": obj.medicine_id,
            "medicine_name": obj.medicine.medicine_name,
            "batch_number": obj.medicine.batch_number,
            "sell_price": str(obj.medicine.sell_price),
        }

    def get_customer(self, obj):
        if not obj.customer_id:
            return None
        return {"id": obj.customer_id, "name": obj.customer.name, "phone": obj.customer.phone}

    def get_dosage_form(self, obj):
        return {"id": obj.dosage_form_id, "name": obj.dosage_form.name}


# ===================== RETURN SERIALIZER =====================
class SaleReturnSerializer(serializers.ModelSerializer):
    sale_id = serializers.IntegerField(read_only=True)
    medicine = serializers.SerializerMethodField()
    dosage_form = serializers.SerializerMethodField()
    created_by = serializers.ReadOnlyField(source="created_by.username", default=None)

    class Meta:
        model = SaleReturn
        fields = [
            "id", "sale_id", "medicine", "dosage_form", "product_name", "product_batch_number",
            "quantity", "reason_for_return", "return_date", "created_by", "created_at", "updated_at",
        ]

    def get_medicine(self, obj):
        return {"id": obj.medicine_id, "medicine_name": obj.medicine.medicine_name}

    def get_dosage_form(self, obj):
        return {"id": obj.dosage_form_id, "name": obj.dosage_form.name}
