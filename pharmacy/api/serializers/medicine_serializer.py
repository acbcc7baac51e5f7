from rest_framework import serializers

from pharmacy.models import Medicine
from .catalog_serializer import CategorySerializer, DosageFormSerializer


class MedicineSupplierSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    supplier_name = serializers.CharField()


# ===================== MEDICINE SERIALIZER =====================
class MedicineSerializer(serializers.ModelSerializer):
    category = CategorySerializer(read_only=True)
    dosage_form = DosageFormSerializer(read_only=True)
    supplier = MedicineSupplierSerializer(read_only=True)
    created_by = serializers.ReadOnlyField(source="created_by.username", default=None)
    updated_by = serializers.ReadOnlyField(source="updated_by.username", default=None)

    class Meta:
        model = Medicine
        fields = [
            "id", "medicine_name", "brand_name", "batch_number", "category", "dosage_form",
            "supplier", "medicine_weight", "quantity", "initial_quantity", "unit_price",
            "sell_price", "total_price", "expire_date", "required_prescription", "payment_method",
            "payment_file", "details", "invoice_number", "created_by", "updated_by",
            "created_at", "updated_at",
        ]
