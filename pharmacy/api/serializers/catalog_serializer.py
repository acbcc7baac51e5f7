from rest_framework import serializers

from pharmacy.models import Category, DosageForm


# ===================== CATEGORY SERIALIZER =====================
class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "created_at"]


# ===================== DOSAGE FORM SERIALIZER =====================
class DosageFormSerializer(serializers.ModelSerializer):
    class Meta:
        model = DosageForm
        fields = ["id", "name", "created_at"]
