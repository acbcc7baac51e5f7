from rest_framework import serializers

from .models import KeyResult, Objective


class KeyResultSerializer(serializers.ModelSerializer):
    objective_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = KeyResult
        fields = [
            "id", "objective_id", "title", "description", "start_value", "target_value",
            "progress", "weight", "deadline", "created_at", "updated_at",
        ]


class ObjectiveSerializer(serializers.ModelSerializer):
    key_results = KeyResultSerializer(many=True, read_only=True)

    class Meta:
        model = Objective
        fields = [
            "id", "title", "description", "time_period", "progress", "activity",
            "key_results", "created_at", "updated_at",
        ]
