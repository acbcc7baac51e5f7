import logging
import math

from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.response import Response

from core.exceptions import ValidationFailed
from core.permissions import IsStaff
from core.utils import get_or_404, parse_date_value, require_fields
from okr.models import DEFAULT_TIME_PERIOD, KeyResult, Objective
from okr.serializers import KeyResultSerializer, ObjectiveSerializer

logger = logging.getLogger(__name__)


def parse_number(value, message, default=None):
    if value is None or str(value).strip() == "":
        if default is None:
            raise ValidationFailed(message)
        return default
    try:
        number = float(str(value).strip())
    except ValueError:
        raise ValidationFailed(message)
    if not math.isfinite(number):
        raise ValidationFailed(message)
    return number


def _objectives():
    return Objective.objects.prefetch_related("key_results")


# ===================== OBJECTIVE VIEWSET =====================
class ObjectiveViewSet(viewsets.ViewSet):
    permission_classes = [IsStaff]

    def list(self, request):
        return Response(ObjectiveSerializer(_objectives(), many=True).data)

    def retrieve(self, request, pk=None):
        return Response(ObjectiveSerializer(get_or_404(_objectives(), pk, "Objective")).data)

    def create(self, request):
        data = request.data
        title = str(data.get("title") or "").strip()
        if not title:
            raise ValidationFailed("Objective title is required")

        objective = Objective.objects.create(
            title=title,
            description=data.get("description") or "",
            time_period=data.get("time_period") or DEFAULT_TIME_PERIOD,
            progress=parse_number(data.get("progress"), "Invalid progress", default=0.0),
        )
        logger.info(f"Objective {objective.id} created by user {request.user.id}")
        return Response(ObjectiveSerializer(objective).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        objective = get_or_404(Objective, pk, "Objective")
        data = request.data

        if data.get("title") is not None:
            title = str(data["title"]).strip()
            if not title:
                raise ValidationFailed("Objective title is required")
            objective.title = title
        for field in ("description", "time_period", "activity"):
            if data.get(field) is not None:
                setattr(objective, field, data[field])
        if data.get("progress") is not None:
            objective.progress = parse_number(data["progress"], "Invalid progress")
        objective.save()

        logger.info(f"Objective {objective.id} updated by user {request.user.id}")
        return Response(ObjectiveSerializer(get_or_404(_objectives(), objective.pk, "Objective")).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    @transaction.atomic
    def destroy(self, request, pk=None):
        objective = get_or_404(Objective, pk, "Objective")
        objective.delete()
        logger.info(f"Objective {pk} and its key results deleted by user {request.user.id}")
        return Response({"message": "Objective deleted successfully"})


# ===================== KEY RESULT VIEWSET =====================
class KeyResultViewSet(viewsets.ViewSet):
    """Key results are created against an objective; edits only move progress within [0, target_value]."""

    permission_classes = [IsStaff]

    def create(self, request):
        data = request.data
        require_fields(data, ["objective_id", "title", "target_value", "deadline"])

        start_value = parse_number(data.get("start_value"), "Invalid start value", default=0.0)
        target_value = parse_number(data.get("target_value"), "Target value must be a number greater than start value")
        if target_value <= start_value:
            raise ValidationFailed("Target value must be a number greater than start value")
        progress = parse_number(data.get("progress"), "Progress must be non-negative", default=0.0)
        if progress < 0:
            raise ValidationFailed("Progress must be non-negative")
        weight = parse_number(data.get("weight"), "Weight must be positive", default=1.0)
        if weight <= 0:
            raise ValidationFailed("Weight must be positive")
        deadline = parse_date_value(data["deadline"], "deadline")

        objective = get_or_404(Objective, data["objective_id"], "Objective")
        key_result = KeyResult.objects.create(
            objective=objective,
            title=str(data["title"]).strip(),
            description=data.get("description") or "",
            start_value=start_value,
            target_value=target_value,
            progress=progress,
            weight=weight,
            deadline=deadline,
        )
        logger.info(f"Key result {key_result.id} added to objective {objective.id} by user {request.user.id}")
        return Response(KeyResultSerializer(key_result).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        key_result = get_or_404(KeyResult, pk, "Key result")
        progress = parse_number(request.data.get("progress"), "Invalid progress value")
        if progress < 0 or progress > key_result.target_value:
            raise ValidationFailed("Progress must be between 0 and target value")

        key_result.progress = progress
        key_result.save(update_fields=["progress", "updated_at"])
        logger.info(f"Key result {key_result.id} progress set to {progress} by user {request.user.id}")
        return Response(KeyResultSerializer(key_result).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        key_result = get_or_404(KeyResult, pk, "Key result")
        key_result.delete()
        logger.info(f"Key result {pk} deleted by user {request.user.id}")
        return Response({"message": "Key result deleted successfully"})
