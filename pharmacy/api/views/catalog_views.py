import logging

from rest_framework import status, viewsets
from rest_framework.response import Response

from core.exceptions import ConflictError, ValidationFailed
from core.permissions import IsStaff
from core.utils import get_or_404
from pharmacy.api.serializers import CategorySerializer, DosageFormSerializer
from pharmacy.models import Category, DosageForm

logger = logging.getLogger(__name__)


class NamedCatalogViewSet(viewsets.ViewSet):
    """Lookup tables keyed by a unique name. Deleting a row still used by a medicine fails with 400."""

    permission_classes = [IsStaff]
    model = None
    serializer_class = None
    label = None

    def _clean_name(self, data, exclude_pk=None):
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValidationFailed(f"{self.label} name is required")
        duplicates = self.model.objects.filter(name__iexact=name)
        if exclude_pk is not None:
            duplicates = duplicates.exclude(pk=exclude_pk)
        if duplicates.exists():
            raise ConflictError(f"{self.label} '{name}' already exists")
        return name

    def list(self, request):
        return Response(self.serializer_class(self.model.objects.all(), many=True).data)

    def retrieve(self, request, pk=None):
        return Response(self.serializer_class(get_or_404(self.model, pk, self.label)).data)

    def create(self, request):
        instance = self.model.objects.create(name=self._clean_name(request.data))
        logger.info(f"{self.label} '{instance.name}' created by user {request.user.id}")
        return Response(self.serializer_class(instance).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        instance = get_or_404(self.model, pk, self.label)
        instance.name = self._clean_name(request.data, exclude_pk=instance.pk)
        instance.save()
        logger.info(f"{self.label} {instance.id} renamed to '{instance.name}' by user {request.user.id}")
        return Response(self.serializer_class(instance).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        instance = get_or_404(self.model, pk, self.label)
        instance.delete()
        logger.info(f"{self.label} {pk} deleted by user {request.user.id}")
        return Response({"message": f"{self.label} deleted successfully"})


# ===================== CATEGORY VIEWSET =====================
class CategoryViewSet(NamedCatalogViewSet):
    model = Category
    serializer_class = CategorySerializer
    label = "Category"


# ===================== DOSAGE FORM VIEWSET =====================
class DosageFormViewSet(NamedCatalogViewSet):
    model = DosageForm
    serializer_class = DosageFormSerializer
    label = "Dosage form"
