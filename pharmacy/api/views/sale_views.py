# pharmacy/api/views/sale_views.py
import logging

from rest_framework import status, viewsets
from rest_framework.response import Response

from core.permissions import IsManager, IsStaff
from core.utils import get_or_404
from pharmacy.api.serializers import SaleReturnSerializer, SaleSerializer
from pharmacy.models import Sale, SaleReturn
from pharmacy.services import returns as return_service
from pharmacy.services import sales as sale_service

logger = logging.getLogger(__name__)


def _sales():
    return Sale.objects.select_related("medicine", "customer", "dosage_form", "created_by", "updated_by")


def _returns():
    return SaleReturn.objects.select_related("medicine", "dosage_form", "created_by")


# ===================== SALE VIEWSET =====================
class SaleViewSet(viewsets.ViewSet):
    """
    Point-of-sale entries. Stock moves only through pharmacy.services.sales,
    which takes units out with a conditional UPDATE.
    """

    def get_permissions(self):
        if self.action == "destroy":
            return [IsManager()]
        return [IsStaff()]

    def list(self, request):
        sales = _sales()
        customer_id = request.query_params.get("customer_id")
        if customer_id:
            sales = sales.filter(customer_id=customer_id)
        return Response(SaleSerializer(sales, many=True).data)

    def retrieve(self, request, pk=None):
        return Response(SaleSerializer(get_or_404(_sales(), pk, "Sale")).data)

    def create(self, request):
        sale = sale_service.create_sale(request.data, request.user)
        return Response(
            {"message": "Sale recorded successfully", "sale": SaleSerializer(_sales().get(pk=sale.pk)).data},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None):
        sale = sale_service.update_sale(pk, request.data, request.user)
        return Response({"message": "Sale updated successfully", "sale": SaleSerializer(_sales().get(pk=sale.pk)).data})

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        sale_service.delete_sale(pk, request.user)
        return Response({"message": "Sale deleted successfully"})


# ===================== RETURN VIEWSET =====================
class SaleReturnViewSet(viewsets.ViewSet):

    def get_permissions(self):
        if self.action == "destroy":
            return [IsManager()]
        return [IsStaff()]

    def list(self, request):
        returns = _returns()
        sale_id = request.query_params.get("sale_id")
        if sale_id:
            returns = returns.filter(sale_id=sale_id)
        return Response(SaleReturnSerializer(returns, many=True).data)

    def retrieve(self, request, pk=None):
        return Response(SaleReturnSerializer(get_or_404(_returns(), pk, "Return")).data)

    def create(self, request):
        sale_return = return_service.create_return(request.data, request.user)
        return Response(
            {"message": "Return recorded successfully", "return": SaleReturnSerializer(_returns().get(pk=sale_return.pk)).data},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None):
        sale_return = return_service.update_return(pk, request.data, request.user)
        return Response({
            "message": "Return updated successfully",
            "return": SaleReturnSerializer(_returns().get(pk=sale_return.pk)).data,
        })

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        return_service.delete_return(pk, request.user)
        return Response({"message": "Return deleted successfully"})
