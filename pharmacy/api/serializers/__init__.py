from .catalog_serializer import CategorySerializer, DosageFormSerializer
from .expense_serializer import ExpenseSerializer
from .medicine_serializer import MedicineSerializer
from .sale_serializer import SaleReturnSerializer, SaleSerializer

__all__ = [
    "CategorySerializer",
    "DosageFormSerializer",
    "ExpenseSerializer",
    "MedicineSerializer",
    "SaleReturnSerializer",
    "SaleSerializer",
]
