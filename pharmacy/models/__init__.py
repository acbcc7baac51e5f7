from .catalog import Category, DosageForm
from .medicine import Medicine
from .sale import Sale, SaleReturn
from .expense_models import Expense

__all__ = ["Category", "DosageForm", "Medicine", "Sale", "SaleReturn", "Expense"]
