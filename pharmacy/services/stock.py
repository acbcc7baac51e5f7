"""
Inventory movements for a medicine. Every change is a single UPDATE so
concurrent sales cannot both take the last units: a withdrawal only
applies when the row still holds enough stock, and the affected-row count
tells us whether it did.
"""
import logging
from decimal import Decimal

from django.db.models import F

from core.exceptions import InsufficientStock
from pharmacy.models import Medicine

logger = logging.getLogger(__name__)


def withdraw(medicine_id, quantity):
    """UPDATE ... SET quantity = quantity - n WHERE id = ? AND quantity >= n"""
    units = Decimal(quantity)
    updated = Medicine.objects.filter(pk=medicine_id, quantity__gte=quantity).update(
        quantity=F("quantity") - quantity,
        total_price=F("total_price") - F("sell_price") * units,
    )
    if updated == 0:
        available = Medicine.objects.filter(pk=medicine_id).values_list("quantity", flat=True).first()
        logger.warning(f"Stock withdrawal of {quantity} refused for medicine {medicine_id} (available {available})")
        raise InsufficientStock(f"Insufficient inventory. Available quantity: {available or 0}")
    logger.debug(f"Withdrew {quantity} units from medicine {medicine_id}")


def restock(medicine_id, quantity):
    units = Decimal(quantity)
    Medicine.objects.filter(pk=medicine_id).update(
        quantity=F("quantity") + quantity,
        total_price=F("total_price") + F("sell_price") * units,
    )
    logger.debug(f"Restored {quantity} units to medicine {medicine_id}")


def adjust(medicine_id, delta):
    """Positive delta takes more units out of stock, negative delta puts units back."""
    if delta > 0:
        withdraw(medicine_id, delta)
    elif delta < 0:
        restock(medicine_id, -delta)
