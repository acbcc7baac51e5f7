"""
Returns move units from a sale back into stock. The sale's quantity is
the net units still held by the customer, so the units still returnable
from a sale are exactly sale.quantity and the sum of all returns can never
exceed what was originally sold.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from core.exceptions import ValidationFailed
from core.utils import get_or_404, parse_positive_int, require_fields
from pharmacy.models import Sale, SaleReturn
from pharmacy.notifications import notify_stock_change
from pharmacy.services import stock

logger = logging.getLogger(__name__)

RETURN_REQUIRED_FIELDS = ["sale_id", "quantity", "reason_for_return"]


def _take_from_sale(sale_id, quantity):
    """Conditional decrement of the sale's net quantity, keeping total_amount = price * quantity."""
    units = Decimal(quantity)
    updated = Sale.objects.filter(pk=sale_id, quantity__gte=quantity).update(
        quantity=F("quantity") - quantity,
        total_amount=F("total_amount") - F("price") * units,
    )
    if updated == 0:
        remaining = Sale.objects.filter(pk=sale_id).values_list("quantity", flat=True).first() or 0
        raise ValidationFailed(
            f"Return quantity ({quantity}) exceeds remaining returnable quantity ({remaining})"
        )


def _give_back_to_sale(sale_id, quantity):
    units = Decimal(quantity)
    Sale.objects.filter(pk=sale_id).update(
        quantity=F("quantity") + quantity,
        total_amount=F("total_amount") + F("price") * units,
    )


def create_return(data, user):
    require_fields(data, RETURN_REQUIRED_FIELDS)
    sale = get_or_404(Sale.objects.select_related("medicine"), data.get("sale_id"), "Sale")
    quantity = parse_positive_int(data.get("quantity"))

    with transaction.atomic():
        _take_from_sale(sale.pk, quantity)
        stock.restock(sale.medicine_id, quantity)
        sale_return = SaleReturn.objects.create(
            sale=sale,
            medicine_id=sale.medicine_id,
            dosage_form_id=sale.dosage_form_id,
            product_name=sale.product_name,
            product_batch_number=sale.product_batch_number,
            quantity=quantity,
            reason_for_return=str(data.get("reason_for_return")).strip(),
            created_by=user,
        )

    logger.info(f"Return {sale_return.id} of {quantity} units against sale {sale.id} by user {user.id}")
    notify_stock_change(sale.medicine_id)
    return sale_return


def update_return(return_id, data, user):
    """Only the difference between the old and new return quantity moves stock and the sale."""
    with transaction.atomic():
        sale_return = get_or_404(SaleReturn.objects.select_for_update(), return_id, "Return")
        old_quantity = sale_return.quantity
        quantity = parse_positive_int(data["quantity"]) if data.get("quantity") not in (None, "") else old_quantity
        delta = quantity - old_quantity

        if delta > 0:
            _take_from_sale(sale_return.sale_id, delta)
            stock.restock(sale_return.medicine_id, delta)
        elif delta < 0:
            stock.withdraw(sale_return.medicine_id, -delta)
            _give_back_to_sale(sale_return.sale_id, -delta)

        if data.get("reason_for_return"):
            sale_return.reason_for_return = str(data["reason_for_return"]).strip()
        sale_return.quantity = quantity
        sale_return.updated_by = user
        sale_return.save()

    logger.info(f"Return {sale_return.id} updated by user {user.id}: quantity {old_quantity} -> {quantity}")
    notify_stock_change(sale_return.medicine_id)
    return sale_return


def delete_return(return_id, user):
    with transaction.atomic():
        sale_return = get_or_404(SaleReturn.objects.select_for_update(), return_id, "Return")
        medicine_id = sale_return.medicine_id
        stock.withdraw(medicine_id, sale_return.quantity)
        _give_back_to_sale(sale_return.sale_id, sale_return.quantity)
        sale_return.delete()

    logger.info(f"Return {return_id} deleted by user {user.id}")
    notify_stock_change(medicine_id)
