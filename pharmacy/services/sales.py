import logging

from django.db import transaction

from core.choices import PaymentMethod
from core.exceptions import ValidationFailed
from core.utils import get_or_404, parse_bool, parse_positive_int, require_fields
from customers.models import Customer
from pharmacy.models import DosageForm, Medicine, Sale
from pharmacy.notifications import notify_stock_change
from pharmacy.services import stock

logger = logging.getLogger(__name__)

SALE_REQUIRED_FIELDS = ["medicine_id", "dosage_form_id", "quantity", "product_batch_number", "payment_method"]


def parse_sale_payment_method(value):
    method = str(value).strip().upper()
    if method not in PaymentMethod.values:
        raise ValidationFailed(f"Invalid payment method. Use one of: {', '.join(PaymentMethod.values)}")
    return method


def _optional_customer(customer_id):
    if customer_id in (None, "", "null"):
        return None
    return get_or_404(Customer, customer_id, "Customer")


def _check_prescription(medicine, prescription):
    if medicine.required_prescription and not prescription:
        raise ValidationFailed("This medicine requires a prescription")


def create_sale(data, user):
    """
    Validate a sale request, take the units out of stock and record the
    sale in one transaction, then run the low-stock check.
    """
    require_fields(data, SALE_REQUIRED_FIELDS)

    medicine = get_or_404(Medicine, data.get("medicine_id"), "Medicine")
    dosage_form = get_or_404(DosageForm, data.get("dosage_form_id"), "Dosage form")
    customer = _optional_customer(data.get("customer_id"))
    quantity = parse_positive_int(data.get("quantity"))
    prescription = parse_bool(data.get("prescription"))
    _check_prescription(medicine, prescription)
    payment_method = parse_sale_payment_method(data.get("payment_method"))

    with transaction.atomic():
        stock.withdraw(medicine.pk, quantity)
        sale = Sale.objects.create(
            medicine=medicine,
            customer=customer,
            dosage_form=dosage_form,
            product_name=data.get("product_name") or medicine.medicine_name,
            product_batch_number=str(data.get("product_batch_number")).strip(),
            quantity=quantity,
            price=medicine.sell_price,
            total_amount=medicine.sell_price * quantity,
            payment_method=payment_method,
            prescription=prescription,
            created_by=user,
        )

    logger.info(f"Sale {sale.id} recorded by user {user.id}: {quantity} x medicine {medicine.id}")
    notify_stock_change(medicine.pk)
    return sale


def update_sale(sale_id, data, user):
    """
    Apply only the quantity delta to stock. Moving the sale to another
    medicine restores the old batch in full and sells the new one in full.
    """
    with transaction.atomic():
        sale = get_or_404(Sale.objects.select_for_update(), sale_id, "Sale")

        old_medicine_id = sale.medicine_id
        old_quantity = sale.quantity
        quantity = parse_positive_int(data["quantity"]) if data.get("quantity") not in (None, "") else old_quantity

        medicine = sale.medicine
        new_medicine_id = data.get("medicine_id")
        if new_medicine_id not in (None, "") and str(new_medicine_id) != str(old_medicine_id):
            if sale.returns.exists():
                raise ValidationFailed("Cannot change the medicine of a sale that has returns")
            medicine = get_or_404(Medicine, new_medicine_id, "Medicine")

        if data.get("dosage_form_id"):
            sale.dosage_form = get_or_404(DosageForm, data["dosage_form_id"], "Dosage form")
        if "customer_id" in data:
            sale.customer = _optional_customer(data.get("customer_id"))
        if "prescription" in data:
            sale.prescription = parse_bool(data.get("prescription"))
        _check_prescription(medicine, sale.prescription)
        if data.get("payment_method"):
            sale.payment_method = parse_sale_payment_method(data["payment_method"])
        if data.get("product_batch_number"):
            sale.product_batch_number = str(data["product_batch_number"]).strip()

        if medicine.pk != old_medicine_id:
            stock.restock(old_medicine_id, old_quantity)
            stock.withdraw(medicine.pk, quantity)
            sale.medicine = medicine
            sale.product_name = data.get("product_name") or medicine.medicine_name
            sale.price = medicine.sell_price
        else:
            stock.adjust(medicine.pk, quantity - old_quantity)
            if data.get("product_name"):
                sale.product_name = data["product_name"]

        sale.quantity = quantity
        sale.total_amount = sale.price * quantity
        sale.updated_by = user
        sale.save()

    logger.info(f"Sale {sale.id} updated by user {user.id}: quantity {old_quantity} -> {quantity}")
    notify_stock_change(sale.medicine_id)
    return sale


def delete_sale(sale_id, user):
    with transaction.atomic():
        sale = get_or_404(Sale.objects.select_for_update(), sale_id, "Sale")
        medicine_id = sale.medicine_id
        stock.restock(medicine_id, sale.quantity)
        sale.delete()

    logger.info(f"Sale {sale_id} deleted by user {user.id}")
    notify_stock_change(medicine_id)
