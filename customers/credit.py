"""
Credit ledger rules shared by customer credits (owed to the pharmacy) and
supplier credits (owed by the pharmacy).
"""
import logging
from decimal import Decimal, InvalidOperation

from core.choices import CreditStatus, PaymentMethod
from core.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

OUTSTANDING_STATUSES = (CreditStatus.UNPAID, CreditStatus.PARTIALLY_PAID)


def derive_credit_status(credit_amount, paid_amount):
    if paid_amount <= 0:
        return CreditStatus.UNPAID
    if paid_amount >= credit_amount:
        return CreditStatus.PAID
    return CreditStatus.PARTIALLY_PAID


def parse_credit_amounts(credit_amount, paid_amount):
    """credit_amount must be positive and paid_amount non-negative (missing paid means 0)."""
    if paid_amount is None or str(paid_amount).strip() == "":
        paid_amount = 0
    try:
        credit = Decimal(str(credit_amount).strip())
        paid = Decimal(str(paid_amount).strip())
    except (InvalidOperation, TypeError):
        raise ValidationFailed("Invalid credit or paid amount")
    if not credit.is_finite() or not paid.is_finite() or credit <= 0 or paid < 0:
        raise ValidationFailed("Invalid credit or paid amount")
    return credit, paid


def normalize_payment_method(value):
    """Unknown payment methods fall back to NONE instead of being rejected."""
    if value is None or str(value).strip() == "":
        return PaymentMethod.NONE
    candidate = str(value).strip().upper()
    if candidate not in PaymentMethod.values:
        logger.warning(f"Unknown credit payment method {value!r}, storing NONE")
        return PaymentMethod.NONE
    return candidate


def apply_credit_amounts(credit, credit_amount, paid_amount):
    credit.credit_amount, credit.paid_amount = parse_credit_amounts(credit_amount, paid_amount)
    refresh_derived_fields(credit)
    return credit


def refresh_derived_fields(credit):
    credit.unpaid_amount = credit.credit_amount - credit.paid_amount
    setattr(credit, credit.status_field, derive_credit_status(credit.credit_amount, credit.paid_amount))
