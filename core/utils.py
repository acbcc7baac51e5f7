# core/utils.py
import logging
import secrets
from datetime import datetime, time
from decimal import Decimal, InvalidOperation
from zoneinfo import ZoneInfo

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.utils.dateparse import parse_date

from core.exceptions import ResourceNotFound, ValidationFailed

logger = logging.getLogger(__name__)

EAT = ZoneInfo("Africa/Addis_Ababa")

TRUTHY = {"true", "1", "yes", "on"}


def eat_now():
    """Current time in East Africa Time (UTC+3)."""
    return datetime.now(tz=EAT)


def eat_today():
    return eat_now().date()


def generate_otp(length=6):
    """Generate a numeric OTP of specified length."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def send_otp_email(email, otp):
    """Email a password-reset OTP. Returns True when the message was handed to the mail backend."""
    minutes = settings.OTP_TTL_SECONDS // 60
    try:
        send_mail(
            subject=f"{settings.PHARMACY_NAME} password reset code",
            message=(
                f"Your password reset code is {otp}.\n"
                f"It is valid for {minutes} minutes. If you did not request it, ignore this email."
            ),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[email],
            fail_silently=False,
        )
        logger.info(f"OTP email sent to {email}")
        return True
    except Exception as e:
        logger.error(f"Failed to send OTP email to {email}: {e}", exc_info=True)
        return False


# ===================== REQUEST PARSING =====================
def parse_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY


def parse_positive_int(value, message="Invalid quantity"):
    if isinstance(value, bool):
        raise ValidationFailed(message)
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationFailed(message)
    if number <= 0:
        raise ValidationFailed(message)
    return number


def parse_decimal(value, message, allow_negative=False):
    if value is None or str(value).strip() == "":
        raise ValidationFailed(message)
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationFailed(message)
    if not number.is_finite() or (number < 0 and not allow_negative):
        raise ValidationFailed(message)
    return number


def missing_fields(data, fields):
    return [field for field in fields if data.get(field) is None or str(data.get(field)).strip() == ""]


def require_fields(data, fields):
    missing = missing_fields(data, fields)
    if missing:
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")


def parse_date_value(value, label):
    """Accepts YYYY-MM-DD or a full ISO timestamp and returns a date."""
    text = str(value).strip()
    try:
        parsed = parse_date(text[:10]) if len(text) >= 10 else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationFailed(f"Invalid {label}. Use YYYY-MM-DD.")
    return parsed


def eat_start_of_day(day):
    return datetime.combine(day, time.min, tzinfo=EAT)


def get_or_404(queryset_or_model, pk, label):
    """Fetch by primary key, raising a 404 that names the missing entity."""
    manager = getattr(queryset_or_model, "objects", queryset_or_model)
    try:
        instance = manager.filter(pk=pk).first()
    except (TypeError, ValueError):
        instance = None
    if instance is None:
        raise ResourceNotFound(f"{label} not found")
    return instance


# ===================== UPLOADS =====================
def discard_file_on_commit(field_file):
    """Remove a replaced or orphaned upload from storage once the surrounding transaction commits."""
    if not field_file:
        return
    storage, name = field_file.storage, field_file.name

    def remove():
        storage.delete(name)
        logger.info(f"Removed stored file {name}")

    transaction.on_commit(remove)
