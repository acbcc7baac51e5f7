import os
import re

from django.core.exceptions import ValidationError

PHONE_PATTERN = re.compile(r"^\+?\d{9,13}$")

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}
DOCUMENT_EXTENSIONS = IMAGE_EXTENSIONS | {".pdf"}
MAX_RECEIPT_SIZE = 5 * 1024 * 1024


def _check_extension(upload, allowed, label):
    extension = os.path.splitext(upload.name)[1].lower()
    if extension not in allowed:
        raise ValidationError(f"Only {label} files are allowed")


def validate_image_upload(upload):
    _check_extension(upload, IMAGE_EXTENSIONS, "JPEG/PNG")


def validate_document_upload(upload):
    _check_extension(upload, DOCUMENT_EXTENSIONS, "JPEG/PNG/PDF")


def validate_receipt_upload(upload):
    validate_image_upload(upload)
    if upload.size > MAX_RECEIPT_SIZE:
        raise ValidationError("Receipt must be 5MB or smaller")


def validate_phone(value):
    if not value or not PHONE_PATTERN.match(str(value).strip()):
        raise ValidationError("Invalid phone number format")
