from django.conf import settings
from django.db import models

from core.choices import PaymentMethod
from core.validators import validate_receipt_upload


class Expense(models.Model):
    reason = models.CharField(max_length=200)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.TextField(blank=True, null=True)
    date = models.DateField()
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    receipt = models.FileField(upload_to="receipts/", blank=True, null=True, validators=[validate_receipt_upload])
    additional_info = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="expenses_created")
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="expenses_updated")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date"]

    def __str__(self):
        return f"{self.reason} - {self.amount}"
