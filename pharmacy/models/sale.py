from django.conf import settings
from django.db import models

from core.choices import PaymentMethod
from core.utils import eat_now
from customers.models import Customer
from .catalog import DosageForm
from .medicine import Medicine


class Sale(models.Model):
    """
    quantity is the net number of units the customer still holds:
    every return against the sale is subtracted from it.
    """

    medicine = models.ForeignKey(Medicine, on_delete=models.CASCADE, related_name="sales")
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="sales", blank=True, null=True)
    dosage_form = models.ForeignKey(DosageForm, on_delete=models.PROTECT, related_name="sales")
    product_name = models.CharField(max_length=150)
    product_batch_number = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=12, decimal_places=2)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    prescription = models.BooleanField(default=False)
    sealed_date = models.DateTimeField(default=eat_now)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="sales_created")
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="sales_updated")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-sealed_date"]

    def __str__(self):
        return f"Sale #{self.id} - {self.product_name} x {self.quantity}"


class SaleReturn(models.Model):
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="returns")
    medicine = models.ForeignKey(Medicine, on_delete=models.CASCADE, related_name="returns")
    dosage_form = models.ForeignKey(DosageForm, on_delete=models.PROTECT, related_name="returns")
    product_name = models.CharField(max_length=150)
    product_batch_number = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField()
    reason_for_return = models.TextField()
    return_date = models.DateTimeField(default=eat_now)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="returns_created")
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="returns_updated")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-return_date"]

    def __str__(self):
        return f"Return of {self.quantity} from sale #{self.sale_id}"
