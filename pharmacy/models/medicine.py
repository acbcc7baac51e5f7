from django.conf import settings
from django.db import models

from core.choices import PaymentMethod
from core.validators import validate_document_upload
from customers.models import Supplier
from .catalog import Category, DosageForm


class Medicine(models.Model):
    """
    One stocked batch. quantity never goes below zero and total_price
    tracks quantity * sell_price through every stock movement.
    """

    medicine_name = models.CharField(max_length=150)
    brand_name = models.CharField(max_length=150, blank=True, null=True)
    batch_number = models.CharField(max_length=100, unique=True, blank=True, null=True)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="medicines")
    dosage_form = models.ForeignKey(DosageForm, on_delete=models.PROTECT, related_name="medicines")
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="medicines")
    medicine_weight = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    quantity = models.PositiveIntegerField(default=0)
    initial_quantity = models.PositiveIntegerField(default=0)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    sell_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    expire_date = models.DateField()
    required_prescription = models.BooleanField(default=False)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.NONE)
    payment_file = models.FileField(upload_to="medicines/", blank=True, null=True,
                                    validators=[validate_document_upload])
    details = models.TextField(blank=True, null=True)
    invoice_number = models.CharField(max_length=100, blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="medicines_created")
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="medicines_updated")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["medicine_name"]

    def __str__(self):
        return f"{self.medicine_name} ({self.batch_number or 'no batch'})"

    def recompute_total_price(self):
        """
        total_price is the stock's retail value, quantity x sell_price.

        Older records priced a batch at quantity x unit_price on create and
        edit while sales and returns moved it by sell_price. Everything now
        uses sell_price so create, edit, sale and return all agree.
        """
        self.total_price = self.sell_price * self.quantity
