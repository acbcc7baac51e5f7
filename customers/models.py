from django.conf import settings
from django.db import models

from core.choices import AccountStatus, CreditStatus, PaymentMethod
from core.utils import eat_now
from core.validators import validate_document_upload
from customers.credit import refresh_derived_fields


class Customer(models.Model):
    name = models.CharField(max_length=150)
    phone = models.CharField(max_length=20)
    address = models.TextField()
    status = models.CharField(max_length=20, choices=AccountStatus.choices, default=AccountStatus.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Supplier(models.Model):
    supplier_name = models.CharField(max_length=150)
    contact_info = models.CharField(max_length=20)
    payment_info_cbe = models.CharField(max_length=100, blank=True, null=True)
    payment_info_coop = models.CharField(max_length=100, blank=True, null=True)
    payment_info_boa = models.CharField(max_length=100, blank=True, null=True)
    payment_info_awash = models.CharField(max_length=100, blank=True, null=True)
    payment_info_ebirr = models.CharField(max_length=100, blank=True, null=True)
    location = models.CharField(max_length=200)
    email = models.EmailField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["supplier_name"]

    def __str__(self):
        return self.supplier_name


class CreditEntry(models.Model):
    """Money owed with partial-payment state. unpaid_amount and status are derived on every save."""

    credit_amount = models.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    unpaid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    medicine_name = models.CharField(max_length=150, blank=True, null=True)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.NONE)
    description = models.TextField(blank=True, null=True)
    credit_date = models.DateTimeField(default=eat_now)
    payment_file = models.FileField(upload_to="credits/", blank=True, null=True,
                                    validators=[validate_document_upload])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Derived status column and owning party FK on the concrete model
    status_field = "status"
    party_field = "customer"

    class Meta:
        abstract = True
        ordering = ["-credit_date"]

    @property
    def credit_status(self):
        return getattr(self, self.status_field)

    def save(self, *args, **kwargs):
        refresh_derived_fields(self)
        super().save(*args, **kwargs)


class CustomerCredit(CreditEntry):
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="credits")
    status = models.CharField(max_length=20, choices=CreditStatus.choices, default=CreditStatus.UNPAID)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="customer_credits_created")
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="customer_credits_updated")

    def __str__(self):
        return f"{self.customer.name} owes {self.unpaid_amount}"


class SupplierCredit(CreditEntry):
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="credits")
    payment_status = models.CharField(max_length=20, choices=CreditStatus.choices, default=CreditStatus.UNPAID)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="supplier_credits_created")
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="supplier_credits_updated")

    status_field = "payment_status"
    party_field = "supplier"

    def __str__(self):
        return f"Owed to {self.supplier.supplier_name}: {self.unpaid_amount}"
