from django.db import models


class Role(models.TextChoices):
    MANAGER = "MANAGER", "Manager"
    EMPLOYEE = "EMPLOYEE", "Employee"


class AccountStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    INACTIVE = "INACTIVE", "Inactive"


class PaymentMethod(models.TextChoices):
    NONE = "NONE", "None"
    CASH = "CASH", "Cash"
    CREDIT = "CREDIT", "Credit"
    CBE = "CBE", "CBE"
    COOP = "COOP", "Coop"
    AWASH = "AWASH", "Awash"
    EBIRR = "EBIRR", "E-Birr"


class CreditStatus(models.TextChoices):
    UNPAID = "UNPAID", "Unpaid"
    PARTIALLY_PAID = "PARTIALLY_PAID", "Partially paid"
    PAID = "PAID", "Paid"


class Gender(models.TextChoices):
    MALE = "MALE", "Male"
    FEMALE = "FEMALE", "Female"
