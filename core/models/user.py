from django.contrib.auth.models import AbstractUser
from django.db import models

from core.choices import AccountStatus, Role


class User(AbstractUser):
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.EMPLOYEE)
    status = models.CharField(max_length=20, choices=AccountStatus.choices, default=AccountStatus.ACTIVE)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_manager(self):
        return self.role == Role.MANAGER

    @property
    def is_active_account(self):
        return self.status == AccountStatus.ACTIVE

    def __str__(self):
        return f"{self.username} ({self.role})"
