from django.conf import settings
from django.db import models

from core.choices import AccountStatus, Gender, Role
from core.validators import validate_document_upload, validate_image_upload


class Member(models.Model):
    """Staff profile attached one-to-one to a login account."""

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="member")
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=20, choices=Role.choices)
    position = models.CharField(max_length=100)
    address = models.TextField(blank=True, null=True)
    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True, null=True)
    dob = models.DateField(blank=True, null=True)
    salary = models.DecimalField(max_digits=12, decimal_places=2)
    joining_date = models.DateField()
    status = models.CharField(max_length=20, choices=AccountStatus.choices, default=AccountStatus.ACTIVE)
    biography = models.TextField(blank=True, null=True)
    photo = models.FileField(upload_to="members/photos/", blank=True, null=True,
                             validators=[validate_image_upload])
    certificate = models.FileField(upload_to="members/certificates/", blank=True, null=True,
                                   validators=[validate_document_upload])
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="members_created")
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="members_updated")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.first_name} {self.last_name}"
