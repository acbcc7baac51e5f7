import os
import subprocess
import sys
from pathlib import Path

import pytest
from django.db import IntegrityError
from django.db.models import ProtectedError

from core.exceptions import ResourceNotFound, api_exception_handler

ROOT = Path(__file__).resolve().parent.parent


def handle(exc):
    return api_exception_handler(exc, {"view": None})


class TestExceptionHandler:

    def test_protected_delete_is_a_bad_request(self):
        response = handle(ProtectedError("Cannot delete some instances of model 'Category'", set()))
        assert response.status_code == 400
        assert response.data["message"] == "Cannot delete a record that other records still reference"

    def test_unique_violation_is_a_conflict(self):
        response = handle(IntegrityError("UNIQUE constraint failed: pharmacy_medicine.batch_number"))
        assert response.status_code == 409

    def test_api_exceptions_keep_their_status(self):
        response = handle(ResourceNotFound("Medicine not found"))
        assert response.status_code == 404
        assert response.data == {"message": "Medicine not found", "error": {"detail": "Medicine not found"}}

    def test_unknown_errors_echo_the_message(self):
        response = handle(RuntimeError("disk full"))
        assert response.status_code == 500
        assert response.data["error"] == "disk full"


@pytest.mark.django_db
def test_protected_category_delete_over_http(employee_client, medicine):
    response = employee_client.delete(f"/api/categories/{medicine.category_id}/")
    assert response.status_code == 400
    assert "still reference" in response.json()["message"]


def test_project_boots_in_a_fresh_interpreter():
    script = (
        "import django; django.setup(); "
        "from rest_framework.views import APIView; "
        "from rest_framework.settings import api_settings; "
        "print(api_settings.DEFAULT_AUTHENTICATION_CLASSES[0].__name__)"
    )
    env = dict(os.environ, DJANGO_SETTINGS_MODULE="pharmacy_backend.settings")
    result = subprocess.run([sys.executable, "-c", script], cwd=ROOT, env=env, capture_output=True, text=True)

    assert result.returncode == 0, result.stderr
    assert result.stdout.strip() == "JWTAuthentication"
