from datetime import timedelta
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from core.authentication import issue_token
from core.choices import AccountStatus, Role
from core.models import User
from core.utils import eat_today
from customers.models import Customer, Supplier
from pharmacy.models import Category, DosageForm, Medicine


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / "uploads"
    return settings.MEDIA_ROOT


@pytest.fixture
def manager(db):
    return User.objects.create_user(
        username="manager",
        password="secret123",
        email="manager@pharmacy.test",
        first_name="Mekdes",
        last_name="Alemu",
        role=Role.MANAGER,
        status=AccountStatus.ACTIVE,
    )


@pytest.fixture
def employee(db):
    return User.objects.create_user(
        username="cashier",
        password="secret123",
        email="cashier@pharmacy.test",
        first_name="Abel",
        last_name="Tesfaye",
        role=Role.EMPLOYEE,
        status=AccountStatus.ACTIVE,
    )


def client_for(user=None):
    client = APIClient()
    if user is not None:
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")
    return client


@pytest.fixture
def anon_client():
    return client_for()


@pytest.fixture
def manager_client(manager):
    return client_for(manager)


@pytest.fixture
def employee_client(employee):
    return client_for(employee)


@pytest.fixture
def category(db):
    return Category.objects.create(name="Antibiotics")


@pytest.fixture
def dosage_form(db):
    return DosageForm.objects.create(name="Tablet")


@pytest.fixture
def supplier(db):
    return Supplier.objects.create(supplier_name="Addis Pharma", contact_info="+251911000000", location="Bole")


@pytest.fixture
def customer(db):
    return Customer.objects.create(name="Hana Bekele", phone="0911223344", address="Piassa")


@pytest.fixture
def make_medicine(category, dosage_form, supplier, manager):
    def make(**overrides):
        values = {
            "medicine_name": "Amoxicillin 500mg",
            "batch_number": "AMX-001",
            "category": category,
            "dosage_form": dosage_form,
            "supplier": supplier,
            "quantity": 20,
            "initial_quantity": 20,
            "unit_price": Decimal("8.00"),
            "sell_price": Decimal("10.00"),
            "expire_date": eat_today() + timedelta(days=180),
            "created_by": manager,
        }
        values.update(overrides)
        medicine = Medicine(**values)
        medicine.recompute_total_price()
        medicine.save()
        return medicine

    return make


@pytest.fixture
def medicine(make_medicine):
    return make_medicine()


@pytest.fixture
def client_factory():
    return client_for
