from decimal import Decimal

import pytest

from customers.models import Customer, CustomerCredit, Supplier


@pytest.mark.django_db
class TestCustomers:

    def test_create_and_list(self, employee_client):
        response = employee_client.post("/api/customers/", {
            "name": "Selam", "phone": "+251922334455", "address": "Kazanchis",
        }, format="json")
        assert response.status_code == 201
        assert response.json()["status"] == "ACTIVE"
        assert len(employee_client.get("/api/customers/").json()) == 1

    def test_rejects_bad_phone(self, employee_client):
        response = employee_client.post("/api/customers/", {
            "name": "Selam", "phone": "12-34", "address": "Kazanchis",
        }, format="json")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid phone number format"

    def test_requires_fields(self, employee_client):
        assert employee_client.post("/api/customers/", {"name": "Selam"}, format="json").status_code == 400

    def test_update_is_manager_only(self, employee_client, manager_client, customer):
        assert employee_client.put(f"/api/customers/{customer.pk}/", {"name": "X"}, format="json").status_code == 403
        response = manager_client.put(f"/api/customers/{customer.pk}/", {"status": "inactive"}, format="json")
        assert response.json()["status"] == "INACTIVE"

    def test_delete_blocked_by_credits(self, manager_client, customer):
        CustomerCredit.objects.create(customer=customer, credit_amount=Decimal("10"))
        response = manager_client.delete(f"/api/customers/{customer.pk}/")
        assert response.status_code == 400
        assert Customer.objects.filter(pk=customer.pk).exists()

    def test_delete(self, manager_client, customer):
        assert manager_client.delete(f"/api/customers/{customer.pk}/").status_code == 200
        assert not Customer.objects.exists()

    def test_credits_listing_is_not_read_as_a_customer_id(self, employee_client, customer):
        assert employee_client.get("/api/customers/credits/").status_code == 200


@pytest.mark.django_db
class TestSuppliers:

    def test_create(self, employee_client):
        response = employee_client.post("/api/suppliers/", {
            "supplier_name": "Ethio Med", "contact_info": "0911000111", "location": "Merkato",
            "payment_info_cbe": "1000123456789",
        }, format="json")
        assert response.status_code == 201
        assert response.json()["payment_info_cbe"] == "1000123456789"

    def test_invalid_contact(self, employee_client):
        response = employee_client.post("/api/suppliers/", {
            "supplier_name": "Ethio Med", "contact_info": "abc", "location": "Merkato",
        }, format="json")
        assert response.status_code == 400

    def test_delete_blocked_by_medicines(self, manager_client, medicine):
        response = manager_client.delete(f"/api/suppliers/{medicine.supplier_id}/")
        assert response.status_code == 400
        assert Supplier.objects.filter(pk=medicine.supplier_id).exists()

    def test_unknown_supplier(self, employee_client):
        assert employee_client.get("/api/suppliers/9999/").status_code == 404
        assert employee_client.get("/api/suppliers/not-a-number/").status_code == 404
