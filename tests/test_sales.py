from decimal import Decimal

import pytest
from django.core import mail

from pharmacy.models import Sale


def sale_payload(medicine, **overrides):
    payload = {
        "medicine_id": medicine.pk,
        "dosage_form_id": medicine.dosage_form_id,
        "quantity": 5,
        "product_batch_number": medicine.batch_number,
        "payment_method": "CASH",
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestCreateSale:

    def test_sale_takes_units_out_of_stock(self, employee_client, medicine):
        response = employee_client.post("/api/sales/", sale_payload(medicine), format="json")

        assert response.status_code == 201
        sale = Sale.objects.get()
        assert sale.quantity == 5
        assert sale.price == Decimal("10.00")
        assert sale.total_amount == Decimal("50.00")
        assert sale.product_name == medicine.medicine_name
        assert response.json()["sale"]["medicine"]["id"] == medicine.pk

        medicine.refresh_from_db()
        assert medicine.quantity == 15
        assert medicine.total_price == Decimal("150.00")

    def test_sale_beyond_stock_is_rejected_without_changes(self, employee_client, medicine):
        response = employee_client.post("/api/sales/", sale_payload(medicine, quantity=25), format="json")

        assert response.status_code == 400
        assert "Insufficient inventory" in response.json()["message"]
        assert not Sale.objects.exists()
        medicine.refresh_from_db()
        assert medicine.quantity == 20
        assert medicine.total_price == Decimal("200.00")

    def test_missing_fields(self, employee_client, medicine):
        response = employee_client.post("/api/sales/", {"medicine_id": medicine.pk}, format="json")
        assert response.status_code == 400
        assert response.json()["message"].startswith("Missing required fields")

    @pytest.mark.parametrize("quantity", [0, -3, "two", 1.5])
    def test_invalid_quantity(self, employee_client, medicine, quantity):
        response = employee_client.post("/api/sales/", sale_payload(medicine, quantity=quantity), format="json")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid quantity"

    def test_unknown_medicine(self, employee_client, medicine):
        response = employee_client.post("/api/sales/", sale_payload(medicine, medicine_id=9999), format="json")
        assert response.status_code == 404
        assert response.json()["message"] == "Medicine not found"

    def test_unknown_dosage_form(self, employee_client, medicine):
        response = employee_client.post("/api/sales/", sale_payload(medicine, dosage_form_id=9999), format="json")
        assert response.status_code == 404
        assert response.json()["message"] == "Dosage form not found"
        assert not Sale.objects.exists()
        medicine.refresh_from_db()
        assert medicine.quantity == 20

    def test_unknown_customer(self, employee_client, medicine):
        response = employee_client.post("/api/sales/", sale_payload(medicine, customer_id=9999), format="json")
        assert response.status_code == 404
        assert response.json()["message"] == "Customer not found"

    def test_sale_linked_to_customer(self, employee_client, medicine, customer):
        response = employee_client.post("/api/sales/", sale_payload(medicine, customer_id=customer.pk), format="json")
        assert response.status_code == 201
        assert response.json()["sale"]["customer"]["name"] == customer.name

    def test_prescription_required(self, employee_client, make_medicine):
        medicine = make_medicine(batch_number="RX-1", required_prescription=True)

        response = employee_client.post("/api/sales/", sale_payload(medicine), format="json")
        assert response.status_code == 400
        assert "prescription" in response.json()["message"]

        response = employee_client.post("/api/sales/", sale_payload(medicine, prescription=True), format="json")
        assert response.status_code == 201

    def test_invalid_payment_method(self, employee_client, medicine):
        response = employee_client.post("/api/sales/", sale_payload(medicine, payment_method="BITCOIN"), format="json")
        assert response.status_code == 400
        assert not Sale.objects.exists()

    def test_requires_authentication(self, anon_client, medicine):
        response = anon_client.post("/api/sales/", sale_payload(medicine), format="json")
        assert response.status_code == 401


@pytest.mark.django_db
class TestLowStockHook:

    def test_sale_into_low_stock_emails_manager(self, employee_client, medicine, manager):
        response = employee_client.post("/api/sales/", sale_payload(medicine, quantity=12), format="json")

        assert response.status_code == 201
        assert len(mail.outbox) == 1
        assert mail.outbox[0].subject == "Low Stock After Sale"
        assert mail.outbox[0].to == [manager.email]

    def test_sale_above_threshold_sends_nothing(self, employee_client, medicine, manager):
        employee_client.post("/api/sales/", sale_payload(medicine, quantity=2), format="json")
        assert mail.outbox == []

    def test_hook_failure_does_not_fail_the_sale(self, employee_client, medicine, manager, monkeypatch):
        def explode(self, medicine_id):
            raise RuntimeError("smtp down")

        monkeypatch.setattr("pharmacy.notifications.NotificationService.check_low_stock_after_sale", explode)
        response = employee_client.post("/api/sales/", sale_payload(medicine, quantity=15), format="json")

        assert response.status_code == 201
        medicine.refresh_from_db()
        assert medicine.quantity == 5


@pytest.mark.django_db
class TestEditAndDeleteSale:

    @pytest.fixture
    def sale(self, employee_client, medicine):
        response = employee_client.post("/api/sales/", sale_payload(medicine), format="json")
        return Sale.objects.get(pk=response.json()["sale"]["id"])

    def test_edit_applies_only_the_delta(self, employee_client, medicine, sale):
        response = employee_client.put(f"/api/sales/{sale.pk}/", {"quantity": 8}, format="json")

        assert response.status_code == 200
        sale.refresh_from_db()
        medicine.refresh_from_db()
        assert sale.quantity == 8
        assert sale.total_amount == Decimal("80.00")
        assert medicine.quantity == 12
        assert medicine.total_price == Decimal("120.00")

        employee_client.put(f"/api/sales/{sale.pk}/", {"quantity": 2}, format="json")
        medicine.refresh_from_db()
        assert medicine.quantity == 18

    def test_edit_beyond_stock_is_rejected(self, employee_client, medicine, sale):
        response = employee_client.put(f"/api/sales/{sale.pk}/", {"quantity": 26}, format="json")

        assert response.status_code == 400
        sale.refresh_from_db()
        medicine.refresh_from_db()
        assert sale.quantity == 5
        assert medicine.quantity == 15

    def test_edit_moves_sale_to_another_medicine(self, employee_client, medicine, sale, make_medicine):
        other = make_medicine(batch_number="AMX-002", sell_price=Decimal("12.00"))

        response = employee_client.put(f"/api/sales/{sale.pk}/", {"medicine_id": other.pk}, format="json")

        assert response.status_code == 200
        medicine.refresh_from_db()
        other.refresh_from_db()
        sale.refresh_from_db()
        assert medicine.quantity == 20
        assert other.quantity == 15
        assert sale.price == Decimal("12.00")
        assert sale.total_amount == Decimal("60.00")

    def test_delete_restores_stock(self, manager_client, medicine, sale):
        response = manager_client.delete(f"/api/sales/{sale.pk}/")

        assert response.status_code == 200
        assert not Sale.objects.exists()
        medicine.refresh_from_db()
        assert medicine.quantity == 20
        assert medicine.total_price == Decimal("200.00")

    def test_employee_cannot_delete(self, employee_client, sale):
        response = employee_client.delete(f"/api/sales/{sale.pk}/")
        assert response.status_code == 403
        assert Sale.objects.filter(pk=sale.pk).exists()

    def test_list_and_detail(self, employee_client, sale):
        assert len(employee_client.get("/api/sales/").json()) == 1
        assert employee_client.get(f"/api/sales/{sale.pk}/").json()["quantity"] == 5
        assert employee_client.get("/api/sales/9999/").status_code == 404
