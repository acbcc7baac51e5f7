import math
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from core.utils import eat_today
from reports import aggregators


def med(id, quantity, initial_quantity, unit_price="2.00", category=None, **extra):
    values = {
        "id": id,
        "medicine_name": f"Medicine {id}",
        "quantity": quantity,
        "initial_quantity": initial_quantity,
        "unit_price": Decimal(unit_price),
        "category": SimpleNamespace(name=category) if category else None,
        "dosage_form": None,
        "created_by": None,
        "updated_by": None,
        "expire_date": None,
        "total_price": Decimal(unit_price) * quantity,
    }
    values.update(extra)
    return SimpleNamespace(**values)


class TestAggregators:

    def test_turnover_ratio(self):
        assert aggregators.turnover_ratio(5, 10) == 0.5
        assert math.isinf(aggregators.turnover_ratio(5, 0))
        assert aggregators.turnover_ratio(0, 0) == 0.0

    def test_percent(self):
        assert aggregators.percent(1, 3) == "33.33"
        assert aggregators.percent(4, 0) == "0.00"

    def test_medicine_report(self):
        slow = med(1, quantity=5, initial_quantity=10, category="Antibiotics")
        sold_out = med(2, quantity=0, initial_quantity=0)

        report = aggregators.medicine_report([slow, sold_out], {1: 5, 2: 3}, recent_medicines=[])

        assert [row["id"] for row in report["winningProducts"]] == [1, 2]
        assert report["winningProducts"][0]["salesPercent"] == "62.50"
        worst = {row["id"]: row["turnoverRatio"] for row in report["worstPerformingProducts"]}
        assert worst == {1: 0.5, 2: "Infinity"}
        assert report["categoryDistribution"] == [
            {"category_name": "Antibiotics", "count": 1, "percent": "50.00"},
            {"category_name": "Uncategorized", "count": 1, "percent": "50.00"},
        ]
        assert report["totalStockLevel"] == 5
        assert report["totalAssetValue"] == Decimal("10.00")
        assert report["stockLevelChangeMessage"] == "No medicines added in the last 7 days"

    def test_medicine_report_recent_share(self):
        old = med(1, quantity=30, initial_quantity=30)
        new = med(2, quantity=10, initial_quantity=10)

        report = aggregators.medicine_report([old, new], {}, recent_medicines=[new])

        assert report["stockLevelChange"] == "25.00"
        assert report["stockLevelChangeMessage"] == "25.00% of current stock was added in the last 7 days"

    def test_medicine_report_without_medicines(self):
        report = aggregators.medicine_report([], {}, [])
        assert report["stockLevelChangeMessage"] == "No medicines available"
        assert report["totalStockLevel"] == 0

    def test_expiration_report(self):
        today = date(2025, 1, 1)
        medicines = [
            med(1, 4, 4, expire_date=date(2024, 12, 31)),
            med(2, 4, 4, expire_date=date(2025, 1, 20)),
            med(3, 4, 4, expire_date=date(2025, 6, 1)),
            med(4, 4, 4, expire_date=date(2026, 6, 1)),
        ]

        report = aggregators.expiration_report(medicines, today, "30_days")

        assert [m.id for m in report["expiredMedicines"]] == [1]
        assert [m.id for m in report["expiringSoonMedicines"]] == [2]
        assert [m.id for m in report["expiringLaterMedicines"]] == [3]
        assert report["totalValue"] == Decimal("8.00")
        assert report["expiringSoonDays"] == 30

        everything = aggregators.expiration_report(medicines, today, "all")
        assert [m.id for m in everything["expiringSoonMedicines"]] == [2, 3, 4]

    def test_credit_summary_pages(self):
        credits = [
            SimpleNamespace(credit_amount=Decimal("100"), paid_amount=Decimal("40"), unpaid_amount=Decimal("60")),
            SimpleNamespace(credit_amount=Decimal("50"), paid_amount=Decimal("50"), unpaid_amount=Decimal("0")),
        ]

        summary = aggregators.credit_summary(credits, total_records=250, limit=100, offset=200)

        assert summary["totalUnpaid"] == Decimal("60.00")
        assert summary["page"] == 3
        assert summary["totalPages"] == 3


@pytest.mark.django_db
class TestReportEndpoints:

    def sell(self, client, medicine, quantity, method="CASH"):
        return client.post("/api/sales/", {
            "medicine_id": medicine.pk,
            "dosage_form_id": medicine.dosage_form_id,
            "quantity": quantity,
            "product_batch_number": medicine.batch_number,
            "payment_method": method,
        }, format="json")

    def test_sales_report(self, employee_client, medicine):
        self.sell(employee_client, medicine, 2)
        self.sell(employee_client, medicine, 3, method="CBE")

        body = employee_client.get("/api/sales/report/").json()

        assert body["summary"]["salesCount"] == 2
        assert body["summary"]["totalQuantity"] == 5
        assert Decimal(str(body["summary"]["totalSales"])) == Decimal("50")
        assert body["summary"]["byPaymentMethod"]["CBE"]["count"] == 1
        assert len(body["sales"]) == 2

    def test_sales_report_filters(self, employee_client, medicine, customer):
        self.sell(employee_client, medicine, 2)
        tomorrow = (eat_today() + timedelta(days=1)).isoformat()

        body = employee_client.get("/api/sales/report/", {"start_date": tomorrow}).json()
        assert body["sales"] == []
        assert body["message"] == "No sales found for the specified filters"

        assert employee_client.get("/api/sales/report/", {"customer_id": 9999}).status_code == 404
        bad_range = employee_client.get("/api/sales/report/", {"start_date": tomorrow, "end_date": "2020-01-01"})
        assert bad_range.status_code == 400

    def test_medicine_report(self, employee_client, medicine):
        self.sell(employee_client, medicine, 4)

        body = employee_client.get("/api/medicines/report/").json()

        assert body["winningProducts"][0]["totalSales"] == 4
        assert body["totalStockLevel"] == 16
        assert body["stockLevelChangeMessage"] == "100.00% of current stock was added in the last 7 days"

    def test_expiration_report(self, employee_client, make_medicine):
        today = eat_today()
        make_medicine(batch_number="GONE", expire_date=today - timedelta(days=3))
        make_medicine(batch_number="SOON", expire_date=today + timedelta(days=10))
        make_medicine(batch_number="LATER", expire_date=today + timedelta(days=100))

        body = employee_client.get("/api/expire/report/", {"time_period": "30_days"}).json()

        assert [m["batch_number"] for m in body["expiredMedicines"]] == ["GONE"]
        assert [m["batch_number"] for m in body["expiringSoonMedicines"]] == ["SOON"]
        assert [m["batch_number"] for m in body["expiringLaterMedicines"]] == ["LATER"]
        assert Decimal(str(body["totalValue"])) == Decimal("200")

    def test_sales_report_totals_span_every_page(self, employee_client, medicine):
        for quantity in (1, 2, 3):
            self.sell(employee_client, medicine, quantity)

        body = employee_client.get("/api/sales/report/", {"limit": 1, "offset": 1}).json()

        assert len(body["sales"]) == 1
        assert body["summary"]["salesCount"] == 3
        assert body["summary"]["totalQuantity"] == 6
        assert Decimal(str(body["summary"]["totalSales"])) == Decimal("60")
        assert body["summary"]["totalRecords"] == 3
        assert body["summary"]["page"] == 2
        assert body["summary"]["totalPages"] == 3

    def test_expiration_report_counts_span_every_page(self, employee_client, make_medicine):
        today = eat_today()
        make_medicine(batch_number="GONE", expire_date=today - timedelta(days=3))
        make_medicine(batch_number="SOON", expire_date=today + timedelta(days=10))
        make_medicine(batch_number="LATER", expire_date=today + timedelta(days=100))

        body = employee_client.get("/api/expire/report/", {"time_period": "30_days", "limit": 1, "offset": 1}).json()

        assert body["expiredCount"] == 1
        assert body["expiringSoonCount"] == 1
        assert body["expiringLaterCount"] == 1
        assert Decimal(str(body["totalValue"])) == Decimal("200")
        assert body["expiredMedicines"] == []
        assert [m["batch_number"] for m in body["expiringSoonMedicines"]] == ["SOON"]
        assert body["expiringLaterMedicines"] == []
        assert body["totalRecords"] == 3

    def test_expiration_report_rejects_unknown_period(self, employee_client):
        response = employee_client.get("/api/expire/report/", {"time_period": "2_weeks"})
        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid time_period")

    def test_expense_report_is_manager_only(self, employee_client):
        assert employee_client.get("/api/expenses/report/").status_code == 403
