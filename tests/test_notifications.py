from datetime import timedelta
from decimal import Decimal

import pytest
from django.core import mail

from core.choices import CreditStatus
from core.utils import eat_now
from customers.models import CustomerCredit, SupplierCredit
from pharmacy.notifications import NotificationService, notify_stock_change

NOW = eat_now().replace(hour=12, minute=0, second=0, microsecond=0)


@pytest.fixture
def service():
    return NotificationService(clock=lambda: NOW)


@pytest.mark.django_db
class TestLowStock:

    def test_reports_batches_at_or_below_threshold(self, service, manager, make_medicine):
        make_medicine(batch_number="LOW", quantity=10)
        make_medicine(batch_number="FINE", quantity=11)

        assert service.check_low_stock() == 1
        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.subject == "Low Stock Alert"
        assert "LOW" in message.body
        assert "FINE" not in message.body
        assert message.alternatives[0][1] == "text/html"

    def test_nothing_to_report(self, service, manager, medicine):
        assert service.check_low_stock() == 0
        assert mail.outbox == []

    def test_no_manager_email_drops_the_message(self, service, manager, make_medicine):
        manager.email = ""
        manager.save()
        make_medicine(batch_number="LOW", quantity=1)

        service.check_low_stock()
        assert mail.outbox == []

    def test_custom_threshold(self, manager, medicine):
        NotificationService(clock=lambda: NOW, low_stock_threshold=25).check_low_stock()
        assert len(mail.outbox) == 1

    def test_stock_change_hook(self, manager, make_medicine):
        low = make_medicine(batch_number="LOW", quantity=3)
        notify_stock_change(low.pk)
        assert mail.outbox[0].subject == "Low Stock After Sale"

    def test_stock_change_hook_swallows_errors(self, manager, medicine):
        class Broken:
            def check_low_stock_after_sale(self, medicine_id):
                raise ConnectionError("smtp unreachable")

        notify_stock_change(medicine.pk, service=Broken())


@pytest.mark.django_db
class TestExpirations:

    def test_each_batch_lands_in_one_window(self, service, manager, make_medicine):
        today = NOW.date()
        make_medicine(batch_number="EXPIRED", expire_date=today)
        make_medicine(batch_number="TWO-WEEKS", expire_date=today + timedelta(days=14))
        make_medicine(batch_number="FOUR-WEEKS", expire_date=today + timedelta(days=15))
        make_medicine(batch_number="FAR", expire_date=today + timedelta(days=29))

        groups = service.expiring_medicines()

        assert [m.batch_number for m in groups["Expired"]] == ["EXPIRED"]
        assert [m.batch_number for m in groups["Expiring within 2 weeks"]] == ["TWO-WEEKS"]
        assert [m.batch_number for m in groups["Expiring within 4 weeks"]] == ["FOUR-WEEKS"]

        assert service.check_expirations() == 3
        assert mail.outbox[0].subject == "Expiration Alert"
        assert "FAR" not in mail.outbox[0].body


@pytest.mark.django_db
class TestOverdueCredits:

    def make_credit(self, customer, days_ago, **extra):
        return CustomerCredit.objects.create(
            customer=customer,
            credit_amount=Decimal("100"),
            credit_date=NOW - timedelta(days=days_ago),
            **extra,
        )

    def test_credit_is_bucketed_once_by_largest_window(self, service, manager, customer):
        self.make_credit(customer, 10)
        two = self.make_credit(customer, 15)
        three = self.make_credit(customer, 22)
        four = self.make_credit(customer, 40)

        overdue = dict((credit.pk, weeks) for credit, weeks in service.overdue_credits(CustomerCredit))

        assert overdue == {two.pk: 2, three.pk: 3, four.pk: 4}

    def test_paid_credits_are_ignored(self, service, manager, customer):
        self.make_credit(customer, 40, paid_amount=Decimal("100"))
        partial = self.make_credit(customer, 40, paid_amount=Decimal("30"))
        assert partial.status == CreditStatus.PARTIALLY_PAID

        assert service.check_customer_credits() == 1
        assert mail.outbox[0].subject == "Unpaid Customer Credits Alert"
        assert customer.name in mail.outbox[0].body

    def test_supplier_credits(self, service, manager, supplier):
        SupplierCredit.objects.create(supplier=supplier, credit_amount=Decimal("80"),
                                      credit_date=NOW - timedelta(days=30))

        assert service.check_supplier_credits() == 1
        assert mail.outbox[0].subject == "Unpaid Supplier Credits Alert"
        assert "Over 4 weeks" in mail.outbox[0].body


@pytest.mark.django_db
class TestDailyRun:

    def test_one_failing_check_does_not_stop_the_rest(self, service, manager, make_medicine, monkeypatch):
        make_medicine(batch_number="LOW", quantity=2, expire_date=NOW.date())

        def explode():
            raise RuntimeError("database hiccup")

        monkeypatch.setattr(service, "check_low_stock", explode)
        results = service.run_daily()

        assert results["low_stock"] is None
        assert results["expiration"] == 1
        assert results["customer_credits"] == 0
        assert [m.subject for m in mail.outbox] == ["Expiration Alert"]

    def test_celery_task_runs_all_checks(self, manager, make_medicine):
        from pharmacy.tasks import run_daily_notifications

        make_medicine(batch_number="LOW", quantity=2)
        results = run_daily_notifications.apply().get()

        assert results["low_stock"] == 1
        assert "Low Stock Alert" in [m.subject for m in mail.outbox]
