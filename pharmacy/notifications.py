# pharmacy/notifications.py
"""
Manager alerts: low stock, expiring or expired batches and overdue credits.

The daily Celery beat job and the post-sale hook both go through
NotificationService, which takes its mail connection and clock as
constructor arguments. Each check sends at most one email, and a failing
check never stops the others.
"""
import logging
from datetime import timedelta
from html import escape

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.utils import timezone

from core.choices import Role
from core.models import User
from core.utils import eat_now
from customers.credit import OUTSTANDING_STATUSES
from customers.models import CustomerCredit, SupplierCredit
from pharmacy.models import Medicine

logger = logging.getLogger(__name__)

# (label, days ahead); None marks already-expired batches
EXPIRY_WINDOWS = (
    ("Expired", None),
    ("Expiring within 2 weeks", 14),
    ("Expiring within 4 weeks", 28),
)

# Largest window first so each credit lands in exactly one bucket
OVERDUE_WEEKS = (4, 3, 2)


def render_table(title, intro, headers, rows):
    """Plain-text and HTML renderings of the same table."""
    pharmacy = settings.PHARMACY_NAME
    text_lines = [pharmacy, title, "Dear Manager,", "", intro, "", " | ".join(["No."] + headers)]
    text_lines.append("-" * 60)
    for index, row in enumerate(rows, start=1):
        text_lines.append(" | ".join([str(index)] + [str(cell) for cell in row]))
    text_lines += ["", "Best regards,", pharmacy]

    head = "".join(f"<th>{escape(h)}</th>" for h in ["No."] + headers)
    body = "".join(
        "<tr>" + "".join(f"<td>{escape(str(cell))}</td>" for cell in [index] + list(row)) + "</tr>"
        for index, row in enumerate(rows, start=1)
    )
    html = (
        f"<h2>{escape(pharmacy)}</h2><h3>{escape(title)}</h3>"
        f"<p>Dear Manager,</p><p>{escape(intro)}</p>"
        f"<table border=\"1\" cellpadding=\"6\"><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"
    )
    return "\n".join(text_lines), html


class NotificationService:

    def __init__(self, connection=None, clock=eat_now, low_stock_threshold=None):
        self.connection = connection if connection is not None else get_connection()
        self.clock = clock
        self.low_stock_threshold = (
            low_stock_threshold if low_stock_threshold is not None else settings.LOW_STOCK_THRESHOLD
        )

    # ===================== DELIVERY =====================
    def manager_email(self):
        return (
            User.objects.filter(role=Role.MANAGER)
            .exclude(email="")
            .exclude(email__isnull=True)
            .order_by("id")
            .values_list("email", flat=True)
            .first()
        )

    def send(self, subject, intro, headers, rows):
        recipient = self.manager_email()
        if not recipient:
            logger.error(f"No manager email available, dropping '{subject}' notification")
            return False

        text, html = render_table(subject, intro, headers, rows)
        message = EmailMultiAlternatives(
            subject=subject,
            body=text,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[recipient],
            connection=self.connection,
        )
        message.attach_alternative(html, "text/html")
        message.send(fail_silently=False)
        logger.info(f"Sent '{subject}' to {recipient} with {len(rows)} rows")
        return True

    # ===================== LOW STOCK =====================
    def low_stock_medicines(self):
        return (
            Medicine.objects.filter(quantity__lte=self.low_stock_threshold)
            .select_related("category", "supplier")
            .order_by("quantity")
        )

    def _stock_row(self, medicine):
        return [
            medicine.medicine_name,
            medicine.batch_number or "Not Assigned",
            medicine.expire_date.isoformat() if medicine.expire_date else "N/A",
            medicine.quantity,
            medicine.category.name if medicine.category_id else "N/A",
            medicine.supplier.supplier_name if medicine.supplier_id else "Not Assigned",
        ]

    def check_low_stock(self):
        medicines = list(self.low_stock_medicines())
        if not medicines:
            logger.info("No low stock medicines")
            return 0
        self.send(
            "Low Stock Alert",
            f"The following medicines are low in stock (<= {self.low_stock_threshold} units). Please restock them.",
            ["Medicine Name", "Batch Number", "Expire Date", "Quantity", "Category", "Supplier"],
            [self._stock_row(m) for m in medicines],
        )
        return len(medicines)

    def check_low_stock_after_sale(self, medicine_id):
        medicine = Medicine.objects.select_related("category", "supplier").filter(pk=medicine_id).first()
        if medicine is None or medicine.quantity > self.low_stock_threshold:
            return False
        return self.send(
            "Low Stock After Sale",
            f"{medicine.medicine_name} dropped to {medicine.quantity} units after a recent transaction.",
            ["Medicine Name", "Batch Number", "Expire Date", "Quantity", "Category", "Supplier"],
            [self._stock_row(medicine)],
        )

    # ===================== EXPIRATION =====================
    def expiring_medicines(self):
        """Group batches into the expired / 2-week / 4-week windows; each batch appears once."""
        today = self.clock().date()
        groups = {}
        lower = None
        for label, days in EXPIRY_WINDOWS:
            queryset = Medicine.objects.select_related("category", "supplier")
            if days is None:
                queryset = queryset.filter(expire_date__lte=today)
                lower = today
            else:
                upper = today + timedelta(days=days)
                queryset = queryset.filter(expire_date__gt=lower, expire_date__lte=upper)
                lower = upper
            groups[label] = list(queryset.order_by("expire_date"))
        return groups

    def check_expirations(self):
        groups = self.expiring_medicines()
        rows = [
            [label, m.medicine_name, m.batch_number or "Not Assigned", m.expire_date.isoformat(), m.quantity]
            for label, medicines in groups.items()
            for m in medicines
        ]
        if not rows:
            logger.info("No expired or soon-to-expire medicines")
            return 0
        self.send(
            "Expiration Alert",
            "The following medicines have expired or will expire within the next four weeks.",
            ["Window", "Medicine Name", "Batch Number", "Expire Date", "Quantity"],
            rows,
        )
        return len(rows)

    # ===================== CREDITS =====================
    def overdue_credits(self, model):
        """(credit, weeks) pairs for outstanding credits older than two weeks, bucketed by the largest window passed."""
        now = self.clock()
        status_filter = {f"{model.status_field}__in": OUTSTANDING_STATUSES}
        credits = model.objects.select_related(model.party_field).filter(
            credit_date__lt=now - timedelta(weeks=OVERDUE_WEEKS[-1]), **status_filter
        ).order_by("credit_date")

        overdue = []
        for credit in credits:
            age = now - credit.credit_date
            weeks = next(w for w in OVERDUE_WEEKS if age > timedelta(weeks=w))
            overdue.append((credit, weeks))
        return overdue

    def _check_credits(self, model, subject, party_of):
        overdue = self.overdue_credits(model)
        if not overdue:
            logger.info(f"No overdue entries for '{subject}'")
            return 0
        rows = [
            [
                party_of(credit),
                credit.credit_amount,
                credit.paid_amount,
                credit.unpaid_amount,
                credit.credit_status,
                timezone.localtime(credit.credit_date).date().isoformat(),
                f"Over {weeks} weeks",
            ]
            for credit, weeks in overdue
        ]
        self.send(
            subject,
            "The following credits are still outstanding more than two weeks after they were recorded.",
            ["Name", "Credit", "Paid", "Unpaid", "Status", "Credit Date", "Overdue"],
            rows,
        )
        return len(rows)

    def check_customer_credits(self):
        return self._check_credits(
            CustomerCredit,
            "Unpaid Customer Credits Alert",
            lambda credit: credit.customer.name,
        )

    def check_supplier_credits(self):
        return self._check_credits(
            SupplierCredit,
            "Unpaid Supplier Credits Alert",
            lambda credit: credit.supplier.supplier_name,
        )

    # ===================== DAILY RUN =====================
    def run_daily(self):
        """Run every check; a failure is logged and reported as None for that check."""
        checks = {
            "low_stock": self.check_low_stock,
            "expiration": self.check_expirations,
            "customer_credits": self.check_customer_credits,
            "supplier_credits": self.check_supplier_credits,
        }
        results = {}
        for name, check in checks.items():
            try:
                results[name] = check()
            except Exception as e:
                logger.error(f"Notification check '{name}' failed: {e}", exc_info=True)
                results[name] = None
        return results


def notify_stock_change(medicine_id, service=None):
    """Low-stock hook run after a sale or return commits. Never raises."""
    try:
        (service or NotificationService()).check_low_stock_after_sale(medicine_id)
    except Exception as e:
        logger.error(f"Low stock check after sale failed for medicine {medicine_id}: {e}", exc_info=True)
