from decimal import ROUND_HALF_UP, Decimal

DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30


def work_duration_and_payment(joining_date, leave_date, salary):
    """
    Split the days between joining and leaving into years, months and days
    (365-day years, 30-day months) and price them at the monthly salary,
    with leftover days paid at salary / 30.
    """
    days_worked = max((leave_date - joining_date).days, 0)
    years, remainder = divmod(days_worked, DAYS_PER_YEAR)
    months, days = divmod(remainder, DAYS_PER_MONTH)

    monthly = Decimal(str(salary))
    full_months = years * 12 + months
    total = full_months * monthly + days * (monthly / DAYS_PER_MONTH)

    return {
        "duration": {"years": years, "months": months, "days": days},
        "totalPayment": str(total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)),
    }
