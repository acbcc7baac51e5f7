# reports/aggregators.py
"""
Report arithmetic over rows the views have already fetched. Nothing here
touches the database, so every function can be fed plain objects.
"""
import math
from collections import OrderedDict
from decimal import Decimal

TWO_PLACES = Decimal("0.01")

TIME_PERIOD_DAYS = {
    "30_days": 30,
    "90_days": 90,
    "180_days": 180,
    "1_year": 365,
    "all": None,
}
DEFAULT_TIME_PERIOD = "1_year"
EXPIRY_HORIZON_DAYS = 365

TOP_PRODUCTS = 5


def money(value):
    return Decimal(value or 0).quantize(TWO_PLACES)


def percent(part, whole):
    """Share of whole as a two-decimal string; "0.00" when whole is zero."""
    if not whole:
        return "0.00"
    return f"{Decimal(part) * 100 / Decimal(whole):.2f}"


def page_info(total_records, limit, offset):
    return {
        "totalRecords": total_records,
        "page": offset // limit + 1,
        "totalPages": math.ceil(total_records / limit),
    }


def _name(related, default):
    return getattr(related, "name", None) or default


def _username(user):
    return getattr(user, "username", None)


# ===================== SALES =====================
def sales_summary(sales):
    total_amount = sum((Decimal(s.total_amount) for s in sales), Decimal("0"))
    by_method = OrderedDict()
    for sale in sales:
        bucket = by_method.setdefault(sale.payment_method, {"count": 0, "total": Decimal("0")})
        bucket["count"] += 1
        bucket["total"] += Decimal(sale.total_amount)
    return {
        "salesCount": len(sales),
        "totalSales": money(total_amount),
        "totalQuantity": sum(s.quantity for s in sales),
        "byPaymentMethod": {method: {"count": b["count"], "total": money(b["total"])} for method, b in by_method.items()},
    }


# ===================== MEDICINES =====================
def turnover_ratio(units_sold, initial_quantity):
    if initial_quantity == 0:
        return math.inf if units_sold > 0 else 0.0
    return units_sold / initial_quantity


def medicine_report(medicines, units_sold, recent_medicines):
    """
    medicines: every stocked batch.
    units_sold: {medicine_id: net units sold}.
    recent_medicines: the batches created in the last seven days.
    """
    if not medicines:
        return {
            "winningProducts": [],
            "worstPerformingProducts": [],
            "stockLevels": [],
            "categoryDistribution": [],
            "totalStockLevel": 0,
            "totalAssetValue": money(0),
            "stockLevelChange": "0.00",
            "assetValueChange": "0.00",
            "stockLevelChangeMessage": "No medicines available",
            "assetValueChangeMessage": "No medicines available",
        }

    rows = []
    for med in medicines:
        sold = units_sold.get(med.id, 0)
        rows.append((med, sold, turnover_ratio(sold, med.initial_quantity)))
    overall_sold = sum(sold for _, sold, _ in rows)

    by_share = sorted(rows, key=lambda row: row[1], reverse=True)
    winning = [
        {
            "id": med.id,
            "medicine_name": med.medicine_name,
            "totalSales": sold,
            "salesPercent": percent(sold, overall_sold),
            "unit_price": money(med.unit_price),
            "dosage_form": _name(med.dosage_form, None),
            "category": _name(med.category, None),
        }
        for med, sold, _ in by_share[:TOP_PRODUCTS]
    ]

    by_turnover = sorted((row for row in rows if row[1] > 0 or row[0].quantity > 0), key=lambda row: row[2])
    worst = [
        {
            "id": med.id,
            "medicine_name": med.medicine_name,
            "totalSales": sold,
            "turnoverRatio": "Infinity" if math.isinf(ratio) else round(ratio, 2),
            "quantityInStock": med.quantity,
            "unit_price": money(med.unit_price),
            "dosage_form": _name(med.dosage_form, None),
            "category": _name(med.category, None),
        }
        for med, sold, ratio in by_turnover[:TOP_PRODUCTS]
    ]

    stock_levels = [
        {
            "id": med.id,
            "medicine_name": med.medicine_name,
            "quantity": med.quantity,
            "unit_price": money(med.unit_price),
            "expire_date": med.expire_date,
            "createdBy": _username(med.created_by),
            "updatedBy": _username(med.updated_by),
        }
        for med in medicines
    ]

    category_counts = OrderedDict()
    for med in medicines:
        name = _name(med.category, "Uncategorized")
        category_counts[name] = category_counts.get(name, 0) + 1
    category_distribution = [
        {"category_name": name, "count": count, "percent": percent(count, len(medicines))}
        for name, count in category_counts.items()
    ]

    total_stock = sum(med.quantity for med in medicines)
    total_asset = sum((med.quantity * Decimal(med.unit_price) for med in medicines), Decimal("0"))
    recent_stock = sum(med.quantity for med in recent_medicines)
    recent_asset = sum((med.quantity * Decimal(med.unit_price) for med in recent_medicines), Decimal("0"))

    stock_change = percent(recent_stock, total_stock)
    asset_change = percent(recent_asset, total_asset)
    return {
        "winningProducts": winning,
        "worstPerformingProducts": worst,
        "stockLevels": stock_levels,
        "categoryDistribution": category_distribution,
        "totalStockLevel": total_stock,
        "totalAssetValue": money(total_asset),
        "stockLevelChange": stock_change,
        "assetValueChange": asset_change,
        "stockLevelChangeMessage": _change_message(recent_medicines, stock_change, "stock"),
        "assetValueChangeMessage": _change_message(recent_medicines, asset_change, "asset value"),
    }


def _change_message(recent_medicines, change, subject):
    if not recent_medicines:
        return "No medicines added in the last 7 days"
    return f"{change}% of current {subject} was added in the last 7 days"


# ===================== EXPIRATION =====================
def expiration_report(medicines, today, time_period=DEFAULT_TIME_PERIOD):
    """
    Split batches into expired, expiring within the period, and expiring
    later in the year. With "all" every unexpired batch counts as expiring soon.
    """
    soon_days = TIME_PERIOD_DAYS[time_period]
    expired, soon, later = [], [], []
    for med in medicines:
        days_left = (med.expire_date - today).days
        if days_left <= 0:
            expired.append(med)
        elif soon_days is None or days_left <= soon_days:
            soon.append(med)
        elif days_left <= EXPIRY_HORIZON_DAYS:
            later.append(med)

    return {
        "expiredMedicines": expired,
        "expiringSoonMedicines": soon,
        "expiringLaterMedicines": later,
        "expiredCount": len(expired),
        "expiringSoonCount": len(soon),
        "expiringLaterCount": len(later),
        "totalValue": money(sum((Decimal(m.total_price) for m in expired), Decimal("0"))),
        "expiringSoonDays": soon_days if soon_days is not None else EXPIRY_HORIZON_DAYS,
    }


# ===================== CREDITS =====================
def credit_summary(credits, total_records, limit, offset):
    return {
        "creditCount": len(credits),
        "totalCredits": money(sum((Decimal(c.credit_amount) for c in credits), Decimal("0"))),
        "totalPaid": money(sum((Decimal(c.paid_amount) for c in credits), Decimal("0"))),
        "totalUnpaid": money(sum((Decimal(c.unpaid_amount) for c in credits), Decimal("0"))),
        **page_info(total_records, limit, offset),
    }


# ===================== EXPENSES =====================
def expense_report(expenses):
    by_reason = OrderedDict()
    for expense in expenses:
        bucket = by_reason.setdefault(expense.reason, {"total": Decimal("0"), "count": 0})
        bucket["total"] += Decimal(expense.amount)
        bucket["count"] += 1
    return {
        "totalExpenses": money(sum((Decimal(e.amount) for e in expenses), Decimal("0"))),
        "expensesByCategory": [
            {"category": reason, "total": money(b["total"]), "count": b["count"]}
            for reason, b in by_reason.items()
        ],
    }
