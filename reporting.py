"""
Revenue, sales and summary figures for the admin dashboard.

Everything here works on the normalized order list already in memory and
never changes it, so the same list always gives the same report.

Note the two meanings of "daily": revenue is grouped by weekday label
(every Monday ever lands in "Mon"), while the sales counts use a rolling
window measured back from now ("daily" is the last 7 days).
"""
import math
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from normalizer import NOT_SET, order_amount
from order_types import MENU_ORDER, PARTY_ORDER, RESERVATION, TAKEAWAY_ORDER

WINDOWS = ("daily", "weekly", "monthly", "yearly", "alltime")
ALL_TIME = "All Time"

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

SALES_CATEGORIES = {
    RESERVATION: "dine_in",
    TAKEAWAY_ORDER: "takeaway",
    PARTY_ORDER: "party_orders",
    MENU_ORDER: "menu_orders",
}


@dataclass
class DashboardStats:
    total_reservations: int = 0
    total_party_orders: int = 0
    total_takeaway_orders: int = 0
    total_menu_orders: int = 0
    total_customers: int = 0
    average_party_guests: float = 0.0
    pending_orders: int = 0
    completed_orders: int = 0

    def to_dict(self):
        return asdict(self)


def parse_timestamp(value):
    """Naive UTC datetime for an ISO timestamp, None when undated or unreadable."""
    if not value or value == NOT_SET:
        return None
    try:
        when = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc).replace(tzinfo=None)
    return when


def bucket_labels(when):
    return {
        "daily": WEEKDAYS[when.weekday()],
        "weekly": f"Week {math.ceil(when.day / 7)}",
        "monthly": MONTHS[when.month - 1],
        "yearly": str(when.year),
    }


def revenue_by_window(orders):
    sums = {window: {} for window in WINDOWS if window != "alltime"}
    all_time = 0.0

    for order in orders:
        amount = order_amount(order)
        # undated orders still count towards all time
        all_time += amount
        when = parse_timestamp(order.created_at)
        if when is None:
            continue
        for window, label in bucket_labels(when).items():
            sums[window][label] = sums[window].get(label, 0.0) + amount

    sums["yearly"] = dict(sorted(sums["yearly"].items()))

    report = {
        window: {
            "labels": list(buckets.keys()),
            "data": [round(v, 2) for v in buckets.values()],
        }
        for window, buckets in sums.items()
    }
    report["alltime"] = {"labels": [ALL_TIME], "data": [round(all_time, 2)]}
    return report


def _empty_sales():
    return {category: 0 for category in SALES_CATEGORIES.values()}


def sales_by_window(orders, now=None):
    if now is None:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)

    report = {window: _empty_sales() for window in WINDOWS}

    for order in orders:
        category = SALES_CATEGORIES.get(order.type_of_order)
        if category is None:
            continue
        # undated orders are counted here too, unlike the four dated windows
        report["alltime"][category] += 1

        when = parse_timestamp(order.created_at)
        if when is None:
            continue
        day_diff = math.floor((now - when).total_seconds() / 86400)
        if day_diff <= 7:
            report["daily"][category] += 1
        if day_diff // 7 <= 4:
            report["weekly"][category] += 1
        if day_diff // 30 <= 12:
            report["monthly"][category] += 1
        if now.year - when.year <= 5:
            report["yearly"][category] += 1

    return report


def summary_stats(orders, customers):
    by_type = {}
    for order in orders:
        by_type.setdefault(order.type_of_order, []).append(order)

    party_orders = by_type.get(PARTY_ORDER, [])
    total_guests = sum(o.details.get("guest_count") or 0 for o in party_orders)

    return DashboardStats(
        total_reservations=len(by_type.get(RESERVATION, [])),
        total_party_orders=len(party_orders),
        total_takeaway_orders=len(by_type.get(TAKEAWAY_ORDER, [])),
        total_menu_orders=len(by_type.get(MENU_ORDER, [])),
        total_customers=len(customers),
        average_party_guests=(
            total_guests / len(party_orders) if party_orders else 0
        ),
        pending_orders=sum(1 for o in orders if o.order_status == "pending"),
        completed_orders=sum(1 for o in orders if o.order_status == "completed"),
    )


def dashboard_report(orders, customers, now=None):
    return {
        "stats": summary_stats(orders, customers).to_dict(),
        "revenue": revenue_by_window(orders),
        "sales": sales_by_window(orders, now),
    }
