import logging
from datetime import date

from errors import NotFound, ValidationError
from normalizer import to_float

logger = logging.getLogger(__name__)

ACTIVE = "active"
EXPIRED = "expired"


def _number(value, label):
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number")


def _parse_date(value):
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError("Expiry date must be a date (YYYY-MM-DD)")


def validate_discount(data):
    """
    Check a new discount before anything is written.

    Exactly one of discount_percentage / fixed_discount must be given.
    """
    code = (data.get("code") or "").strip().upper()
    expiry = (data.get("expiry_date") or "").strip()
    percentage = _number(data.get("discount_percentage"), "Discount percentage")
    fixed = _number(data.get("fixed_discount"), "Fixed discount")

    if percentage is None and fixed is None:
        raise ValidationError(
            "Please provide either a Discount Percentage or a Fixed Discount."
        )
    if percentage is not None and fixed is not None:
        raise ValidationError(
            "Please provide only one of Discount Percentage or Fixed Discount, not both."
        )
    if not code or not expiry:
        raise ValidationError("Code and Expiry Date are required.")
    if percentage is not None and not 0 < percentage <= 100:
        raise ValidationError("Discount percentage must be between 0 and 100")
    if fixed is not None and fixed <= 0:
        raise ValidationError("Fixed discount must be greater than 0")

    return {
        "code": code,
        "discount_percentage": percentage,
        "fixed_discount": fixed,
        "expiry_date": _parse_date(expiry).isoformat(),
    }


def create_discount(store, data):
    fields = validate_discount(data)
    if store.select_one("discounts", {"code": fields["code"]}):
        raise ValidationError(f"Discount code {fields['code']} already exists")
    row = store.insert("discounts", {**fields, "status": ACTIVE})[0]
    logger.info("Discount %s created", row["code"])
    return row


def list_discounts(store, search=None, status=None, sort="expiry_date"):
    discounts = store.select("discounts")
    if search:
        discounts = [d for d in discounts if search.lower() in d["code"].lower()]
    if status and status != "all":
        discounts = [d for d in discounts if d["status"] == status]
    if sort == "expiry_date":
        discounts.sort(key=lambda d: d["expiry_date"] or "")
    return discounts


def toggle_status(store, discount_id):
    discount = store.select_one("discounts", {"id": discount_id})
    if discount is None:
        raise NotFound("Discount not found")
    new_status = EXPIRED if discount["status"] == ACTIVE else ACTIVE
    store.update("discounts", {"status": new_status}, {"id": discount_id})
    return {**discount, "status": new_status}


def delete_discount(store, discount_id):
    if not store.delete("discounts", {"id": discount_id}):
        raise NotFound("Discount not found")


def find_active_discount(store, code, today=None):
    code = (code or "").strip().upper()
    discount = store.select_one("discounts", {"code": code}) if code else None
    if discount is None or discount["status"] != ACTIVE:
        raise ValidationError("Invalid discount code")
    today = today or date.today()
    if _parse_date(discount["expiry_date"]) < today:
        raise ValidationError("Discount code has expired")
    return discount


def apply_discount(subtotal, discount):
    """Amount taken off `subtotal`, never more than the subtotal itself."""
    if not discount:
        return 0.0
    if discount.get("discount_percentage"):
        off = subtotal * to_float(discount["discount_percentage"]) / 100
    else:
        off = to_float(discount.get("fixed_discount"))
    return round(min(max(off, 0.0), subtotal), 2)
