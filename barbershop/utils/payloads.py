from datetime import date, time
from decimal import Decimal, InvalidOperation


class PayloadError(ValueError):
    """Raised when a request body field cannot be parsed."""


def parse_date(value):
    return date.fromisoformat(value)


def parse_time(value):
    # "HH:MM" or "HH:MM:SS"
    return time.fromisoformat(value)


def parse_decimal(value):
    amount = Decimal(str(value))
    if not amount.is_finite():
        raise ValueError(f"not a finite amount: {value}")
    return amount


def parse_int(value):
    if isinstance(value, bool):
        raise TypeError("boolean is not an integer")
    return int(value)


def parse_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def parse_str(value):
    return str(value)


def parse_list(value):
    if not isinstance(value, list):
        raise TypeError("expected a list")
    return value


def missing_fields(data, required):
    return [f for f in required if data.get(f) in (None, "")]


def parse_field(data, key, parser):
    """Parse one optional field; blank or missing gives None."""
    raw = data.get(key)
    if raw in (None, ""):
        return None
    try:
        return parser(raw)
    except (ValueError, TypeError, InvalidOperation):
        raise PayloadError(f"Invalid value for '{key}'")


def apply_payload(obj, data, fields):
    """
    Copy known camelCase keys from a request body onto a model instance.

    ``fields`` maps the JSON key to ``(attribute, parser)``. Keys absent from
    ``data`` are left untouched; explicit nulls clear the attribute.
    """
    for key, (attr, parser) in fields.items():
        if key not in data:
            continue
        raw = data[key]
        try:
            value = parser(raw) if raw is not None else None
        except (ValueError, TypeError, InvalidOperation):
            raise PayloadError(f"Invalid value for '{key}'")
        setattr(obj, attr, value)
    return obj


BARBERSHOP_FIELDS = {
    "name": ("name", parse_str),
    "slug": ("slug", parse_str),
    "description": ("description", parse_str),
    "address": ("address", parse_str),
    "phone": ("phone", parse_str),
    "email": ("email", parse_str),
    "logoUrl": ("logo_url", parse_str),
    "coverUrl": ("cover_url", parse_str),
    "primaryColor": ("primary_color", parse_str),
    "openingTime": ("opening_time", parse_time),
    "closingTime": ("closing_time", parse_time),
    "workDays": ("work_days", parse_list),
}

BARBER_FIELDS = {
    "name": ("name", parse_str),
    "email": ("email", parse_str),
    "phone": ("phone", parse_str),
    "photoUrl": ("photo_url", parse_str),
    "bio": ("bio", parse_str),
    "commissionRate": ("commission_rate", parse_decimal),
    "isActive": ("is_active", parse_bool),
    "workStartTime": ("work_start_time", parse_time),
    "workEndTime": ("work_end_time", parse_time),
    "workDays": ("work_days", parse_list),
}

CATEGORY_FIELDS = {
    "name": ("name", parse_str),
    "description": ("description", parse_str),
    "sortOrder": ("sort_order", parse_int),
}

SERVICE_FIELDS = {
    "categoryId": ("category_id", parse_str),
    "name": ("name", parse_str),
    "description": ("description", parse_str),
    "price": ("price", parse_decimal),
    "duration": ("duration", parse_int),
    "isCombo": ("is_combo", parse_bool),
    "isActive": ("is_active", parse_bool),
    "imageUrl": ("image_url", parse_str),
}

CLIENT_FIELDS = {
    "name": ("name", parse_str),
    "email": ("email", parse_str),
    "phone": ("phone", parse_str),
    "photoUrl": ("photo_url", parse_str),
    "birthDate": ("birth_date", parse_date),
    "notes": ("notes", parse_str),
    "preferences": ("preferences", parse_str),
    "isActive": ("is_active", parse_bool),
}

APPOINTMENT_FIELDS = {
    "clientId": ("client_id", parse_str),
    "barberId": ("barber_id", parse_str),
    "serviceId": ("service_id", parse_str),
    "date": ("date", parse_date),
    "startTime": ("start_time", parse_time),
    "endTime": ("end_time", parse_time),
    "price": ("price", parse_decimal),
    "notes": ("notes", parse_str),
    "clientName": ("client_name", parse_str),
    "clientPhone": ("client_phone", parse_str),
}

PRODUCT_FIELDS = {
    "name": ("name", parse_str),
    "description": ("description", parse_str),
    "sku": ("sku", parse_str),
    "price": ("price", parse_decimal),
    "costPrice": ("cost_price", parse_decimal),
    "stockQuantity": ("stock_quantity", parse_int),
    "lowStockThreshold": ("low_stock_threshold", parse_int),
    "imageUrl": ("image_url", parse_str),
    "isActive": ("is_active", parse_bool),
}

TRANSACTION_FIELDS = {
    "appointmentId": ("appointment_id", parse_str),
    "barberId": ("barber_id", parse_str),
    "clientId": ("client_id", parse_str),
    "type": ("type", parse_str),
    "category": ("category", parse_str),
    "description": ("description", parse_str),
    "amount": ("amount", parse_decimal),
    "paymentMethod": ("payment_method", parse_str),
    "commissionAmount": ("commission_amount", parse_decimal),
    "date": ("date", parse_date),
}

LOYALTY_PLAN_FIELDS = {
    "name": ("name", parse_str),
    "description": ("description", parse_str),
    "pointsPerCurrency": ("points_per_currency", parse_int),
    "rewardThreshold": ("reward_threshold", parse_int),
    "rewardValue": ("reward_value", parse_decimal),
    "rewardType": ("reward_type", parse_str),
    "isActive": ("is_active", parse_bool),
}

PACKAGE_FIELDS = {
    "name": ("name", parse_str),
    "description": ("description", parse_str),
    "price": ("price", parse_decimal),
    "credits": ("credits", parse_int),
    "validityDays": ("validity_days", parse_int),
    "includedServices": ("included_services", parse_list),
    "isActive": ("is_active", parse_bool),
}

COUPON_FIELDS = {
    "code": ("code", parse_str),
    "description": ("description", parse_str),
    "discountType": ("discount_type", parse_str),
    "discountValue": ("discount_value", parse_decimal),
    "minPurchase": ("min_purchase", parse_decimal),
    "maxUses": ("max_uses", parse_int),
    "validFrom": ("valid_from", parse_date),
    "validUntil": ("valid_until", parse_date),
    "isActive": ("is_active", parse_bool),
}

REVIEW_FIELDS = {
    "clientId": ("client_id", parse_str),
    "barberId": ("barber_id", parse_str),
    "appointmentId": ("appointment_id", parse_str),
    "rating": ("rating", parse_int),
    "comment": ("comment", parse_str),
    "isPublic": ("is_public", parse_bool),
}
