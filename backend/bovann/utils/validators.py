import math
import re
from datetime import datetime, date, time

from bovann.models import StudyLevelEnum, DomainEnum, InfoChannelEnum, RoleEnum

PHONE_RE = re.compile(r'^\+?[1-9]\d{0,14}$')
EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
DATE_ONLY_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
CURRENCY_RE = re.compile(r'^[A-Z]{3}$')


def parse_iso_datetime(value, end_of_day=False):
    """
    Parse an ISO 8601 string into a naive datetime in server local time.

    Aware values are converted to local time. A bare date is read as midnight,
    or as the last microsecond of that day when ``end_of_day`` is set.
    Raises ValueError on anything else.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.max if end_of_day else time.min)
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if DATE_ONLY_RE.match(raw):
            day = date.fromisoformat(raw)
            return datetime.combine(day, time.max if end_of_day else time.min)
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        parsed = datetime.fromisoformat(raw)
    else:
        raise ValueError(f"Invalid ISO 8601 value: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_payment_data(data):
    """Return (cleaned, error_message) for a payment creation body."""
    student_id = data.get("studentId")
    if not student_id or not isinstance(student_id, str):
        return None, "Valid student ID required"

    amount = data.get("amount")
    if isinstance(amount, str):
        try:
            amount = float(amount)
        except ValueError:
            amount = None
    if not _is_number(amount) or not math.isfinite(amount) or amount < 0:
        return None, "Amount must be positive"

    try:
        valid_from = parse_iso_datetime(data.get("validFrom"))
    except ValueError:
        return None, "ValidFrom must be ISO date"
    try:
        valid_until = parse_iso_datetime(data.get("validUntil"), end_of_day=True)
    except ValueError:
        return None, "ValidUntil must be ISO date"

    if valid_until < valid_from:
        return None, "ValidUntil must not be before ValidFrom"

    currency = str(data.get("currency") or "").strip().upper()
    if currency and not CURRENCY_RE.match(currency):
        return None, "Currency must be a 3-letter code"

    return {
        "student_id": student_id,
        "amount": float(amount),
        "currency": currency or None,
        "reference": data.get("reference") or None,
        "details": data.get("details") or None,
        "valid_from": valid_from,
        "valid_until": valid_until,
    }, None


STUDENT_REQUIRED_TEXT = {
    "lastName": "Nom obligatoire",
    "firstName": "Prénom obligatoire",
    "institution": "Établissement obligatoire",
    "profession": "Profession obligatoire",
}

STUDENT_ENUM_FIELDS = {
    "studyLevel": (StudyLevelEnum, "Niveau d'étude invalide"),
    "domain": (DomainEnum, "Domaine de formation invalide"),
    "infoChannel": (InfoChannelEnum, "Canal d'information invalide"),
}


def validate_student_data(data, partial=False):
    """
    Validate a student body. With ``partial`` only the supplied fields are
    checked, for updates. Returns (cleaned, error_message).
    """
    cleaned = {}

    for field, message in STUDENT_REQUIRED_TEXT.items():
        if partial and field not in data:
            continue
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            return None, message
        cleaned[field] = value.strip()

    for field, (enum_class, message) in STUDENT_ENUM_FIELDS.items():
        if partial and field not in data:
            continue
        try:
            cleaned[field] = enum_class(data.get(field))
        except ValueError:
            return None, message

    if not partial or "phone" in data:
        phone = str(data.get("phone") or "").strip()
        if not PHONE_RE.match(phone):
            return None, "Numéro de téléphone invalide"
        cleaned["phone"] = phone

    if not partial or "email" in data:
        email = str(data.get("email") or "").strip().lower()
        if not EMAIL_RE.match(email):
            return None, "Email invalide"
        cleaned["email"] = email

    if "photo" in data:
        cleaned["photo"] = data.get("photo") or None

    return cleaned, None


def validate_user_data(data, partial=False):
    cleaned = {}

    if not partial or "email" in data:
        email = str(data.get("email") or "").strip().lower()
        if not EMAIL_RE.match(email):
            return None, "Valid email required"
        cleaned["email"] = email

    if not partial or "password" in data:
        password = data.get("password") or ""
        if len(password) < 6:
            return None, "Password must be at least 6 characters"
        cleaned["password"] = password

    if not partial or "role" in data:
        try:
            cleaned["role"] = RoleEnum(data.get("role")).value
        except ValueError:
            return None, "Invalid role"

    if "isActive" in data:
        cleaned["is_active"] = bool(data.get("isActive"))

    return cleaned, None
