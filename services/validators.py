"""
services/validators.py

Input checks for the alert endpoints.

Every function is pure and total: it never raises, and returns a
ValidationResult carrying the first violated rule. Rules are checked in a
fixed order (required fields before optional ones) so identical input always
produces the same message.
"""

import math
import re
from datetime import datetime
from typing import Any, Callable, Dict, NamedTuple, Optional


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
IDENTIFIER_RE = re.compile(r"^[0-9a-f]{24}$")

# Client-owned fields, in validation order
MUTABLE_FIELDS = (
    "email",
    "from",
    "to",
    "budget",
    "start_range",
    "end_range",
    "roundTrip",
    "return_date",
    "price_mode",
    "alert_type",
)


class ValidationResult(NamedTuple):
    valid: bool
    error: Optional[str] = None


OK = ValidationResult(True)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(False, message)


# =====================================================================
# SECTION: PRIMITIVE CHECKS
# =====================================================================

def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_RE.fullmatch(value) is not None


def is_valid_identifier(value: Any) -> bool:
    """24 lowercase hex characters, the store's id format."""
    return isinstance(value, str) and IDENTIFIER_RE.fullmatch(value) is not None


def is_valid_date(value: Any) -> bool:
    """ISO-8601 date or date-time that names a real calendar day."""
    if not isinstance(value, str) or not value.strip():
        return False
    s = value.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        datetime.fromisoformat(s)
    except ValueError:
        return False
    return True


def is_positive_number(value: Any) -> bool:
    # bool is an int subclass, but true/false is never a price
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def is_non_empty_text(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


# =====================================================================
# SECTION: FIELD RULES
# =====================================================================

def _check_email(value: Any) -> bool:
    # Stored trimmed, so surrounding whitespace is tolerated here
    return isinstance(value, str) and is_valid_email(value.strip())


def _check_budget(value: Any) -> bool:
    return value is None or is_positive_number(value)


def _check_round_trip(value: Any) -> bool:
    return isinstance(value, bool)


FIELD_RULES: Dict[str, Callable[[Any], bool]] = {
    "email": _check_email,
    "from": is_non_empty_text,
    "to": is_non_empty_text,
    "budget": _check_budget,
    "start_range": is_valid_date,
    "end_range": is_valid_date,
    "roundTrip": _check_round_trip,
    "return_date": is_valid_date,
    "price_mode": is_non_empty_text,
    "alert_type": is_non_empty_text,
}

REQUIRED_ON_CREATE = ("email", "from", "to")


def _field_error(field: str) -> str:
    if field in REQUIRED_ON_CREATE:
        return f"Invalid or missing {field}"
    return f"Invalid {field}"


def _check_present_fields(data: Dict[str, Any], fields) -> ValidationResult:
    for field in fields:
        if field in data and not FIELD_RULES[field](data[field]):
            return _fail(_field_error(field))
    return OK


# =====================================================================
# SECTION: OPERATION VALIDATORS
# =====================================================================

def validate_alert_creation(data: Any) -> ValidationResult:
    if not isinstance(data, dict):
        return _fail("Request body must be a JSON object")

    for field in REQUIRED_ON_CREATE:
        if not FIELD_RULES[field](data.get(field)):
            return _fail(_field_error(field))

    optional = [f for f in MUTABLE_FIELDS if f not in REQUIRED_ON_CREATE]
    return _check_present_fields(data, optional)


def validate_alert_id(alert_id: Any) -> ValidationResult:
    if not alert_id or not isinstance(alert_id, str):
        return _fail("Invalid or missing id")
    if not is_valid_identifier(alert_id):
        return _fail("Invalid ObjectId format")
    return OK


def validate_alert_update(data: Any) -> ValidationResult:
    """Price update: id + positive price, nothing else is read."""
    if not isinstance(data, dict):
        return _fail("Request body must be a JSON object")

    result = validate_alert_id(data.get("id"))
    if not result.valid:
        return result

    if not is_positive_number(data.get("price")):
        return _fail("Invalid price")

    return OK


def validate_alert_edit(data: Any) -> ValidationResult:
    if not isinstance(data, dict):
        return _fail("Request body must be a JSON object")

    result = validate_alert_id(data.get("id"))
    if not result.valid:
        return result

    if not any(field in data for field in MUTABLE_FIELDS):
        return _fail("At least one field must be provided for update")

    return _check_present_fields(data, MUTABLE_FIELDS)


def validate_email_query(email: Any) -> ValidationResult:
    if not email or not isinstance(email, str):
        return _fail("Invalid or missing email")
    if not is_valid_email(email.strip()):
        return _fail("Invalid email format")
    return OK
