# =============================================================================
# core/validation/rules.py - Field Validation Rules
# =============================================================================
# One pure function per field kind. Every rule takes a single candidate
# value (possibly None) and returns a list of problem strings; an empty list
# means the value is acceptable. Rules never raise.
#
# Required rules report a missing value (None, "" or whitespace) as exactly
# one problem and stop there. Optional rules accept a missing value.
#
# Normalisers at the bottom turn an accepted value into the form that is
# stored (trimmed text, lowercase email, Decimal price).
# =============================================================================

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from core.models.account import AccountRole
from core.models.article import ArticleStatus

# -----------------------------------------------------------------------------
# Limits
# -----------------------------------------------------------------------------

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 254
PASSWORD_MIN_LENGTH = 8
PHONE_MIN_LENGTH = 7
PHONE_MAX_LENGTH = 20
ADDRESS_MAX_LENGTH = 255
CATEGORY_NAME_MAX_LENGTH = 100
PRODUCT_NAME_MAX_LENGTH = 150
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000
AUTHOR_MAX_LENGTH = 100
CATEGORY_TAG_MAX_LENGTH = 100
IMAGE_URL_MAX_LENGTH = 2048

# Matches numeric(12, 2) in the schema
PRICE_MAX = Decimal("9999999999.99")
PRICE_DECIMAL_PLACES = 2

_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s.]+$")
_PHONE_PATTERN = re.compile(r"^\+?[0-9 ()-]+$")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)

STATUS_VALUES = [status.value for status in ArticleStatus]
ROLE_VALUES = [role.value for role in AccountRole]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _text(value: Any, label: str, *, required: bool, max_length: int | None = None) -> list[str]:
    """Shared rule for plain text fields."""
    if _is_blank(value):
        return [f"{label} is required."] if required else []
    if not isinstance(value, str):
        return [f"{label} must be text."]
    if max_length is not None and len(value.strip()) > max_length:
        return [f"{label} must be at most {max_length} characters."]
    return []


# =============================================================================
# Account Rules
# =============================================================================

def validate_username(value: Any) -> list[str]:
    """
    Identity name: 3-50 characters of letters, digits, '.', '_' or '-'.

    Reports one problem per violated constraint.
    """
    if _is_blank(value):
        return ["Username is required."]
    if not isinstance(value, str):
        return ["Username must be text."]

    username = value.strip()
    problems = []
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        problems.append(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters."
        )
    if not _USERNAME_PATTERN.match(username):
        problems.append("Username may only contain letters, digits, '.', '_' and '-'.")
    return problems


def validate_email(value: Any) -> list[str]:
    """Email: local@domain.tld. A malformed value yields exactly one problem."""
    if _is_blank(value):
        return ["Email is required."]
    if (
        not isinstance(value, str)
        or len(value.strip()) > EMAIL_MAX_LENGTH
        or not _EMAIL_PATTERN.match(value.strip())
    ):
        return ["Email must be a valid email address."]
    return []


def validate_password(value: Any) -> list[str]:
    """
    Password strength: minimum length plus at least one letter and one digit.

    Each unmet criterion is its own problem so the caller sees the full list.
    """
    if _is_blank(value):
        return ["Password is required."]
    if not isinstance(value, str):
        return ["Password must be text."]

    problems = []
    if len(value) < PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long.")
    if not any(char.isalpha() for char in value):
        problems.append("Password must contain at least one letter.")
    if not any(char.isdigit() for char in value):
        problems.append("Password must contain at least one digit.")
    return problems


def validate_phone(value: Any) -> list[str]:
    """Optional phone number."""
    if _is_blank(value):
        return []
    if not isinstance(value, str):
        return ["Phone must be text."]

    phone = value.strip()
    problems = []
    if not PHONE_MIN_LENGTH <= len(phone) <= PHONE_MAX_LENGTH:
        problems.append(
            f"Phone must be between {PHONE_MIN_LENGTH} and {PHONE_MAX_LENGTH} characters."
        )
    if not _PHONE_PATTERN.match(phone):
        problems.append("Phone may only contain digits, spaces, '-', '(', ')' and a leading '+'.")
    return problems


def validate_address(value: Any) -> list[str]:
    """Optional free-text postal address."""
    problems = _text(value, "Address", required=False, max_length=ADDRESS_MAX_LENGTH)
    if not problems and isinstance(value, str) and _CONTROL_CHARS.search(value):
        problems.append("Address must not contain control characters.")
    return problems


def validate_role(value: Any) -> list[str]:
    if _is_blank(value):
        return ["Role is required."]
    if value not in ROLE_VALUES:
        return [f"Role must be one of: {', '.join(ROLE_VALUES)} (got '{value}')."]
    return []


# =============================================================================
# Catalog Rules
# =============================================================================

def validate_category_name(value: Any) -> list[str]:
    return _text(value, "Name", required=True, max_length=CATEGORY_NAME_MAX_LENGTH)


def validate_product_name(value: Any) -> list[str]:
    return _text(value, "Name", required=True, max_length=PRODUCT_NAME_MAX_LENGTH)


def validate_price(value: Any) -> list[str]:
    """
    Monetary price: a finite, non-negative number with at most two decimals.

    Accepts ints, floats and numeric strings. Problems name the offending value.
    """
    if _is_blank(value):
        return ["Price is required."]

    price = _parse_decimal(value)
    if price is None:
        return [f"Price must be a number (got '{value}')."]
    if price < 0:
        return [f"Price must not be negative (got {value})."]
    if price > PRICE_MAX:
        return [f"Price must not exceed {PRICE_MAX} (got {value})."]
    if -price.as_tuple().exponent > PRICE_DECIMAL_PLACES:
        return [f"Price must have at most {PRICE_DECIMAL_PLACES} decimal places (got {value})."]
    return []


def validate_description(value: Any) -> list[str]:
    return _text(value, "Description", required=False, max_length=DESCRIPTION_MAX_LENGTH)


def validate_category_tag(value: Any) -> list[str]:
    return _text(value, "Category", required=False, max_length=CATEGORY_TAG_MAX_LENGTH)


def validate_image_url(value: Any) -> list[str]:
    problems = _text(value, "Image URL", required=False, max_length=IMAGE_URL_MAX_LENGTH)
    if not problems and isinstance(value, str) and value.strip():
        if not _URL_PATTERN.match(value.strip()):
            problems.append("Image URL must be an http(s) URL.")
    return problems


# =============================================================================
# Article Rules
# =============================================================================

def validate_title(value: Any) -> list[str]:
    return _text(value, "Title", required=True, max_length=TITLE_MAX_LENGTH)


def validate_body(value: Any) -> list[str]:
    return _text(value, "Body", required=True)


def validate_author(value: Any) -> list[str]:
    return _text(value, "Author", required=False, max_length=AUTHOR_MAX_LENGTH)


def validate_status(value: Any) -> list[str]:
    """Article status must be one of draft, published, archived."""
    if _is_blank(value):
        return ["Status is required."]
    if value not in STATUS_VALUES:
        return [f"Status must be one of: {', '.join(STATUS_VALUES)} (got '{value}')."]
    return []


# =============================================================================
# Identifiers
# =============================================================================

MAX_IDENTIFIER = 2**63 - 1


def parse_identifier(value: Any) -> int | None:
    """
    Parse a path identifier as a positive integer.

    Keys are BIGSERIAL columns, so anything above MAX_IDENTIFIER is rejected
    before it reaches the store.

    Returns:
        The integer, or None if the value is not a positive integer in range
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 < value <= MAX_IDENTIFIER else None
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            number = int(text)
            return number if 0 < number <= MAX_IDENTIFIER else None
    return None


def validate_identifier(value: Any, label: str = "Id") -> list[str]:
    if parse_identifier(value) is None:
        return [f"{label} must be a positive integer (got '{value}')."]
    return []


# =============================================================================
# Normalisers
# =============================================================================

def _parse_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def normalize_text(value: Any) -> Any:
    """Trim text; an all-whitespace value becomes None."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def normalize_email(value: Any) -> Any:
    value = normalize_text(value)
    return value.lower() if isinstance(value, str) else value


def normalize_price(value: Any) -> Decimal | None:
    return _parse_decimal(value)
