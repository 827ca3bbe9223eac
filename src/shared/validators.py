"""Validation utilities and taxonomies for the canteen ledger."""

from typing import Any, List, Optional


EXPENSE = "expense"
INCOME = "income"

VALID_DIRECTIONS = [EXPENSE, INCOME]

# Expense categories (also seeded into the categories table with colors)
EXPENSE_CATEGORIES = [
    "İşçi",
    "Kasap",
    "Toptancı",
    "Nakliye",
    "Yemekhane Kurulum",
    "Fırın",
    "Market",
    "Sebze-Meyve",
    "Kira",
    "Fatura",
    "Diğer"
]

# Income categories are fixed in code, not stored
INCOME_CATEGORIES = [
    "Satış Geliri",
    "Hizmet Geliri",
    "Kira Geliri",
    "Faiz Geliri",
    "İade",
    "Diğer Gelir"
]

DEFAULT_EXPENSE_CATEGORY = "Diğer"
DEFAULT_INCOME_CATEGORY = "Diğer Gelir"

PDF_MIME_TYPE = "application/pdf"

# receipt_type -> MIME type used when serving stored receipts
RECEIPT_MIME_TYPES = {
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp"
}


def categories_for(direction: str) -> List[str]:
    """Return the taxonomy for a transaction direction."""
    return INCOME_CATEGORIES if direction == INCOME else EXPENSE_CATEGORIES


def default_category_for(direction: str) -> str:
    """Return the catch-all category for a transaction direction."""
    return DEFAULT_INCOME_CATEGORY if direction == INCOME else DEFAULT_EXPENSE_CATEGORY


def validate_direction(direction: Any) -> Optional[str]:
    """
    Validate a transaction direction.

    Args:
        direction: Raw direction value

    Returns:
        "income" or "expense", or None when the value is not recognised
    """
    if not isinstance(direction, str):
        return None

    direction = direction.strip().lower()
    if direction in VALID_DIRECTIONS:
        return direction
    return None


def validate_category(category: Any, direction: str) -> str:
    """
    Coerce a category into the taxonomy of its direction.

    Args:
        category: Suggested category
        direction: Resolved transaction direction

    Returns:
        The category if it belongs to the taxonomy, else the catch-all
    """
    if isinstance(category, str):
        category = category.strip()
        if category in categories_for(direction):
            return category
    return default_category_for(direction)


def is_supported_mime_type(mime_type: Optional[str]) -> bool:
    """Only images and PDFs are accepted as receipts."""
    if not mime_type:
        return False
    mime_type = mime_type.lower()
    return mime_type.startswith("image/") or mime_type == PDF_MIME_TYPE


def extension_for_mime_type(mime_type: str) -> str:
    """
    Derive the receipt_type (file extension) from a MIME type.

    Args:
        mime_type: Supported MIME type

    Returns:
        "pdf" for PDFs, the image subtype otherwise ("jpg" when unknown)
    """
    mime_type = mime_type.lower()
    if mime_type == PDF_MIME_TYPE:
        return "pdf"
    subtype = mime_type.split("/", 1)[1] if "/" in mime_type else ""
    if subtype == "jpeg":
        return "jpg"
    return subtype or "jpg"


def mime_type_for_receipt(receipt_type: Optional[str]) -> str:
    """Resolve the MIME type to serve a stored receipt with."""
    if not receipt_type:
        return "application/octet-stream"
    return RECEIPT_MIME_TYPES.get(receipt_type.lower(), "application/octet-stream")


def sanitize_string(value: Any, max_length: Optional[int] = None) -> Optional[str]:
    """
    Normalize a loosely-typed text value.

    Args:
        value: Value to sanitize (numbers are converted to text)
        max_length: Optional maximum length, longer values are truncated

    Returns:
        Stripped string, or None when empty or not representable as text
    """
    if value is None or isinstance(value, (bool, dict, list)):
        return None

    value = " ".join(str(value).split())
    if not value or value.lower() in ("null", "none"):
        return None

    if max_length and len(value) > max_length:
        value = value[:max_length]

    return value
