"""Shared validation utilities"""

import math
import re
from typing import Optional

SERVICE_CATEGORIES = {
    "cleaning": "Cleaning",
    "plumbing": "Plumbing",
    "electrical": "Electrical",
    "gardening": "Gardening",
    "fitness": "Fitness",
    "beauty": "Beauty & Spa",
    "other": "Other",
}


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_us_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize US phone number to E.164 format.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    # Handle +1 prefix
    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]

    if len(digits) != 10:
        raise ValueError("Phone number must be 10 digits for US numbers")

    return f"+1{digits}"


def validate_required_text(value: Optional[str], field: str, max_length: int = 255) -> str:
    """Strip a required free-text field and enforce its length"""
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{field} is required")
    if len(value) > max_length:
        raise ValueError(f"{field} exceeds maximum length of {max_length} characters")
    return value


def validate_category(category: str) -> str:
    category = (category or "").strip().lower()
    if category not in SERVICE_CATEGORIES:
        raise ValueError(f"Unknown category. Allowed: {', '.join(SERVICE_CATEGORIES)}")
    return category


def validate_price(price: Optional[float]) -> Optional[float]:
    if price is None:
        return price
    if not math.isfinite(price):
        raise ValueError("Price must be a finite number")
    if price < 0:
        raise ValueError("Price cannot be negative")
    return price


def contains_pattern(search: str) -> str:
    """LIKE pattern matching ``search`` anywhere, with wildcards taken literally (escape char ``\\``)"""
    escaped = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
