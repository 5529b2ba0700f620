"""Shared validation utilities"""

import re
from typing import Optional

from .notification_types import ALL_NOTIFICATION_TYPES

ICF_LEVELS = {"ACC", "PCC", "MCC", "none"}
USER_ROLES = {"user", "admin", "super_admin"}


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

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


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """Loose international phone check: digits with optional +, spaces, dashes, dots and brackets"""
    if not phone or not phone.strip():
        return None

    phone = phone.strip()
    digits = re.sub(r"\D", "", phone)
    if not re.match(r"^\+?[\d\s\-().]+$", phone) or not 6 <= len(digits) <= 15:
        raise ValueError("Invalid phone number")
    return phone


def validate_country_code(country: Optional[str]) -> Optional[str]:
    if not country:
        return None
    country = country.strip().upper()
    if not re.match(r"^[A-Z]{2}$", country):
        raise ValueError("Country must be a two-letter ISO code")
    return country


def validate_currency_code(currency: Optional[str]) -> Optional[str]:
    if not currency:
        return currency
    currency = currency.strip().upper()
    if not re.match(r"^[A-Z]{3}$", currency):
        raise ValueError("Currency must be a three-letter ISO code")
    return currency


def validate_icf_level(level: Optional[str]) -> Optional[str]:
    if level is None:
        return None
    if level not in ICF_LEVELS:
        raise ValueError(f"ICF level must be one of: {', '.join(sorted(ICF_LEVELS))}")
    return level


def filter_notification_types(types: Optional[list[str]]) -> list[str]:
    """Keep known notification type names, dropping unknown values and duplicates"""
    seen = []
    for name in types or []:
        if name in ALL_NOTIFICATION_TYPES and name not in seen:
            seen.append(name)
    return seen
