"""
Locale-aware number parsing and formatting.

Coaches type amounts and hours in their own country's format: "1.234,56" in
most of Europe, "1,234.56" elsewhere. The profile's country decides which.
"""

import re
from typing import Optional

# Countries that write a comma as the decimal separator
EU_COUNTRIES = {
    "DE", "FR", "ES", "IT", "NL", "BE", "AT", "FI", "PT", "GR", "IE", "LU", "MT", "CY",
    "SK", "SI", "EE", "LV", "LT", "PL", "CZ", "HU", "RO", "BG", "HR", "SE", "DK", "NO",
    "IS", "CH", "LI", "AD", "MC", "SM", "VA",
}

COUNTRY_LOCALES = {
    "US": "en-US", "GB": "en-GB", "CA": "en-CA", "AU": "en-AU", "NZ": "en-NZ",
    "IE": "en-IE", "ZA": "en-ZA", "IN": "en-IN", "SG": "en-SG",
    "DE": "de-DE", "AT": "de-AT", "CH": "de-CH", "LI": "de-LI",
    "FR": "fr-FR", "BE": "fr-BE", "LU": "fr-LU", "MC": "fr-MC",
    "ES": "es-ES", "AD": "ca-AD", "IT": "it-IT", "SM": "it-SM", "VA": "it-VA",
    "NL": "nl-NL", "PT": "pt-PT", "FI": "fi-FI", "SE": "sv-SE", "DK": "da-DK",
    "NO": "nb-NO", "IS": "is-IS", "PL": "pl-PL", "CZ": "cs-CZ", "SK": "sk-SK",
    "HU": "hu-HU", "RO": "ro-RO", "BG": "bg-BG", "HR": "hr-HR", "SI": "sl-SI",
    "EE": "et-EE", "LV": "lv-LV", "LT": "lt-LT", "GR": "el-GR", "CY": "el-CY",
    "MT": "mt-MT", "JP": "ja-JP", "CN": "zh-CN", "KR": "ko-KR", "BR": "pt-BR",
    "MX": "es-MX", "AR": "es-AR",
}

# (group separator, decimal separator) for locales that differ from "," and "."
LOCALE_SEPARATORS = {
    "de": (".", ","), "es": (".", ","), "it": (".", ","), "nl": (".", ","),
    "pt": (".", ","), "da": (".", ","), "el": (".", ","), "hr": (".", ","),
    "sl": (".", ","), "ro": (".", ","), "is": (".", ","), "ca": (".", ","),
    "fr": (" ", ","), "fi": (" ", ","), "sv": (" ", ","),
    "nb": (" ", ","), "pl": (" ", ","), "cs": (" ", ","),
    "sk": (" ", ","), "hu": (" ", ","), "bg": (" ", ","),
    "et": (" ", ","), "lv": (" ", ","), "lt": (" ", ","),
    "de-CH": ("’", "."), "de-LI": ("’", "."),
}

CURRENCY_SYMBOLS = "$€£¥₹₽₩₪₦₨₫₴₸₺₼₾₿"
CURRENCY_PATTERN = re.compile(f"^([{CURRENCY_SYMBOLS}])|([{CURRENCY_SYMBOLS}])$")

MAX_ABS_VALUE = 999_999_999
VALID_NUMBER = re.compile(r"^-?\d*\.?\d*$")
REDUNDANT_SEPARATORS = re.compile(r"[.,](?=.*[.,])")


def uses_decimal_comma(country: Optional[str]) -> bool:
    return bool(country) and country.upper() in EU_COUNTRIES


def parse_number_from_locale(
    value: Optional[str], country: Optional[str] = None
) -> tuple[Optional[float], Optional[str]]:
    """
    Parse a number typed in the country's format.

    Every separator except the last is treated as a thousands separator;
    the last one is the decimal separator for decimal-comma countries and
    for "." elsewhere.

    Returns:
        (value, error). Both are None for blank input.
    """
    if value is None:
        return None, None

    cleaned = re.sub(r"[\s ]", "", str(value))
    if not cleaned:
        return None, None

    cleaned = REDUNDANT_SEPARATORS.sub("", cleaned)
    if cleaned in ("-", "+", "."):
        return None, "Incomplete number"

    cleaned = cleaned.strip(".")
    if uses_decimal_comma(country):
        cleaned = cleaned.replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")

    if not cleaned or not VALID_NUMBER.match(cleaned):
        return None, "Invalid number format"

    try:
        number = float(cleaned)
    except ValueError:
        return None, "Invalid number format"

    if abs(number) > MAX_ABS_VALUE:
        return None, "Number too large"

    return number, None


def get_locale_for_country(country: Optional[str]) -> str:
    return COUNTRY_LOCALES.get((country or "").upper(), "en-US")


def _separators(locale: str) -> tuple[str, str]:
    return LOCALE_SEPARATORS.get(locale) or LOCALE_SEPARATORS.get(locale.split("-")[0], (",", "."))


def format_number_for_display(
    value: Optional[float],
    country: Optional[str] = None,
    currency: Optional[str] = None,
    style: str = "decimal",
    minimum_fraction_digits: int = 2,
    maximum_fraction_digits: int = 2,
) -> str:
    """
    Format a number with the country's separators.

    style="currency" prefixes (or, for decimal-comma locales, suffixes) the
    currency code.
    """
    if value is None:
        return ""

    group_sep, decimal_sep = _separators(get_locale_for_country(country))

    rounded = round(float(value), maximum_fraction_digits)
    text = f"{abs(rounded):,.{maximum_fraction_digits}f}"
    integer_part, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) < minimum_fraction_digits:
        fraction = fraction.ljust(minimum_fraction_digits, "0")

    formatted = integer_part.replace(",", group_sep)
    if fraction:
        formatted = f"{formatted}{decimal_sep}{fraction}"
    if rounded < 0:
        formatted = f"-{formatted}"

    if style == "currency" and currency:
        if decimal_sep == ",":
            return f"{formatted} {currency.upper()}"
        return f"{currency.upper()} {formatted}"
    return formatted


def get_number_input_placeholder(country: Optional[str] = None) -> str:
    return "1.234,56" if uses_decimal_comma(country) else "1,234.56"


def is_valid_number_input(value: Optional[str], country: Optional[str] = None) -> bool:
    if value is None or not str(value).strip():
        return True
    _, error = parse_number_from_locale(value, country)
    return error is None


def extract_currency_from_string(value: str) -> tuple[Optional[str], str]:
    """Split a leading or trailing currency symbol off the input"""
    value = (value or "").strip()
    match = CURRENCY_PATTERN.search(value)
    if not match:
        return None, value
    symbol = match.group(1) or match.group(2)
    if match.group(1):
        return symbol, value[1:].strip()
    return symbol, value[:-1].strip()


def parse_number_with_currency(
    value: Optional[str], country: Optional[str] = None
) -> tuple[Optional[float], Optional[str], Optional[str]]:
    """Returns (value, currency_symbol, error)"""
    symbol, rest = extract_currency_from_string(value or "")
    number, error = parse_number_from_locale(rest, country)
    return number, symbol, error
