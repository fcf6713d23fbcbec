"""Domain layer: validators for values typed into the chat."""
import re
from typing import Optional, Tuple

NO_TIP_WORDS = {"none", "zero", "nada", "no tip", "no", "0"}

_CLIENT_NAME_RE = re.compile(r"^[a-zA-Z0-9\-'\s]+$")
_TIME_RE = re.compile(
    r"^\d{1,2}(?::\d{2})?\s*(?:a\.?m\.?|p\.?m\.?)$|^\d{1,2}(?::?\d{2})?\s*hours?$",
    re.IGNORECASE,
)
_DATE_RE = re.compile(r"^[a-zA-Z]+\s+\d+(?:st|nd|rd|th)?$")


def validate_client_name(name: Optional[str]) -> bool:
    return bool(name and name.strip() and _CLIENT_NAME_RE.match(name.strip()))


def validate_time_format(time_str: Optional[str]) -> bool:
    return bool(time_str and _TIME_RE.match(time_str.strip()))


def validate_date_format(date_str: Optional[str]) -> bool:
    return bool(date_str and _DATE_RE.match(date_str.strip()))


def validate_tip_amount(raw: str) -> Tuple[Optional[float], Optional[str]]:
    """Return (tip, None) for an acceptable tip or (None, error message).

    The chat path has no upper bound; the UI forms cap tips separately.
    """
    text = raw.strip().lower()
    if text in NO_TIP_WORDS:
        return 0.0, None
    cleaned = text.replace("$", "").replace(",", "").strip()
    try:
        amount = float(cleaned)
    except ValueError:
        return None, 'Please enter a valid tip amount (e.g., $25, 25, or "none")'
    if amount != amount or amount in (float("inf"), float("-inf")):
        return None, 'Please enter a valid tip amount (e.g., $25, 25, or "none")'
    if amount < 0:
        return None, "Tip cannot be negative"
    return round(amount, 2), None


def parse_dollar_amount(raw: Optional[str]) -> Optional[float]:
    """'$45.50' / '45' / '1,200' -> float; None when the text is not a positive amount."""
    if not raw:
        return None
    cleaned = raw.strip().rstrip(".").replace(",", "")
    match = re.match(r"^\$?\s*(\d+(?:\.\d{1,2})?)(?:\s*dollars?)?$", cleaned, re.IGNORECASE)
    if not match:
        return None
    amount = float(match.group(1))
    return amount if amount > 0 else None
