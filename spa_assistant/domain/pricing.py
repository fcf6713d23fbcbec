"""Domain layer: service categories and their fixed prices."""
from decimal import Decimal

FACIAL = "Facial"
MASSAGE = "Massage"
COMBO = "Facial + Massage"

PRICE_TABLE = {
    FACIAL: Decimal("100.00"),
    MASSAGE: Decimal("120.00"),
    COMBO: Decimal("200.00"),
}

# Names staff type in chat
USER_CATEGORIES = ("facial", "massage", "combo")


def calculate_payment(category: str) -> float:
    """Price for a database category name; unknown categories cost 0."""
    return float(PRICE_TABLE.get(category, Decimal("0")))


def translate_category_to_database(category: str) -> str:
    normalized = category.strip().lower()
    if normalized in ("combo", "facial + massage", "facial and massage", "facial & massage"):
        return COMBO
    if normalized == "facial":
        return FACIAL
    if normalized == "massage":
        return MASSAGE
    return category


def translate_category_to_user(category: str) -> str:
    if category == COMBO:
        return "combo"
    if category == FACIAL:
        return "facial"
    if category == MASSAGE:
        return "massage"
    return category
