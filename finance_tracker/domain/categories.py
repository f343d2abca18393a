"""Category icon registry"""

from enum import Enum
from typing import Optional


class CategoryIcon(str, Enum):
    TAG = "tag"
    HOME = "home"
    CAR = "car"
    SHOPPING_CART = "shopping-cart"
    UTENSILS = "utensils"
    SHIRT = "shirt"
    BRIEFCASE = "briefcase"
    HEART = "heart"
    GAMEPAD = "gamepad"
    PLANE = "plane"
    FUEL = "fuel"
    STETHOSCOPE = "stethoscope"
    BOOK = "book"
    COFFEE = "coffee"
    GIFT = "gift"
    PHONE = "phone"
    LAPTOP = "laptop"
    DUMBBELL = "dumbbell"
    MUSIC = "music"
    DOLLAR_SIGN = "dollar-sign"
    PIGGY_BANK = "piggy-bank"
    TRENDING_UP = "trending-up"
    CREDIT_CARD = "credit-card"
    COINS = "coins"
    BANKNOTE = "banknote"


FALLBACK_ICON = CategoryIcon.TAG

DEFAULT_CATEGORY_COLOR = "#61710C"


def resolve_icon(name: Optional[str]) -> CategoryIcon:
    """Icon for a stored name; unknown or empty names get the fallback tag icon"""
    if not name:
        return FALLBACK_ICON
    try:
        return CategoryIcon(name.strip().lower())
    except ValueError:
        return FALLBACK_ICON
