"""
Centralized pricing calculations.

Two rounding policies exist and they are applied at different moments:
- round_to_thousand is applied when prices are written (price records, external
  catalog feeds). Peso prices end in 000.
- round_price (2 decimals) is the display rounding applied on every read. It
  never re-rounds a stored value to the thousand.
"""

from decimal import Decimal, ROUND_HALF_UP

from catalog.core.enums import PromotionType

_CENTS = Decimal("0.01")
_UNITS = Decimal("1")


def _to_decimal(value) -> Decimal:
    # str() keeps the shortest repr, so 10.005 stays 10.005 and not 10.00499...
    return Decimal(str(value))


def round_price(value) -> float:
    """
    Round to 2 decimals, half away from zero.

    Examples:
        10.005 -> 10.01
        12000 -> 12000.0
        None -> 0.0
    """
    if value is None:
        return 0.0
    return float(_to_decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))


def round_to_thousand(value) -> int:
    """
    Round a price to the nearest thousand.

    Examples:
        12499 -> 12000
        12500 -> 13000
        499 -> 0
    """
    if not value:
        return 0
    thousands = (_to_decimal(value) / 1000).quantize(_UNITS, rounding=ROUND_HALF_UP)
    return int(thousands) * 1000


def format_cop(value) -> str:
    """
    Format a price in Colombian pesos, no decimals, dot thousands separator.

    Examples:
        1234000 -> "$ 1.234.000"
    """
    amount = int(_to_decimal(value or 0).quantize(_UNITS, rounding=ROUND_HALF_UP))
    sign = "-" if amount < 0 else ""
    return f"{sign}$ {abs(amount):,}".replace(",", ".")


def calculate_discounted_price(
    current_price: float,
    discount: float,
    promotion_type: str,
) -> int:
    """
    Calculate the sale price for a promotion.

    Args:
        current_price: The current (already thousand-rounded) price
        discount: Percentage for PERCENTAGE promotions, amount for FIXED ones
        promotion_type: 'PERCENTAGE' or 'FIXED'

    Returns:
        Discounted price rounded to the nearest thousand, never below 0
    """
    if not current_price or current_price <= 0:
        return 0

    if str(promotion_type).upper() == PromotionType.PERCENTAGE.value:
        discount_amount = current_price * discount / 100
    else:
        discount_amount = discount

    return max(0, round_to_thousand(current_price - discount_amount))


def apply_write_rounding(price: float, round_to_thousands: bool = True) -> float:
    """Rounding applied to a price before it is persisted."""
    if round_to_thousands:
        return float(round_to_thousand(price))
    return round_price(price)
