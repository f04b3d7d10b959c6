"""
Business rules for bulk price edits.
"""

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field

from ..catalog.filters import parse_price  # noqa: F401


CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Largest percent or amount a rule may carry; keeps results inside the
# default Decimal precision when quantized to cents.
MAX_MAGNITUDE = Decimal("1000000")


class EditMode(str, Enum):
    """How the magnitude of a rule is applied."""
    PERCENT = "percent"
    AMOUNT = "amount"


class EditDirection(str, Enum):
    """Whether a rule raises or lowers prices."""
    INCREASE = "increase"
    DECREASE = "decrease"


class EditRule(BaseModel):
    """A single price transformation applied to every selected product."""
    mode: EditMode
    direction: EditDirection
    magnitude: Decimal = Field(..., ge=0, le=MAX_MAGNITUDE)


def compute_new_price(price: Decimal, rule: EditRule) -> Decimal:
    """
    Calculate the new price for a product under an edit rule.

    Rules:
    1. percent: delta = price × magnitude / 100
    2. amount: delta = magnitude
    3. increase adds the delta, decrease subtracts it
    4. The result never goes below zero

    Rounding is half-up to cents, applied once on the final value.

    Args:
        price: Current price (non-negative)
        rule: Edit rule to apply

    Returns:
        New price quantized to two decimal places
    """
    if rule.mode == EditMode.PERCENT:
        delta = price * rule.magnitude / HUNDRED
    else:
        delta = rule.magnitude

    if rule.direction == EditDirection.INCREASE:
        new_price = price + delta
    else:
        new_price = price - delta

    new_price = max(new_price, ZERO)
    return new_price.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_price(value: Union[Decimal, str]) -> str:
    """
    Format a price to the two decimal string the Admin API expects.

    Args:
        value: Price as Decimal or string

    Returns:
        Formatted price (e.g., "21.99")
    """
    return str(Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP))
