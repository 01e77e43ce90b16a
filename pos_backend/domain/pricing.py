"""
Order pricing.

Discount is taken off the aggregate subtotal while GST is charged per line on
the undiscounted line amount, at that product's own rate. Nothing is rounded
here; callers round with `round_money` when presenting values.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable

from pos_backend.domain.entities import CustomerTier, PricingBreakdown, PricingLine
from pos_backend.domain.errors import InvalidInput

DISCOUNT_RATES = {
    CustomerTier.MEMBER: Decimal("0.10"),
    CustomerTier.EXISTING: Decimal("0.05"),
    CustomerTier.NONE: Decimal("0"),
}

HUNDRED = Decimal(100)
CENTS = Decimal("0.01")


def to_decimal(value, field_name: str = "value") -> Decimal:
    """Convert ints, strings and floats to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise InvalidInput(f"{field_name} must be a number")
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise InvalidInput(f"{field_name} must be a number") from None
    if not result.is_finite():
        raise InvalidInput(f"{field_name} must be a finite number")
    return result


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def discount_rate(tier: CustomerTier) -> Decimal:
    return DISCOUNT_RATES[tier]


def _validate(lines: list[PricingLine]) -> list[PricingLine]:
    """Checks every line and returns them with price and tax rate as finite Decimals."""
    if not lines:
        raise InvalidInput("At least one item is required")
    checked = []
    for line in lines:
        if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity <= 0:
            raise InvalidInput(f"Quantity for product {line.product_id} must be a positive integer")
        unit_price = to_decimal(line.unit_price, f"Price for product {line.product_id}")
        tax_rate = to_decimal(line.tax_rate, f"Tax rate for product {line.product_id}")
        if unit_price < 0:
            raise InvalidInput(f"Price for product {line.product_id} cannot be negative")
        if not (0 <= tax_rate <= HUNDRED):
            raise InvalidInput(f"Tax rate for product {line.product_id} must be between 0 and 100")
        checked.append(PricingLine(line.product_id, line.quantity, unit_price, tax_rate))
    return checked


def price_order(lines: Iterable[PricingLine], tier: CustomerTier) -> PricingBreakdown:
    lines = _validate(list(lines))

    subtotal = sum((line.unit_price * line.quantity for line in lines), Decimal(0))
    discount = subtotal * discount_rate(tier)
    tax = sum(
        (line.unit_price * line.quantity * line.tax_rate / HUNDRED for line in lines),
        Decimal(0),
    )
    total = (subtotal - discount) + tax

    return PricingBreakdown(subtotal=subtotal, discount=discount, tax=tax, total=total)
