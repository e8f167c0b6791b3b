"""Decimal arithmetic utilities for order amounts and prices.

Amounts, prices and totals are Decimal end to end (NUMERIC in PostgreSQL).
Never float: pydantic renders Decimal as a JSON string on the wire.
"""

from decimal import ROUND_HALF_UP, Context, Decimal

# amount / price are NUMERIC(28, 8); totals and limits are NUMERIC(38, 8)
SCALE = Decimal("0.00000001")
MAX_PRICE_OR_AMOUNT = Decimal(10) ** 20
MAX_TOTAL = Decimal(10) ** 30

# Wide enough for the exact product of two NUMERIC(28, 8) values
_CONTEXT = Context(prec=60, rounding=ROUND_HALF_UP)


def quantize(value: Decimal) -> Decimal:
    return value.quantize(SCALE, rounding=ROUND_HALF_UP, context=_CONTEXT)


def fits_scale(value: Decimal) -> bool:
    """True when storing the value drops no digits."""
    return value.is_finite() and quantize(value) == value


def total_amount(amount: Decimal, price: Decimal) -> Decimal:
    """Fiat total of a trade: amount × unit price, rounded to storage scale."""
    return quantize(_CONTEXT.multiply(amount, price))
