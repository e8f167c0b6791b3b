"""Order field validation, shared by create and edit.

Raises InvalidOrderError (kind=validation) on the first violated rule.
"""
from decimal import Decimal

from config.settings import settings
from src.p2p_common.enums import PaymentMethod
from src.p2p_common.errors import InvalidOrderError
from src.p2p_common.money import MAX_PRICE_OR_AMOUNT, MAX_TOTAL, fits_scale, total_amount


def _check_storable(name: str, value: Decimal, bound: Decimal) -> None:
    if not value.is_finite():
        raise InvalidOrderError(f"{name} must be a finite number")
    if abs(value) >= bound:
        raise InvalidOrderError(f"{name} must be below {bound:.0E}")
    if not fits_scale(value):
        raise InvalidOrderError(f"{name} allows at most 8 decimal places")


def validate_amount_and_price(amount: Decimal, price: Decimal) -> None:
    _check_storable("amount", amount, MAX_PRICE_OR_AMOUNT)
    _check_storable("price", price, MAX_PRICE_OR_AMOUNT)
    if amount <= 0:
        raise InvalidOrderError("amount must be positive")
    if price <= 0:
        raise InvalidOrderError("price must be positive")
    total = total_amount(amount, price)
    if total <= 0:
        raise InvalidOrderError("amount × price rounds to zero")
    if total >= MAX_TOTAL:
        raise InvalidOrderError(f"amount × price must be below {MAX_TOTAL:.0E}")


def validate_payment_methods(methods: list[PaymentMethod]) -> list[PaymentMethod]:
    """Return the de-duplicated method list, preserving first-seen order."""
    if not methods:
        raise InvalidOrderError("at least one payment method is required")
    return list(dict.fromkeys(methods))


def validate_description(description: str | None) -> str | None:
    if description is None:
        return None
    description = description.strip()
    if len(description) > settings.ORDER_DESCRIPTION_MAX_LENGTH:
        raise InvalidOrderError(
            f"description exceeds {settings.ORDER_DESCRIPTION_MAX_LENGTH} characters"
        )
    return description or None


def validate_limits(
    min_amount: Decimal | None, max_amount: Decimal | None, total: Decimal
) -> None:
    if min_amount is not None:
        _check_storable("min_amount", min_amount, MAX_TOTAL)
    if max_amount is not None:
        _check_storable("max_amount", max_amount, MAX_TOTAL)
    if min_amount is not None and min_amount < 0:
        raise InvalidOrderError("min_amount must not be negative")
    if max_amount is not None and max_amount <= 0:
        raise InvalidOrderError("max_amount must be positive")
    low = min_amount if min_amount is not None else total
    high = max_amount if max_amount is not None else total
    if high < low:
        raise InvalidOrderError("max_amount must not be less than min_amount")
