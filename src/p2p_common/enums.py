"""Global enums: must match DB CHECK constraints exactly.

Values are the lowercase wire strings used by the web client.
"""

from enum import Enum


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    ACTIVE = "active"
    HAS_RESPONSES = "has_responses"
    IN_DEAL = "in_deal"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class ResponseStatus(str, Enum):
    WAITING = "waiting"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class DealStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    WAITING_PAYMENT = "waiting_payment"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class CryptoCurrency(str, Enum):
    BTC = "BTC"
    ETH = "ETH"
    USDT = "USDT"
    USDC = "USDC"
    LTC = "LTC"
    TON = "TON"


class FiatCurrency(str, Enum):
    RUB = "RUB"
    USD = "USD"
    EUR = "EUR"
    UAH = "UAH"


class PaymentMethod(str, Enum):
    SBP = "sbp"
    BANK_TRANSFER = "bank_transfer"
    SBERBANK = "sberbank"
    TINKOFF = "tinkoff"
    QIWI = "qiwi"
    YANDEX_MONEY = "yandex_money"
    CASH = "cash"
    OTHER = "other"


class ReviewType(str, Enum):
    """Derived from rating: >=4 positive, 3 neutral, <=2 negative."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ReportReason(str, Enum):
    SPAM = "spam"
    INAPPROPRIATE_LANGUAGE = "inappropriate_language"
    FAKE_REVIEW = "fake_review"
    PERSONAL_ATTACK = "personal_attack"
    IRRELEVANT_CONTENT = "irrelevant_content"
    OTHER = "other"


# Statuses in which an Order is visible on the public market
OPEN_ORDER_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.ACTIVE, OrderStatus.HAS_RESPONSES}
)

TERMINAL_ORDER_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.EXPIRED}
)

LIVE_DEAL_STATUSES: frozenset[DealStatus] = frozenset(
    {DealStatus.IN_PROGRESS, DealStatus.WAITING_PAYMENT}
)
