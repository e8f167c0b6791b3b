"""Closed transition tables for every lifecycle entity.

Fail-closed: a transition not listed here is rejected. Callers translate a
rejected transition into the entity-specific StateError they own; this module
only answers "is current → target allowed".

Order:     active → has_responses → in_deal → completed
           in_deal → has_responses | active     (live deal cancelled)
           any non-terminal → cancelled | expired
Response:  waiting → accepted | rejected
Deal:      in_progress → waiting_payment → completed
           in_progress | waiting_payment → completed (both flags set at once)
           in_progress | waiting_payment → cancelled | expired
"""

from enum import Enum
from typing import TypeVar

from src.p2p_common.enums import DealStatus, OrderStatus, ResponseStatus

S = TypeVar("S", bound=Enum)

ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.ACTIVE: frozenset({
        OrderStatus.HAS_RESPONSES,
        OrderStatus.IN_DEAL,
        OrderStatus.CANCELLED,
        OrderStatus.EXPIRED,
    }),
    OrderStatus.HAS_RESPONSES: frozenset({
        OrderStatus.IN_DEAL,
        OrderStatus.CANCELLED,
        OrderStatus.EXPIRED,
    }),
    OrderStatus.IN_DEAL: frozenset({
        OrderStatus.COMPLETED,
        OrderStatus.HAS_RESPONSES,
        OrderStatus.ACTIVE,
        OrderStatus.CANCELLED,
        OrderStatus.EXPIRED,
    }),
    # Terminal states: no outgoing transitions
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.EXPIRED: frozenset(),
}

RESPONSE_TRANSITIONS: dict[ResponseStatus, frozenset[ResponseStatus]] = {
    ResponseStatus.WAITING: frozenset({ResponseStatus.ACCEPTED, ResponseStatus.REJECTED}),
    ResponseStatus.ACCEPTED: frozenset(),
    ResponseStatus.REJECTED: frozenset(),
}

DEAL_TRANSITIONS: dict[DealStatus, frozenset[DealStatus]] = {
    DealStatus.IN_PROGRESS: frozenset({
        DealStatus.WAITING_PAYMENT,
        DealStatus.COMPLETED,
        DealStatus.CANCELLED,
        DealStatus.EXPIRED,
    }),
    DealStatus.WAITING_PAYMENT: frozenset({
        DealStatus.COMPLETED,
        DealStatus.CANCELLED,
        DealStatus.EXPIRED,
    }),
    DealStatus.COMPLETED: frozenset(),
    DealStatus.CANCELLED: frozenset(),
    DealStatus.EXPIRED: frozenset(),
}


def can_transition(table: dict[S, frozenset[S]], current: S, target: S) -> bool:
    return target in table[current]


def is_terminal(table: dict[S, frozenset[S]], status: S) -> bool:
    return not table[status]
