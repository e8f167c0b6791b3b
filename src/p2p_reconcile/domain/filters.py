"""Visibility rules for Responses, evaluated against a snapshot of Orders and Deals.

Pure functions: no I/O, no locking, never raise. Inputs may be torn
(e.g. an order already in_deal whose deal row is not in the snapshot);
anything that cannot be proven visible is dropped.

Rules, in order:
  1. order absent                          -> drop
  2. order cancelled or expired            -> drop
  3. order in_deal / completed:
       requesting actor not a deal party   -> drop
       deal completed                      -> drop
  4. otherwise                             -> keep
"""
from collections.abc import Iterable, Mapping

from src.p2p_common.enums import DealStatus, OrderStatus
from src.p2p_deal.domain.models import Deal
from src.p2p_order.domain.models import Order
from src.p2p_reconcile.domain.models import ReconciledResponse
from src.p2p_response.domain.models import Response

_HIDDEN_ORDER_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.EXPIRED})
_DEAL_BOUND_ORDER_STATUSES = frozenset({OrderStatus.IN_DEAL, OrderStatus.COMPLETED})


def _visible(actor_id: str, order: Order | None, deal: Deal | None, owner_view: bool) -> bool:
    if order is None:
        return False
    if order.status in _HIDDEN_ORDER_STATUSES:
        return False
    if order.status in _DEAL_BOUND_ORDER_STATUSES:
        if deal is None:
            # The owner is a party to whatever deal the order is bound to
            return owner_view and order.status == OrderStatus.IN_DEAL
        if not deal.is_party(actor_id):
            return False
        if deal.status == DealStatus.COMPLETED:
            return False
    return True


def _reconcile(
    actor_id: str,
    responses: Iterable[Response],
    orders: Mapping[str, Order],
    deals: Mapping[str, Deal],
    owner_view: bool,
) -> list[ReconciledResponse]:
    result: list[ReconciledResponse] = []
    for response in responses:
        order = orders.get(response.order_id)
        deal = deals.get(response.order_id)
        if not _visible(actor_id, order, deal, owner_view):
            continue
        if owner_view and order.owner_id != actor_id:
            continue
        if not owner_view and response.responder_id != actor_id:
            continue
        bound = deal if deal is not None and deal.response_id == response.id else None
        result.append(ReconciledResponse(response=response, order=order, deal=bound))
    return result


def reconcile_my_responses(
    actor_id: str,
    responses: Iterable[Response],
    orders: Mapping[str, Order],
    deals: Mapping[str, Deal],
) -> list[ReconciledResponse]:
    """Responses the actor submitted, as the actor should currently see them."""
    return _reconcile(actor_id, responses, orders, deals, owner_view=False)


def reconcile_responses_to_me(
    actor_id: str,
    responses: Iterable[Response],
    orders: Mapping[str, Order],
    deals: Mapping[str, Deal],
) -> list[ReconciledResponse]:
    """Responses to the actor's orders, including orders no longer on the market."""
    return _reconcile(actor_id, responses, orders, deals, owner_view=True)
