"""Reconciled read model: a Response joined with its Order and bound Deal."""
from dataclasses import dataclass

from src.p2p_deal.domain.models import Deal
from src.p2p_order.domain.models import Order
from src.p2p_response.domain.models import Response


@dataclass(frozen=True)
class ReconciledResponse:
    response: Response
    order: Order
    # Only set when this response is the one the deal was created from
    deal: Deal | None = None
