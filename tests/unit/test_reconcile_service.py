"""Unit tests for ReconciliationService: every call re-reads current state."""

import pytest

from src.p2p_common.enums import OrderStatus
from src.p2p_response.application.schemas import ReconciledResponseOut
from tests.unit.fakes import ALICE, BOB, make_deal, make_order, make_response


class TestReconciliationService:
    @pytest.mark.asyncio
    async def test_reflects_changes_between_calls(self, db, store, reconcile_service) -> None:
        store.orders["ORD-1"] = make_order(status=OrderStatus.HAS_RESPONSES)
        store.responses["RSP-1"] = make_response()
        assert len(await reconcile_service.my_responses(db, BOB)) == 1

        store.orders["ORD-1"].status = OrderStatus.EXPIRED

        assert await reconcile_service.my_responses(db, BOB) == []

    @pytest.mark.asyncio
    async def test_responses_to_me_includes_deal(self, db, store, reconcile_service) -> None:
        store.orders["ORD-1"] = make_order(status=OrderStatus.IN_DEAL)
        store.responses["RSP-1"] = make_response()
        store.deals["DEAL-1"] = make_deal()

        items = await reconcile_service.responses_to_me(db, ALICE)

        assert len(items) == 1
        out = ReconciledResponseOut.from_reconciled(items[0])
        assert out.deal_id == "DEAL-1"
        assert out.order_status == OrderStatus.IN_DEAL
        assert out.order_owner_id == ALICE

    @pytest.mark.asyncio
    async def test_empty(self, db, reconcile_service) -> None:
        assert await reconcile_service.my_responses(db, BOB) == []
        assert await reconcile_service.responses_to_me(db, ALICE) == []
