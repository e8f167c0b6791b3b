"""Unit tests for DealApplicationService: confirm, cancel and reads."""

import pytest

from src.p2p_common.enums import DealStatus, OrderStatus, ResponseStatus
from src.p2p_common.errors import (
    DealNotCancellableError,
    DealNotConfirmableError,
    DealNotFoundError,
    NotDealPartyError,
)
from tests.unit.fakes import ALICE, BOB, CAROL, make_deal, make_order, make_response


@pytest.fixture
def live_deal(store):
    store.orders["ORD-1"] = make_order(
        status=OrderStatus.IN_DEAL, accepted_response_id="RSP-1", response_count=1
    )
    store.responses["RSP-1"] = make_response(status=ResponseStatus.ACCEPTED)
    store.deals["DEAL-1"] = make_deal()
    return store.deals["DEAL-1"]


class TestConfirm:
    @pytest.mark.asyncio
    async def test_first_confirmation(self, db, store, live_deal, deal_service) -> None:
        out = await deal_service.confirm(db, BOB, "DEAL-1", "receipt.png")

        assert out.deal_completed is False
        assert out.deal.status == DealStatus.WAITING_PAYMENT
        assert out.deal.counterparty_confirmed is True
        assert out.deal.counterparty_proof == "receipt.png"
        assert store.orders["ORD-1"].status == OrderStatus.IN_DEAL

    @pytest.mark.asyncio
    async def test_both_confirmations_complete_deal_and_order(
        self, db, store, repos, live_deal, deal_service
    ) -> None:
        await repos.actors.adjust_counters(db, ALICE, total_orders=1, active_orders=1)

        await deal_service.confirm(db, ALICE, "DEAL-1")
        out = await deal_service.confirm(db, BOB, "DEAL-1")

        assert out.deal_completed is True
        assert out.deal.status == DealStatus.COMPLETED
        assert out.deal.completed_at is not None
        order = store.orders["ORD-1"]
        assert order.status == OrderStatus.COMPLETED
        assert order.completed_at is not None
        assert store.actors[ALICE].active_orders == 0
        assert store.actors[ALICE].completed_deals == 1
        assert store.actors[BOB].completed_deals == 1

    @pytest.mark.asyncio
    async def test_repeat_confirmation_is_idempotent(
        self, db, store, live_deal, deal_service
    ) -> None:
        first = await deal_service.confirm(db, BOB, "DEAL-1", "a")
        again = await deal_service.confirm(db, BOB, "DEAL-1", "b")
        assert again.deal.status == first.deal.status == DealStatus.WAITING_PAYMENT
        assert again.deal.counterparty_proof == "a"

    @pytest.mark.asyncio
    async def test_confirm_after_completion_changes_nothing(
        self, db, store, live_deal, deal_service
    ) -> None:
        await deal_service.confirm(db, ALICE, "DEAL-1")
        await deal_service.confirm(db, BOB, "DEAL-1")
        counters = store.actors[BOB].completed_deals

        out = await deal_service.confirm(db, BOB, "DEAL-1")

        assert out.deal_completed is True
        assert store.actors[BOB].completed_deals == counters

    @pytest.mark.asyncio
    async def test_outsider_cannot_confirm(self, db, live_deal, deal_service) -> None:
        with pytest.raises(NotDealPartyError):
            await deal_service.confirm(db, CAROL, "DEAL-1")

    @pytest.mark.asyncio
    async def test_cancelled_deal_cannot_be_confirmed(
        self, db, store, live_deal, deal_service
    ) -> None:
        await deal_service.cancel(db, BOB, "DEAL-1", None)
        with pytest.raises(DealNotConfirmableError):
            await deal_service.confirm(db, ALICE, "DEAL-1")
        db.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_missing_deal(self, db, deal_service) -> None:
        with pytest.raises(DealNotFoundError):
            await deal_service.confirm(db, ALICE, "nope")


class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_reopens_order_as_active(self, db, store, live_deal, deal_service) -> None:
        out = await deal_service.cancel(db, BOB, "DEAL-1", " no time ")

        assert out.status == DealStatus.CANCELLED
        assert out.cancelled_by == BOB
        assert out.cancel_reason == "no time"
        order = store.orders["ORD-1"]
        assert order.status == OrderStatus.ACTIVE
        assert order.accepted_response_id is None

    @pytest.mark.asyncio
    async def test_cancel_reopens_order_with_waiting_responses(
        self, db, store, live_deal, deal_service
    ) -> None:
        store.responses["RSP-2"] = make_response(id="RSP-2", responder_id=CAROL)

        await deal_service.cancel(db, ALICE, "DEAL-1", None)

        assert store.orders["ORD-1"].status == OrderStatus.HAS_RESPONSES

    @pytest.mark.asyncio
    async def test_accepted_response_stays_accepted(
        self, db, store, live_deal, deal_service
    ) -> None:
        await deal_service.cancel(db, ALICE, "DEAL-1", None)
        assert store.responses["RSP-1"].status == ResponseStatus.ACCEPTED

    @pytest.mark.asyncio
    async def test_completed_deal_cannot_be_cancelled(
        self, db, store, live_deal, deal_service
    ) -> None:
        await deal_service.confirm(db, ALICE, "DEAL-1")
        await deal_service.confirm(db, BOB, "DEAL-1")
        with pytest.raises(DealNotCancellableError):
            await deal_service.cancel(db, ALICE, "DEAL-1", None)
        assert store.orders["ORD-1"].status == OrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_outsider_cannot_cancel(self, db, live_deal, deal_service) -> None:
        with pytest.raises(NotDealPartyError):
            await deal_service.cancel(db, CAROL, "DEAL-1", None)


class TestReads:
    @pytest.mark.asyncio
    async def test_get_deal_party_only(self, db, live_deal, deal_service) -> None:
        assert (await deal_service.get_deal(db, BOB, "DEAL-1")).id == "DEAL-1"
        with pytest.raises(NotDealPartyError):
            await deal_service.get_deal(db, CAROL, "DEAL-1")

    @pytest.mark.asyncio
    async def test_list_deals(self, db, store, live_deal, deal_service) -> None:
        store.deals["DEAL-2"] = make_deal(
            id="DEAL-2", order_id="ORD-2", author_id=CAROL, counterparty_id=ALICE
        )
        assert {d.id for d in await deal_service.list_deals(db, ALICE)} == {"DEAL-1", "DEAL-2"}
        assert [d.id for d in await deal_service.list_deals(db, BOB)] == ["DEAL-1"]
        assert [d.id for d in await deal_service.list_deals(db, ALICE, "ORD-2")] == ["DEAL-2"]
