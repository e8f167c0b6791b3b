"""Concurrent lifecycle calls on one order serialize into one effective change."""

import asyncio

import pytest

from src.p2p_common.enums import DealStatus, OrderStatus
from src.p2p_common.errors import AppError, OrderAlreadyInDealError, ResponseAlreadyProcessedError
from src.p2p_response.application.schemas import SubmitResponseRequest
from src.p2p_review.application.schemas import SubmitReviewRequest
from tests.unit.fakes import ALICE, BOB, CAROL, make_create_request, make_deal, make_order


async def _open_order_with(db, order_service, response_service, *responders: str):
    order = await order_service.create_order(db, ALICE, make_create_request())
    ids = []
    for actor in responders:
        out = await response_service.submit(db, actor, SubmitResponseRequest(order_id=order.id))
        ids.append(out.id)
    return order.id, ids


class TestConcurrentAccept:
    @pytest.mark.asyncio
    async def test_two_accepts_of_different_responses(
        self, db, store, order_service, response_service
    ) -> None:
        order_id, (bob, carol) = await _open_order_with(
            db, order_service, response_service, BOB, CAROL
        )

        results = await asyncio.gather(
            response_service.accept(db, ALICE, bob),
            response_service.accept(db, ALICE, carol),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], OrderAlreadyInDealError)
        live = [d for d in store.deals.values() if d.is_live]
        assert len(live) == 1
        assert store.orders[order_id].status == OrderStatus.IN_DEAL

    @pytest.mark.asyncio
    async def test_double_accept_of_same_response(
        self, db, store, order_service, response_service
    ) -> None:
        _, (bob,) = await _open_order_with(db, order_service, response_service, BOB)

        results = await asyncio.gather(
            response_service.accept(db, ALICE, bob),
            response_service.accept(db, ALICE, bob),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], ResponseAlreadyProcessedError)
        assert len(store.deals) == 1


class TestConcurrentConfirm:
    @pytest.mark.asyncio
    async def test_same_party_confirms_twice(self, db, store, deal_service) -> None:
        store.orders["ORD-1"] = _in_deal_order()
        store.deals["DEAL-1"] = make_deal()

        results = await asyncio.gather(
            deal_service.confirm(db, BOB, "DEAL-1"),
            deal_service.confirm(db, BOB, "DEAL-1"),
        )

        assert all(r.deal.status == DealStatus.WAITING_PAYMENT for r in results)
        assert store.deals["DEAL-1"].status == DealStatus.WAITING_PAYMENT

    @pytest.mark.asyncio
    async def test_both_parties_confirm_at_once(self, db, store, deal_service) -> None:
        store.orders["ORD-1"] = _in_deal_order()
        store.deals["DEAL-1"] = make_deal()

        results = await asyncio.gather(
            deal_service.confirm(db, ALICE, "DEAL-1"),
            deal_service.confirm(db, BOB, "DEAL-1"),
        )

        assert [r.deal_completed for r in results].count(True) == 1
        assert store.deals["DEAL-1"].status == DealStatus.COMPLETED
        assert store.orders["ORD-1"].status == OrderStatus.COMPLETED
        assert store.actors[ALICE].completed_deals == 1
        assert store.actors[BOB].completed_deals == 1

    @pytest.mark.asyncio
    async def test_confirm_races_cancel(self, db, store, deal_service) -> None:
        store.orders["ORD-1"] = _in_deal_order()
        store.deals["DEAL-1"] = make_deal()

        results = await asyncio.gather(
            deal_service.confirm(db, ALICE, "DEAL-1"),
            deal_service.cancel(db, BOB, "DEAL-1", None),
            return_exceptions=True,
        )

        assert not any(isinstance(r, Exception) and not isinstance(r, AppError) for r in results)
        deal = store.deals["DEAL-1"]
        assert deal.status in (DealStatus.CANCELLED, DealStatus.WAITING_PAYMENT)
        if deal.status == DealStatus.CANCELLED:
            assert store.orders["ORD-1"].status == OrderStatus.ACTIVE


class TestConcurrentReviews:
    @pytest.mark.asyncio
    async def test_rating_counts_every_review(self, db, store, review_service) -> None:
        for i, reviewer in enumerate((BOB, CAROL)):
            store.deals[f"DEAL-{i}"] = make_deal(
                id=f"DEAL-{i}", counterparty_id=reviewer, status=DealStatus.COMPLETED,
                author_confirmed=True, counterparty_confirmed=True,
            )

        await asyncio.gather(
            review_service.submit(db, BOB, SubmitReviewRequest(deal_id="DEAL-0", rating=5)),
            review_service.submit(db, CAROL, SubmitReviewRequest(deal_id="DEAL-1", rating=4)),
        )

        assert store.actors[ALICE].review_count == 2
        assert store.actors[ALICE].rating == 4.5


def _in_deal_order():
    return make_order(status=OrderStatus.IN_DEAL, accepted_response_id="RSP-1")
