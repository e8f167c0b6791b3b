"""End-to-end trade scenarios across all services, over in-memory repositories."""

from decimal import Decimal

import pytest

from src.p2p_common.enums import (
    CryptoCurrency,
    DealStatus,
    FiatCurrency,
    OrderSide,
    OrderStatus,
    PaymentMethod,
    ResponseStatus,
)
from src.p2p_common.errors import ConflictError, DuplicateReviewError, OrderNotOpenError, StateError
from src.p2p_response.application.schemas import SubmitResponseRequest
from src.p2p_review.application.schemas import SubmitReviewRequest
from tests.unit.fakes import ALICE, BOB, CAROL, make_create_request


@pytest.fixture
def btc_rub_request():
    return make_create_request(
        side=OrderSide.SELL,
        cryptocurrency=CryptoCurrency.BTC,
        fiat_currency=FiatCurrency.RUB,
        amount=Decimal("0.01"),
        price=Decimal("3000000"),
        payment_methods=[PaymentMethod.SBP],
    )


@pytest.fixture
async def deal_in_progress(db, store, btc_rub_request, order_service, response_service):
    order = await order_service.create_order(db, ALICE, btc_rub_request)
    response = await response_service.submit(db, BOB, SubmitResponseRequest(order_id=order.id))
    deal = await response_service.accept(db, ALICE, response.id)
    return order.id, response.id, deal.id


class TestScenarios:
    @pytest.mark.asyncio
    async def test_1_order_response_accept(
        self, db, store, btc_rub_request, order_service, response_service
    ) -> None:
        order = await order_service.create_order(db, ALICE, btc_rub_request)
        assert order.status == OrderStatus.ACTIVE
        assert order.total_amount == Decimal("30000")

        response = await response_service.submit(
            db, BOB, SubmitResponseRequest(order_id=order.id)
        )
        assert store.orders[order.id].status == OrderStatus.HAS_RESPONSES

        deal = await response_service.accept(db, ALICE, response.id)
        assert store.responses[response.id].status == ResponseStatus.ACCEPTED
        assert store.orders[order.id].status == OrderStatus.IN_DEAL
        assert deal.status == DealStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_2_dual_confirmation(self, db, store, deal_in_progress, deal_service) -> None:
        order_id, _, deal_id = deal_in_progress

        first = await deal_service.confirm(db, ALICE, deal_id)
        assert first.deal.status == DealStatus.WAITING_PAYMENT
        assert first.deal_completed is False

        second = await deal_service.confirm(db, BOB, deal_id)
        assert second.deal.status == DealStatus.COMPLETED
        assert second.deal_completed is True
        assert store.orders[order_id].status == OrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_3_confirm_after_completion_is_noop(
        self, db, store, deal_in_progress, deal_service
    ) -> None:
        _, _, deal_id = deal_in_progress
        await deal_service.confirm(db, ALICE, deal_id)
        completed = await deal_service.confirm(db, BOB, deal_id)

        again = await deal_service.confirm(db, ALICE, deal_id)

        assert again.deal_completed is True
        assert again.deal == completed.deal

    @pytest.mark.asyncio
    async def test_4_second_review_conflicts(
        self, db, store, deal_in_progress, deal_service, review_service
    ) -> None:
        _, _, deal_id = deal_in_progress
        await deal_service.confirm(db, ALICE, deal_id)
        await deal_service.confirm(db, BOB, deal_id)

        await review_service.submit(db, BOB, SubmitReviewRequest(deal_id=deal_id, rating=5))
        with pytest.raises(DuplicateReviewError) as exc_info:
            await review_service.submit(
                db, BOB, SubmitReviewRequest(deal_id=deal_id, rating=1, comment="changed")
            )
        assert isinstance(exc_info.value, ConflictError)
        assert store.actors[ALICE].rating == 5.0

    @pytest.mark.asyncio
    async def test_5_response_to_in_deal_order_fails(
        self, db, deal_in_progress, response_service
    ) -> None:
        order_id, _, _ = deal_in_progress
        with pytest.raises(OrderNotOpenError) as exc_info:
            await response_service.submit(db, CAROL, SubmitResponseRequest(order_id=order_id))
        assert isinstance(exc_info.value, StateError)

    @pytest.mark.asyncio
    async def test_6_cancelled_order_drops_from_reconciled_view(
        self, db, store, btc_rub_request, order_service, response_service, reconcile_service
    ) -> None:
        order = await order_service.create_order(db, ALICE, btc_rub_request)
        await response_service.submit(db, BOB, SubmitResponseRequest(order_id=order.id))
        assert len(await reconcile_service.my_responses(db, BOB)) == 1

        await order_service.cancel_order(db, ALICE, order.id)

        assert store.orders[order.id].status == OrderStatus.CANCELLED
        assert await reconcile_service.my_responses(db, BOB) == []


class TestFullLifecycle:
    @pytest.mark.asyncio
    async def test_cancelled_deal_then_second_responder_completes(
        self, db, store, btc_rub_request, order_service, response_service,
        deal_service, actor_service,
    ) -> None:
        order = await order_service.create_order(db, ALICE, btc_rub_request)
        bob = await response_service.submit(db, BOB, SubmitResponseRequest(order_id=order.id))
        carol = await response_service.submit(db, CAROL, SubmitResponseRequest(order_id=order.id))

        first_deal = await response_service.accept(db, ALICE, bob.id)
        await deal_service.cancel(db, BOB, first_deal.id, "bank down")
        # Carol is still waiting, so the order goes back to has_responses
        assert store.orders[order.id].status == OrderStatus.HAS_RESPONSES

        second_deal = await response_service.accept(db, ALICE, carol.id)
        await deal_service.confirm(db, CAROL, second_deal.id)
        await deal_service.confirm(db, ALICE, second_deal.id)

        assert store.orders[order.id].status == OrderStatus.COMPLETED
        assert store.orders[order.id].accepted_response_id == carol.id
        profile = await actor_service.get_profile(db, ALICE)
        assert profile.user.completed_deals == 1
        assert profile.stats.total_deals == 2
        assert profile.stats.completed_deals == 1
        assert profile.stats.cancelled_deals == 1
        assert profile.stats.success_rate == 50.0
        assert profile.stats.total_trade_volume == Decimal("30000")
        assert store.actors[ALICE].active_orders == 0
