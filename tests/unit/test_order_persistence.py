# tests/unit/test_order_persistence.py
"""Unit tests for the raw SQL repositories using a MagicMock AsyncSession."""
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.p2p_actor.infrastructure.persistence import ActorRepository
from src.p2p_common.enums import DealStatus, OrderStatus, PaymentMethod, ReportReason
from src.p2p_deal.infrastructure.persistence import DealRepository
from src.p2p_order.domain.models import OrderFilter
from src.p2p_order.infrastructure.persistence import OrderRepository
from src.p2p_response.infrastructure.persistence import ResponseRepository
from src.p2p_review.domain.models import ReviewReport
from src.p2p_review.infrastructure.persistence import ReviewRepository
from tests.unit.fakes import make_order


def _make_order_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "ORD-1")
    row.owner_id = "alice"
    row.side = "sell"
    row.crypto = "BTC"
    row.fiat = "RUB"
    row.amount = Decimal("0.50000000")
    row.price = Decimal("6000000.00000000")
    row.total_amount = Decimal("3000000.00000000")
    row.min_amount = Decimal("1000.00000000")
    row.max_amount = Decimal("3000000.00000000")
    row.payment_methods = ["sbp", "cash"]
    row.description = None
    row.status = kwargs.get("status", "has_responses")
    row.response_count = 2
    row.accepted_response_id = None
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    row.completed_at = None
    return row


def _make_deal_row(**kwargs):
    row = MagicMock()
    row.id = "DEAL-1"
    row.order_id = kwargs.get("order_id", "ORD-1")
    row.response_id = "RSP-1"
    row.author_id = "alice"
    row.counterparty_id = "bob"
    row.amount = Decimal("0.5")
    row.price = Decimal("6000000")
    row.total_amount = Decimal("3000000")
    row.payment_methods = ["sbp"]
    row.status = kwargs.get("status", "waiting_payment")
    row.author_confirmed = False
    row.counterparty_confirmed = True
    row.author_proof = None
    row.counterparty_proof = "receipt"
    row.cancelled_by = None
    row.cancel_reason = None
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    row.completed_at = None
    return row


def _result(one=None, many=None):
    result_mock = MagicMock()
    result_mock.fetchone.return_value = one
    result_mock.fetchall.return_value = many or []
    return result_mock


@pytest.fixture
def db():
    return MagicMock()


class TestOrderRepository:
    @pytest.mark.asyncio
    async def test_get_by_id_maps_row(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_make_order_row()))

        order = await OrderRepository().get_by_id(db, "ORD-1")

        assert order is not None
        assert order.status == OrderStatus.HAS_RESPONSES
        assert order.payment_methods == [PaymentMethod.SBP, PaymentMethod.CASH]
        assert order.min_amount == Decimal("1000")
        assert order.response_count == 2

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=None))
        assert await OrderRepository().get_by_id(db, "nope") is None

    @pytest.mark.asyncio
    async def test_save_binds_wire_values(self, db) -> None:
        db.execute = AsyncMock()

        await OrderRepository().save(db, make_order())

        params = db.execute.call_args.args[1]
        assert params["side"] == "sell"
        assert params["crypto"] == "BTC"
        assert params["payment_methods"] == ["sberbank"]
        assert params["status"] == "active"
        assert params["total_amount"] == Decimal("3000000")

    @pytest.mark.asyncio
    async def test_list_orders_binds_filter(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(many=[_make_order_row()]))

        orders = await OrderRepository().list_orders(
            db, OrderFilter(include_all_of="alice"), None, None, 51
        )

        params = db.execute.call_args.args[1]
        assert params["statuses_csv"] == "active,has_responses"
        assert params["include_all_of"] == "alice"
        assert params["side"] is None
        assert params["limit"] == 51
        assert len(orders) == 1

    @pytest.mark.asyncio
    async def test_get_many_skips_query_when_empty(self, db) -> None:
        db.execute = AsyncMock()
        assert await OrderRepository().get_many(db, []) == {}
        db.execute.assert_not_awaited()


class TestDealRepository:
    @pytest.mark.asyncio
    async def test_maps_row(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_make_deal_row()))

        deal = await DealRepository().get_by_id(db, "DEAL-1")

        assert deal.status == DealStatus.WAITING_PAYMENT
        assert deal.counterparty_confirmed is True
        assert deal.counterparty_proof == "receipt"
        assert deal.total_amount == Decimal("3000000")

    @pytest.mark.asyncio
    async def test_latest_by_orders_keys_by_order(self, db) -> None:
        rows = [_make_deal_row(order_id="ORD-1"), _make_deal_row(order_id="ORD-2")]
        db.execute = AsyncMock(return_value=_result(many=rows))

        deals = await DealRepository().latest_by_orders(db, ["ORD-2", "ORD-1", "ORD-1"])

        assert set(deals) == {"ORD-1", "ORD-2"}
        assert db.execute.call_args.args[1]["ids_csv"] == "ORD-1,ORD-2"


class TestResponseRepository:
    @pytest.mark.asyncio
    async def test_count_waiting(self, db) -> None:
        result_mock = MagicMock()
        result_mock.scalar_one.return_value = 3
        db.execute = AsyncMock(return_value=result_mock)

        assert await ResponseRepository().count_waiting(db, "ORD-1") == 3


class TestActorRepository:
    @pytest.mark.asyncio
    async def test_ensure_exists_inserts_then_reads(self, db) -> None:
        row = MagicMock()
        row.id = "alice"
        row.rating = 4.5
        row.review_count = 2
        row.total_orders = 1
        row.active_orders = 1
        row.completed_deals = 0
        row.is_active = True
        row.created_at = datetime.now(UTC)
        row.updated_at = datetime.now(UTC)
        db.execute = AsyncMock(side_effect=[MagicMock(), _result(one=row)])

        actor = await ActorRepository().ensure_exists(db, "alice")

        assert actor.id == "alice"
        assert actor.rating == 4.5
        assert db.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_adjust_counters_binds_deltas(self, db) -> None:
        db.execute = AsyncMock()

        await ActorRepository().adjust_counters(db, "alice", active_orders=-1)

        params = db.execute.call_args.args[1]
        assert params == {
            "id": "alice", "total_orders": 0, "active_orders": -1, "completed_deals": 0,
        }


class TestReviewRepository:
    @pytest.mark.asyncio
    async def test_rating_summary(self, db) -> None:
        row = MagicMock()
        row.mean = Decimal("4.5")
        row.total = 2
        db.execute = AsyncMock(return_value=_result(one=row))

        assert await ReviewRepository().rating_summary(db, "alice") == (4.5, 2)

    @pytest.mark.asyncio
    async def test_add_report_bumps_counter(self, db) -> None:
        db.execute = AsyncMock()
        report = ReviewReport(
            id="REP-1", review_id="R1", reporter_id="carol", reason=ReportReason.SPAM
        )

        await ReviewRepository().add_report(db, report)

        assert db.execute.await_count == 2
        assert db.execute.call_args_list[0].args[1]["reason"] == "spam"
        assert db.execute.call_args_list[1].args[1] == {"id": "R1"}
