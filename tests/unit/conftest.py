"""Unit-test fixtures: a mock session and in-memory repositories."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.p2p_actor.application.service import ActorApplicationService
from src.p2p_deal.application.expiry import ExpirySweeper
from src.p2p_deal.application.service import DealApplicationService
from src.p2p_order.application.service import OrderApplicationService
from src.p2p_reconcile.application.service import ReconciliationService
from src.p2p_response.application.service import ResponseApplicationService
from src.p2p_review.application.service import ReviewApplicationService
from tests.unit.fakes import FakeStore, Repos


@pytest.fixture
def db():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def repos(store: FakeStore) -> Repos:
    return Repos.over(store)


@pytest.fixture
def order_service(repos: Repos) -> OrderApplicationService:
    return OrderApplicationService(
        repo=repos.orders, deal_repo=repos.deals, actor_repo=repos.actors,
        locks=repos.locks, allow_cancel_with_live_deal=False,
    )


@pytest.fixture
def response_service(repos: Repos) -> ResponseApplicationService:
    return ResponseApplicationService(
        repo=repos.responses, order_repo=repos.orders, deal_repo=repos.deals,
        locks=repos.locks, auto_reject_siblings=False,
    )


@pytest.fixture
def deal_service(repos: Repos) -> DealApplicationService:
    return DealApplicationService(
        repo=repos.deals, order_repo=repos.orders, response_repo=repos.responses,
        actor_repo=repos.actors, locks=repos.locks,
    )


@pytest.fixture
def review_service(repos: Repos) -> ReviewApplicationService:
    return ReviewApplicationService(
        repo=repos.reviews, deal_repo=repos.deals, actor_repo=repos.actors,
    )


@pytest.fixture
def reconcile_service(repos: Repos) -> ReconciliationService:
    return ReconciliationService(
        order_repo=repos.orders, response_repo=repos.responses, deal_repo=repos.deals,
    )


@pytest.fixture
def actor_service(repos: Repos) -> ActorApplicationService:
    return ActorApplicationService(repo=repos.actors, review_repo=repos.reviews)


@pytest.fixture
def sweeper(repos: Repos) -> ExpirySweeper:
    return ExpirySweeper(
        order_repo=repos.orders, deal_repo=repos.deals, response_repo=repos.responses,
        actor_repo=repos.actors, locks=repos.locks,
    )
