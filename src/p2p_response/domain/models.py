"""Response domain model: pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime

from src.p2p_common.enums import ResponseStatus
from src.p2p_common.errors import IllegalTransitionError
from src.p2p_common.state_machine import RESPONSE_TRANSITIONS, can_transition


@dataclass
class Response:
    id: str
    order_id: str
    responder_id: str
    message: str | None = None
    status: ResponseStatus = ResponseStatus.WAITING
    reject_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    # Set when the order owner accepts or rejects
    reviewed_at: datetime | None = None

    @property
    def is_waiting(self) -> bool:
        return self.status == ResponseStatus.WAITING

    def move_to(self, target: ResponseStatus, now: datetime) -> None:
        if not can_transition(RESPONSE_TRANSITIONS, self.status, target):
            raise IllegalTransitionError("Response", self.id, self.status.value, target.value)
        self.status = target
        self.reviewed_at = now
