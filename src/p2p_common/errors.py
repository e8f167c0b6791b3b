"""Unified error kinds, codes and custom exceptions.

Every error carries a stable `kind` (what the caller should do about it)
and a numeric `code` (what exactly went wrong).

Kinds:
  validation  — malformed/out-of-range input, user must correct
  permission  — actor not entitled to act on the entity
  state       — entity not in a state that permits the operation, refresh view
  conflict    — duplicate submission
  not_found   — referenced entity absent
  transient   — storage/network failure, safe to retry with backoff

Error code ranges:
  1xxx: Actor/Auth
  2xxx: Order
  3xxx: Response
  4xxx: Deal
  5xxx: Review
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    kind: str = "internal"

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- Kinds ---

class ValidationError(AppError):
    kind = "validation"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 422)


class PermissionDeniedError(AppError):
    kind = "permission"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 403)


class StateError(AppError):
    kind = "state"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class ConflictError(AppError):
    kind = "conflict"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class NotFoundError(AppError):
    kind = "not_found"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class TransientError(AppError):
    kind = "transient"

    def __init__(self, code: int, message: str, http_status: int = 503) -> None:
        super().__init__(code, message, http_status)


# --- 1xxx: Actor/Auth ---

class ActorNotFoundError(NotFoundError):
    def __init__(self, actor_id: str) -> None:
        super().__init__(1001, f"Actor not found: {actor_id}")


class ActorDeactivatedError(PermissionDeniedError):
    def __init__(self) -> None:
        super().__init__(1002, "Actor is deactivated")


class InvalidCredentialsError(AppError):
    kind = "permission"

    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


# --- 2xxx: Order ---

class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__(2001, f"Order not found: {order_id}")


class InvalidOrderError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, f"Invalid order: {detail}")


class NotOrderOwnerError(PermissionDeniedError):
    def __init__(self, order_id: str) -> None:
        super().__init__(2003, f"Only the owner may modify order {order_id}")


class OrderNotEditableError(StateError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(2004, f"Order {order_id} in status {status} cannot be edited")


class OrderNotCancellableError(StateError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(2005, f"Order {order_id} in status {status} cannot be cancelled")


class OrderHasLiveDealError(StateError):
    def __init__(self, order_id: str, deal_id: str) -> None:
        super().__init__(
            2006,
            f"Order {order_id} is bound to live deal {deal_id}; cancel the deal first",
        )


class OrderNotVisibleError(PermissionDeniedError):
    def __init__(self, order_id: str) -> None:
        super().__init__(2007, f"Order {order_id} is visible only to its owner and deal parties")


# --- 3xxx: Response ---

class ResponseNotFoundError(NotFoundError):
    def __init__(self, response_id: str) -> None:
        super().__init__(3001, f"Response not found: {response_id}")


class SelfResponseError(PermissionDeniedError):
    def __init__(self) -> None:
        super().__init__(3002, "Cannot respond to your own order")


class OrderNotOpenError(StateError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(3003, f"Order {order_id} in status {status} is not open for responses")


class DuplicateResponseError(ConflictError):
    def __init__(self, order_id: str) -> None:
        super().__init__(3004, f"You already have a waiting response on order {order_id}")


class ResponseAlreadyProcessedError(StateError):
    def __init__(self, response_id: str, status: str) -> None:
        super().__init__(3005, f"Response {response_id} is already {status}")


class InvalidResponseError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(3006, f"Invalid response: {detail}")


# --- 4xxx: Deal ---

class DealNotFoundError(NotFoundError):
    def __init__(self, deal_id: str) -> None:
        super().__init__(4001, f"Deal not found: {deal_id}")


class NotDealPartyError(PermissionDeniedError):
    def __init__(self, deal_id: str) -> None:
        super().__init__(4002, f"You are not a party to deal {deal_id}")


class DealNotConfirmableError(StateError):
    def __init__(self, deal_id: str, status: str) -> None:
        super().__init__(4003, f"Deal {deal_id} in status {status} cannot be confirmed")


class DealNotCancellableError(StateError):
    def __init__(self, deal_id: str, status: str) -> None:
        super().__init__(4004, f"Deal {deal_id} in status {status} cannot be cancelled")


class OrderAlreadyInDealError(StateError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(4005, f"Order {order_id} in status {status} cannot start a deal")


# --- 5xxx: Review ---

class InvalidReviewError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(5001, f"Invalid review: {detail}")


class DealNotCompletedError(StateError):
    def __init__(self, deal_id: str, status: str) -> None:
        super().__init__(5002, f"Deal {deal_id} in status {status} cannot be reviewed yet")


class DuplicateReviewError(ConflictError):
    def __init__(self, deal_id: str) -> None:
        super().__init__(5003, f"You already reviewed deal {deal_id}")


class ReviewNotFoundError(NotFoundError):
    def __init__(self, review_id: str) -> None:
        super().__init__(5004, f"Review not found: {review_id}")


class DuplicateReportError(ConflictError):
    def __init__(self, review_id: str) -> None:
        super().__init__(5005, f"You already reported review {review_id}")


class InvalidReportError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(5006, f"Invalid report: {detail}")


# --- 9xxx: System ---

class RateLimitError(TransientError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class StorageUnavailableError(TransientError):
    def __init__(self, detail: str = "Storage temporarily unavailable") -> None:
        super().__init__(9003, detail)


class RequestValidationFailedError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(9004, detail)


class IllegalTransitionError(StateError):
    def __init__(self, entity: str, entity_id: str, current: str, target: str) -> None:
        super().__init__(9005, f"{entity} {entity_id} cannot move from {current} to {target}")
