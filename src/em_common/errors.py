"""Unified error codes and custom exceptions.

Every error carries a numeric ``code``, an ``ErrorKind`` the presentation layer
can branch on, and a ``context`` dict with the identifiers involved.

Error code ranges:
  1xxx: Auth/User
  2xxx: Listing
  4xxx: Order
  9xxx: System
"""

from typing import Any

from src.em_common.enums import ErrorKind


class AppError(Exception):
    """Base application error."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.context: dict[str, Any] = context or {}
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    kind = ErrorKind.CONFLICT

    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    kind = ErrorKind.CONFLICT

    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class UnauthorizedError(AppError):
    """Requester's role or identity fails a policy or ownership check."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, action: str, principal_id: str, **context: Any) -> None:
        super().__init__(
            1006,
            f"Principal {principal_id} is not allowed to {action}",
            403,
            {"action": action, "principal_id": principal_id, **context},
        )


class UserNotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, user_id: str) -> None:
        super().__init__(1007, f"User not found: {user_id}", 404, {"user_id": user_id})


# --- 2xxx: Listing ---

class ListingNotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, listing_id: str) -> None:
        super().__init__(
            2001, f"Listing not found: {listing_id}", 404, {"listing_id": listing_id}
        )


class ListingUnavailableError(AppError):
    kind = ErrorKind.LISTING_UNAVAILABLE

    def __init__(self, listing_id: str) -> None:
        super().__init__(
            2002,
            f"Listing {listing_id} is no longer available",
            409,
            {"listing_id": listing_id},
        )


# --- 4xxx: Order ---

class OrderNotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, order_id: str) -> None:
        super().__init__(4001, f"Order not found: {order_id}", 404, {"order_id": order_id})


class InvalidTransitionError(AppError):
    kind = ErrorKind.INVALID_TRANSITION

    def __init__(self, order_id: str, status: str, event: str) -> None:
        super().__init__(
            4002,
            f"Order {order_id} in status {status} does not accept {event}",
            409,
            {"order_id": order_id, "status": status, "event": event},
        )


class SelfPurchaseError(AppError):
    kind = ErrorKind.SELF_PURCHASE

    def __init__(self, listing_id: str) -> None:
        super().__init__(
            4003,
            "Sellers cannot purchase their own listing",
            422,
            {"listing_id": listing_id},
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class DomainValidationError(AppError):
    """Malformed input caught before any state mutation."""

    kind = ErrorKind.VALIDATION

    def __init__(self, field: str, detail: str) -> None:
        super().__init__(9003, f"Invalid {field}: {detail}", 422, {"field": field})


class CollaboratorUnavailableError(AppError):
    kind = ErrorKind.COLLABORATOR_UNAVAILABLE

    def __init__(self, collaborator: str, detail: str) -> None:
        super().__init__(
            9004,
            f"{collaborator} unavailable: {detail}",
            503,
            {"collaborator": collaborator},
        )


class InvariantViolationError(AppError):
    def __init__(self, detail: str, **context: Any) -> None:
        super().__init__(9005, f"Invariant violated: {detail}", 500, context)
