"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"
    COMPLETED = "COMPLETED"
    REFUNDED = "REFUNDED"
    CANCELLED = "CANCELLED"  # reserved: buyer abandons before paying, no event reaches it yet


class OrderEvent(str, Enum):
    """Events that drive the order state machine."""
    CREATE_ORDER = "CREATE_ORDER"
    DECLARE_PAYMENT_MADE = "DECLARE_PAYMENT_MADE"
    CONFIRM_PAYMENT = "CONFIRM_PAYMENT"
    REFUND = "REFUND"
    CONFIRM_COMPLETION = "CONFIRM_COMPLETION"


class PricingStrategy(str, Enum):
    FIXED = "FIXED"
    PERCENTAGE_OF_FOLLOWERS = "PERCENTAGE_OF_FOLLOWERS"


class Role(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


class DisclosureField(str, Enum):
    SELLER_CONTACT = "SELLER_CONTACT"
    PAYMENT_DETAILS = "PAYMENT_DETAILS"
    BUYER_CONTACT = "BUYER_CONTACT"


class OutcomeEventType(str, Enum):
    """Named outcomes emitted to the notification sink."""
    ORDER_CREATED = "ORDER_CREATED"
    PAYMENT_DECLARED = "PAYMENT_DECLARED"
    PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"
    ORDER_REFUNDED = "ORDER_REFUNDED"
    ORDER_COMPLETED = "ORDER_COMPLETED"


class PlatformSettingKey(str, Enum):
    FPS_NUMBER = "fps_number"
    PAYMENT_EMAIL = "payment_email"
    PAYMENT_METHODS = "payment_methods"


class ErrorKind(str, Enum):
    INVALID_TRANSITION = "INVALID_TRANSITION"
    UNAUTHORIZED = "UNAUTHORIZED"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    LISTING_UNAVAILABLE = "LISTING_UNAVAILABLE"
    SELF_PURCHASE = "SELF_PURCHASE"
    VALIDATION = "VALIDATION"
    COLLABORATOR_UNAVAILABLE = "COLLABORATOR_UNAVAILABLE"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"
