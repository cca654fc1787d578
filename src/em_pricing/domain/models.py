"""Domain models for em_pricing: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class PlatformSetting:
    """One versioned key/value row; writes are last-write-wins per key."""

    key: str
    value: str | None
    version: int
    updated_by: str | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class PaymentInstructions:
    """Where buyers send money during PENDING_PAYMENT. Unset fields stay None."""

    fps_number: str | None
    payment_email: str | None
    payment_methods: str | None
