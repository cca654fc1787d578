"""Listing price resolution.

FIXED                     -> fixed_price (0 when unset)
PERCENTAGE_OF_FOLLOWERS   -> round_half_up(follower_count * rate / 100), whole units

Called once at order creation; the result is snapshotted into the order.
"""

from decimal import Decimal

from src.em_common.enums import PricingStrategy
from src.em_common.errors import DomainValidationError
from src.em_common.money import round_half_up_unit, to_money
from src.em_listing.domain.models import Listing

_ZERO = Decimal("0.00")
_HUNDRED = Decimal(100)


def validate_pricing(
    strategy: PricingStrategy | None,
    fixed_price: Decimal | None,
    percentage_rate: Decimal | None,
) -> None:
    """Reject malformed pricing inputs before anything is written."""
    if strategy is None:
        raise DomainValidationError("pricing_strategy", "is required")
    if strategy == PricingStrategy.FIXED:
        if fixed_price is not None and fixed_price < 0:
            raise DomainValidationError("fixed_price", "must be >= 0")
        if percentage_rate is not None:
            raise DomainValidationError("percentage_rate", "not allowed for FIXED pricing")
        return
    if fixed_price is not None:
        raise DomainValidationError("fixed_price", "not allowed for percentage pricing")
    if percentage_rate is None:
        raise DomainValidationError("percentage_rate", "required for percentage pricing")
    if not (_ZERO <= percentage_rate <= _HUNDRED):
        raise DomainValidationError("percentage_rate", "must be within 0..100")


def resolve_price(listing: Listing) -> Decimal:
    if listing.pricing_strategy == PricingStrategy.FIXED:
        if listing.fixed_price is None:
            return _ZERO
        return to_money(listing.fixed_price)

    validate_pricing(listing.pricing_strategy, None, listing.percentage_rate)
    rate = Decimal(listing.percentage_rate)  # type: ignore[arg-type]
    return round_half_up_unit(Decimal(listing.follower_count) * rate / _HUNDRED)
