"""Platform fee split: computed once at order creation and snapshotted."""

from decimal import Decimal

from src.em_common.errors import DomainValidationError
from src.em_common.money import apply_bps, to_money
from src.em_order.domain.models import FeeSplit


def compute_fee_split(listing_price: Decimal, fee_bps: int) -> FeeSplit:
    """fee = round_half_up(price * bps / 10000); payout = price - fee.

    Payout is derived by subtraction so fee + payout == price holds exactly.
    """
    if not (0 <= fee_bps <= 10000):
        raise DomainValidationError("fee_bps", f"must be within 0..10000, got {fee_bps}")
    price = to_money(listing_price)
    if price < 0:
        raise DomainValidationError("listing_price", f"must be >= 0, got {price}")
    fee = apply_bps(price, fee_bps)
    return FeeSplit(listing_price=price, platform_fee=fee, seller_payout=price - fee)
