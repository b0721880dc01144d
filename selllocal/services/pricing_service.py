"""
Tiered price and promotion resolver.

Given a product and a quantity, work out the unit price a buyer pays:

1. Volume tiers: among tiers whose [min_quantity, max_quantity] range covers
   the quantity, the one with the highest min_quantity wins. Quantities no
   tier covers (including gaps between tiers) pay base_price.
2. Promotion: the first active promotion, in the order given, that applies
   to all products or lists this one. Promotions never stack.

Everything here is pure; callers load promotions with
active_promotions_for_seller, which fixes the iteration order to creation
order (Promotion.id ascending).
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from selllocal.utils.dates import utcnow
from selllocal.utils.money import to_money

ZERO = Decimal('0.00')
HUNDRED = Decimal('100')


@dataclass(frozen=True)
class PriceQuote:
    """Resolved unit price for one product and quantity."""
    unit_price: Decimal
    tier_price: Decimal
    original_price: Decimal
    promotion: Optional[object] = None

    @property
    def has_discount(self) -> bool:
        return self.promotion is not None and self.unit_price < self.tier_price


def _tier_value(tier, name):
    if isinstance(tier, dict):
        return tier.get(name)
    return getattr(tier, name)


def resolve_tier_price(base_price, tiers, quantity) -> Decimal:
    """
    Unit price for a quantity under a product's volume schedule.

    Falls back to base_price when no tier covers the quantity.
    """
    best = None
    best_min = None
    for tier in tiers or ():
        min_quantity = _tier_value(tier, 'min_quantity')
        max_quantity = _tier_value(tier, 'max_quantity')
        if quantity < min_quantity:
            continue
        if max_quantity is not None and quantity > max_quantity:
            continue
        if best_min is None or min_quantity > best_min:
            best = tier
            best_min = min_quantity

    if best is None:
        return to_money(base_price)
    return to_money(_tier_value(best, 'price'))


def is_promotion_active(promotion, now=None) -> bool:
    """Active flag set and now within [start_date, end_date]."""
    now = now or utcnow()
    if not promotion.is_active:
        return False
    return promotion.start_date <= now <= promotion.end_date


def apply_discount(price, discount_type, value) -> Decimal:
    """
    Apply a percentage or absolute discount. Never returns a negative price.

    Raises:
        ValueError: for an unknown discount type.
    """
    price = to_money(price)
    value = Decimal(str(value))
    if discount_type == 'percentage':
        discounted = price - (price * value / HUNDRED)
    elif discount_type == 'absolute':
        discounted = price - value
    else:
        raise ValueError(f'Unknown discount type: {discount_type}')
    return max(ZERO, to_money(discounted))


def promotion_applies_to(promotion, product_id) -> bool:
    if promotion.apply_to_all:
        return True
    return product_id in promotion.product_ids


def find_applicable_promotion(product_id, promotions: Iterable):
    """First promotion in iteration order that covers the product, or None."""
    for promotion in promotions or ():
        if promotion_applies_to(promotion, product_id):
            return promotion
    return None


def resolve_unit_price(product, quantity, promotions=()) -> PriceQuote:
    """Tier price for the quantity, then the applicable promotion, if any."""
    original_price = to_money(product.base_price)
    tier_price = resolve_tier_price(product.base_price, product.price_tiers, quantity)
    promotion = find_applicable_promotion(product.id, promotions)
    if promotion is None:
        return PriceQuote(tier_price, tier_price, original_price, None)
    unit_price = apply_discount(tier_price, promotion.discount_type, promotion.discount_value)
    return PriceQuote(unit_price, tier_price, original_price, promotion)


def active_promotions_for_seller(session, seller_id, now=None):
    """Currently valid promotions for a seller, oldest first."""
    from selllocal.models import Promotion

    now = now or utcnow()
    return session.query(Promotion).filter(
        Promotion.seller_id == seller_id,
        Promotion.is_active == True,  # noqa: E712
        Promotion.start_date <= now,
        Promotion.end_date >= now
    ).order_by(Promotion.id.asc()).all()


def storefront_promotion_fields(product, promotions):
    """
    Extra listing fields for a product under an active promotion.

    The discount is shown against base_price, the single-unit price.
    """
    promotion = find_applicable_promotion(product.id, promotions)
    if promotion is None:
        return {'hasPromotion': False}
    return {
        'hasPromotion': True,
        'promotion': {
            'name': promotion.name,
            'discountType': promotion.discount_type,
            'discountValue': float(promotion.discount_value),
        },
        'discountedPrice': float(
            apply_discount(product.base_price, promotion.discount_type, promotion.discount_value)
        ),
    }
