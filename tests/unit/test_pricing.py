"""
Unit tests for the tier and promotion price resolver.
"""

from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from selllocal.services.pricing_service import (
    apply_discount, find_applicable_promotion, is_promotion_active,
    resolve_tier_price, resolve_unit_price
)
from selllocal.utils.dates import utcnow

TIERS = [
    {'min_quantity': 10, 'max_quantity': 49, 'price': Decimal('90.00')},
    {'min_quantity': 50, 'max_quantity': None, 'price': Decimal('80.00')},
]


def make_promotion(promotion_id, discount_type='percentage', value='10', apply_to_all=True, product_ids=()):
    now = utcnow()
    return SimpleNamespace(
        id=promotion_id,
        discount_type=discount_type,
        discount_value=Decimal(value),
        apply_to_all=apply_to_all,
        product_ids=set(product_ids),
        is_active=True,
        start_date=now - timedelta(days=1),
        end_date=now + timedelta(days=1),
    )


class TestTierPrice:
    """Volume tier selection."""

    def test_below_first_tier_pays_base(self):
        assert resolve_tier_price(Decimal('100'), TIERS, 5) == Decimal('100.00')

    def test_quantity_inside_tier(self):
        assert resolve_tier_price(Decimal('100'), TIERS, 10) == Decimal('90.00')
        assert resolve_tier_price(Decimal('100'), TIERS, 49) == Decimal('90.00')

    def test_open_ended_tier(self):
        assert resolve_tier_price(Decimal('100'), TIERS, 500) == Decimal('80.00')

    def test_open_ended_schedule(self):
        tiers = [
            {'min_quantity': 1, 'price': Decimal('100')},
            {'min_quantity': 10, 'price': Decimal('90')},
            {'min_quantity': 50, 'price': Decimal('80')},
        ]
        prices = [resolve_tier_price(Decimal('120'), tiers, q) for q in (5, 10, 49, 50)]
        assert prices == [Decimal('100.00'), Decimal('90.00'), Decimal('90.00'), Decimal('80.00')]

    def test_gap_between_tiers_falls_back_to_base(self):
        tiers = [
            {'min_quantity': 1, 'max_quantity': 5, 'price': Decimal('95')},
            {'min_quantity': 10, 'max_quantity': None, 'price': Decimal('85')},
        ]
        assert resolve_tier_price(Decimal('100'), tiers, 7) == Decimal('100.00')

    def test_overlapping_tiers_highest_minimum_wins(self):
        tiers = [
            {'min_quantity': 1, 'max_quantity': None, 'price': Decimal('95')},
            {'min_quantity': 20, 'max_quantity': None, 'price': Decimal('70')},
        ]
        assert resolve_tier_price(Decimal('100'), tiers, 25) == Decimal('70.00')

    def test_no_tiers(self):
        assert resolve_tier_price('49.999', [], 3) == Decimal('50.00')


class TestDiscount:
    """Percentage and absolute discounts."""

    def test_percentage(self):
        assert apply_discount(Decimal('200'), 'percentage', 15) == Decimal('170.00')

    def test_absolute(self):
        assert apply_discount(Decimal('200'), 'absolute', 25) == Decimal('175.00')

    def test_hundred_rupee_examples(self):
        assert apply_discount(Decimal('100'), 'percentage', 20) == Decimal('80.00')
        assert apply_discount(Decimal('100'), 'absolute', 30) == Decimal('70.00')
        assert apply_discount(Decimal('100'), 'absolute', 150) == Decimal('0.00')

    def test_never_negative(self):
        assert apply_discount(Decimal('20'), 'absolute', 50) == Decimal('0.00')
        assert apply_discount(Decimal('20'), 'percentage', 150) == Decimal('0.00')

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            apply_discount(Decimal('20'), 'bogus', 5)


class TestPromotionSelection:
    """Promotion window and ordering."""

    def test_window(self):
        promotion = make_promotion(1)
        assert is_promotion_active(promotion) is True

        promotion.is_active = False
        assert is_promotion_active(promotion) is False

    def test_future_window(self):
        promotion = make_promotion(1)
        promotion.start_date = utcnow() + timedelta(days=2)
        promotion.end_date = utcnow() + timedelta(days=5)
        assert is_promotion_active(promotion) is False

    def test_expired_window(self):
        promotion = make_promotion(1)
        promotion.end_date = utcnow() - timedelta(hours=1)
        assert is_promotion_active(promotion) is False

    def test_first_matching_promotion_wins(self):
        specific = make_promotion(1, apply_to_all=False, product_ids=[7])
        store_wide = make_promotion(2)
        assert find_applicable_promotion(7, [specific, store_wide]) is specific
        assert find_applicable_promotion(8, [specific, store_wide]) is store_wide

    def test_no_promotion_applies(self):
        specific = make_promotion(1, apply_to_all=False, product_ids=[7])
        assert find_applicable_promotion(9, [specific]) is None


class TestUnitPrice:
    """Tier price followed by the promotion."""

    def test_promotion_applies_to_tier_price(self):
        product = SimpleNamespace(id=3, base_price=Decimal('100'), price_tiers=TIERS)
        quote = resolve_unit_price(product, 10, [make_promotion(1, value='10')])

        assert quote.tier_price == Decimal('90.00')
        assert quote.unit_price == Decimal('81.00')
        assert quote.original_price == Decimal('100.00')
        assert quote.has_discount is True

    def test_without_promotion(self):
        product = SimpleNamespace(id=3, base_price=Decimal('100'), price_tiers=TIERS)
        quote = resolve_unit_price(product, 2)

        assert quote.unit_price == Decimal('100.00')
        assert quote.promotion is None
        assert quote.has_discount is False
