"""Seller promotion management."""
import logging

from selllocal.exceptions import BusinessLogicError, NotFoundError
from selllocal.models import Product, Promotion
from selllocal.schemas.promotion import check_promotion_values
from selllocal.utils.dates import utcnow

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ('name', 'description', 'discount_type', 'discount_value',
                    'start_date', 'end_date', 'apply_to_all', 'is_active')


def _load_products(session, seller_id, product_ids):
    """Resolve product ids, all of which must belong to the seller."""
    unique_ids = set(product_ids or ())
    if not unique_ids:
        return []
    products = session.query(Product).filter(
        Product.id.in_(unique_ids),
        Product.seller_id == seller_id
    ).all()
    if len(products) != len(unique_ids):
        raise BusinessLogicError('Some products are invalid')
    return products


def _normalize_code(code):
    return code.upper() if code else None


def get_seller_promotion(session, seller, promotion_id):
    promotion = session.query(Promotion).filter(
        Promotion.id == promotion_id,
        Promotion.seller_id == seller.id
    ).first()
    if promotion is None:
        raise NotFoundError('Promotion not found')
    return promotion


def list_promotions(session, seller, status=None):
    """
    A seller's promotions, newest first.

    status: 'active' (enabled and in window), 'upcoming' or 'expired'.
    """
    now = utcnow()
    query = session.query(Promotion).filter(Promotion.seller_id == seller.id)
    if status == 'active':
        query = query.filter(
            Promotion.is_active == True,  # noqa: E712
            Promotion.start_date <= now,
            Promotion.end_date >= now
        )
    elif status == 'upcoming':
        query = query.filter(Promotion.start_date > now)
    elif status == 'expired':
        query = query.filter(Promotion.end_date < now)

    promotions = query.order_by(Promotion.created_at.desc(), Promotion.id.desc()).all()
    return [promotion.to_dict(now) for promotion in promotions]


def create_promotion(session, seller, data):
    """Create a promotion from a validated PromotionInput."""
    promotion = Promotion(
        seller_id=seller.id,
        name=data.name,
        description=data.description,
        discount_type=data.discount_type,
        discount_value=data.discount_value,
        start_date=data.start_date,
        end_date=data.end_date,
        apply_to_all=data.apply_to_all,
        code=_normalize_code(data.code),
    )
    promotion.products = [] if data.apply_to_all else _load_products(session, seller.id, data.products)

    session.add(promotion)
    session.commit()
    logger.info(f"[PROMO] Promotion {promotion.id} '{promotion.name}' created by seller {seller.id}")
    return promotion.to_dict()


def update_promotion(session, seller, promotion_id, data):
    """Partial update; value checks run against the merged result."""
    promotion = get_seller_promotion(session, seller, promotion_id)
    updates = {key: value for key, value in data.model_dump(exclude_unset=True).items() if value is not None}

    merged = {field: updates.get(field, getattr(promotion, field)) for field in _EDITABLE_FIELDS}
    try:
        check_promotion_values(merged['discount_type'], merged['discount_value'],
                               merged['start_date'], merged['end_date'])
    except ValueError as e:
        raise BusinessLogicError(str(e))

    if 'products' in updates:
        promotion.products = _load_products(session, seller.id, updates['products'])
    for field in _EDITABLE_FIELDS:
        setattr(promotion, field, merged[field])
    if 'code' in updates:
        promotion.code = _normalize_code(updates['code'])
    if promotion.apply_to_all:
        promotion.products = []

    session.commit()
    return promotion.to_dict()


def toggle_promotion(session, seller, promotion_id):
    promotion = get_seller_promotion(session, seller, promotion_id)
    promotion.is_active = not promotion.is_active
    session.commit()
    state = 'activated' if promotion.is_active else 'deactivated'
    return {'message': f'Promotion {state}', 'isActive': promotion.is_active}


def delete_promotion(session, seller, promotion_id):
    promotion = get_seller_promotion(session, seller, promotion_id)
    session.delete(promotion)
    session.commit()
    return {'message': 'Promotion deleted successfully'}
