"""Promotion model - seller-scoped, time-windowed discounts."""
from sqlalchemy import (
    Column, String, Boolean, Numeric, DateTime, ForeignKey, Table, CheckConstraint
)
from sqlalchemy.orm import relationship

from selllocal.database import Base, IdType
from selllocal.utils.dates import utcnow, isoformat
from selllocal.utils.money import money_json


class DiscountType:
    PERCENTAGE = 'percentage'
    ABSOLUTE = 'absolute'

    ALL = (PERCENTAGE, ABSOLUTE)


promotion_product = Table(
    'promotion_product',
    Base.metadata,
    Column('promotion_id', IdType, ForeignKey('promotion.id', ondelete='CASCADE'), primary_key=True),
    Column('product_id', IdType, ForeignKey('product.id', ondelete='CASCADE'), primary_key=True),
)


class Promotion(Base):
    """Discount applied to all of a seller's products or an explicit set."""

    __tablename__ = 'promotion'

    id = Column(IdType, primary_key=True, autoincrement=True)
    seller_id = Column(IdType, ForeignKey('users.id'), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    discount_type = Column(String(20), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=False)
    apply_to_all = Column(Boolean, nullable=False, default=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    code = Column(String(50), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    seller = relationship('User')
    products = relationship('Product', secondary=promotion_product, order_by='Product.id')

    __table_args__ = (
        CheckConstraint("discount_type IN ('percentage', 'absolute')", name='promotion_discount_type_check'),
        CheckConstraint('discount_value >= 0', name='promotion_discount_value_check'),
    )

    def __repr__(self):
        return f"<Promotion(id={self.id}, name='{self.name}', type='{self.discount_type}', value={self.discount_value})>"

    @property
    def product_ids(self):
        return {product.id for product in self.products}

    def is_valid(self, now=None):
        """Active flag set and now inside [start_date, end_date]."""
        from selllocal.services.pricing_service import is_promotion_active
        return is_promotion_active(self, now or utcnow())

    def apply_discount(self, price):
        from selllocal.services.pricing_service import apply_discount
        return apply_discount(price, self.discount_type, self.discount_value)

    def status(self, now=None):
        now = now or utcnow()
        if self.start_date > now:
            return 'upcoming'
        if self.end_date < now:
            return 'expired'
        return 'active' if self.is_active else 'inactive'

    def to_dict(self, now=None):
        return {
            'id': self.id,
            'seller': self.seller_id,
            'name': self.name,
            'description': self.description,
            'discountType': self.discount_type,
            'discountValue': money_json(self.discount_value),
            'applyToAll': self.apply_to_all,
            'products': [
                {
                    'id': product.id,
                    'name': product.name,
                    'slug': product.slug,
                    'basePrice': money_json(product.base_price),
                }
                for product in self.products
            ],
            'startDate': isoformat(self.start_date),
            'endDate': isoformat(self.end_date),
            'isActive': self.is_active,
            'code': self.code,
            'status': self.status(now),
            'createdAt': isoformat(self.created_at),
        }
