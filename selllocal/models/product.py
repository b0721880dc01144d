"""Product and PriceTier models."""
from sqlalchemy import (
    Column, String, Boolean, Integer, Numeric, DateTime, ForeignKey, JSON, Text,
    UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship

from selllocal.database import Base, IdType
from selllocal.utils.dates import utcnow, isoformat
from selllocal.utils.money import money_json

UNITS = ('piece', 'kg', 'gram', 'liter', 'ml', 'dozen', 'pack')


class Product(Base):
    """Seller-owned catalogue item with an optional volume price schedule."""

    __tablename__ = 'product'

    id = Column(IdType, primary_key=True, autoincrement=True)
    seller_id = Column(IdType, ForeignKey('users.id'), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(120), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    minimum_order_quantity = Column(Integer, nullable=False, default=1)
    images = Column(JSON, nullable=False, default=list)
    video_type = Column(String(10), nullable=True)
    video_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    stock = Column(Integer, nullable=False, default=0)
    unit = Column(String(20), nullable=False, default='piece')
    tags = Column(JSON, nullable=False, default=list)
    meta_title = Column(String(200), nullable=True)
    meta_description = Column(String(300), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    seller = relationship('User', back_populates='products')
    # Cascade delete-orphan: tiers live and die with the product
    price_tiers = relationship(
        'PriceTier',
        back_populates='product',
        cascade="all, delete-orphan",
        order_by='PriceTier.position'
    )

    __table_args__ = (
        UniqueConstraint('seller_id', 'slug', name='product_seller_slug_key'),
        CheckConstraint('base_price > 0', name='product_base_price_check'),
        CheckConstraint('minimum_order_quantity >= 1', name='product_moq_check'),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', slug='{self.slug}')>"

    @property
    def video(self):
        if not self.video_url:
            return None
        return {'type': self.video_type, 'url': self.video_url}

    def set_price_tiers(self, tiers):
        """Replace the price schedule with a list of {min_quantity, max_quantity, price} dicts."""
        self.price_tiers = [
            PriceTier(
                position=index,
                min_quantity=tier['min_quantity'],
                max_quantity=tier.get('max_quantity'),
                price=tier['price'],
            )
            for index, tier in enumerate(tiers or [])
        ]

    def get_price_for_quantity(self, quantity):
        """Unit price for a quantity before promotions."""
        from selllocal.services.pricing_service import resolve_tier_price
        return resolve_tier_price(self.base_price, self.price_tiers, quantity)

    def to_dict(self):
        return {
            'id': self.id,
            'seller': self.seller_id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'category': self.category,
            'basePrice': money_json(self.base_price),
            'priceTiers': [tier.to_dict() for tier in self.price_tiers],
            'minimumOrderQuantity': self.minimum_order_quantity,
            'images': list(self.images or []),
            'video': self.video,
            'isActive': self.is_active,
            'stock': self.stock,
            'unit': self.unit,
            'tags': list(self.tags or []),
            'metaTitle': self.meta_title,
            'metaDescription': self.meta_description,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }

    def summary(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'basePrice': money_json(self.base_price),
            'images': list(self.images or []),
        }


class PriceTier(Base):
    """One row of a product's volume price schedule."""

    __tablename__ = 'price_tier'

    id = Column(IdType, primary_key=True, autoincrement=True)
    product_id = Column(IdType, ForeignKey('product.id', ondelete='CASCADE'), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    min_quantity = Column(Integer, nullable=False)
    max_quantity = Column(Integer, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)

    product = relationship('Product', back_populates='price_tiers')

    __table_args__ = (
        CheckConstraint('min_quantity >= 1', name='price_tier_min_quantity_check'),
        CheckConstraint('price >= 0', name='price_tier_price_check'),
    )

    def __repr__(self):
        return f"<PriceTier(product_id={self.product_id}, min={self.min_quantity}, max={self.max_quantity}, price={self.price})>"

    def to_dict(self):
        return {
            'minQuantity': self.min_quantity,
            'maxQuantity': self.max_quantity,
            'price': money_json(self.price),
        }
