"""Cart and CartItem models."""
from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from selllocal.database import Base, IdType
from selllocal.utils.dates import utcnow
from selllocal.utils.money import money_json


class Cart(Base):
    """One open cart per buyer and seller."""

    __tablename__ = 'cart'

    id = Column(IdType, primary_key=True, autoincrement=True)
    buyer_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    seller_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    buyer = relationship('User', foreign_keys=[buyer_id])
    seller = relationship('User', foreign_keys=[seller_id])
    items = relationship(
        'CartItem',
        back_populates='cart',
        cascade="all, delete-orphan",
        order_by='CartItem.id'
    )

    __table_args__ = (
        UniqueConstraint('buyer_id', 'seller_id', name='cart_buyer_seller_key'),
    )

    def __repr__(self):
        return f"<Cart(id={self.id}, buyer_id={self.buyer_id}, seller_id={self.seller_id}, items={len(self.items)})>"

    def find_item(self, product_id):
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def to_dict(self):
        return {
            'id': self.id,
            'buyer': self.buyer_id,
            'seller': self.seller_id,
            'items': [item.to_dict() for item in self.items],
        }


class CartItem(Base):
    """Cart line. price_at_add is the tier price when the line was last changed."""

    __tablename__ = 'cart_item'

    id = Column(IdType, primary_key=True, autoincrement=True)
    cart_id = Column(IdType, ForeignKey('cart.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(IdType, ForeignKey('product.id', ondelete='CASCADE'), nullable=False)
    quantity = Column(Integer, nullable=False)
    price_at_add = Column(Numeric(10, 2), nullable=False)

    cart = relationship('Cart', back_populates='items')
    product = relationship('Product')

    __table_args__ = (
        CheckConstraint('quantity >= 1', name='cart_item_quantity_check'),
    )

    def __repr__(self):
        return f"<CartItem(product_id={self.product_id}, quantity={self.quantity}, price_at_add={self.price_at_add})>"

    def to_dict(self):
        return {
            'product': self.product_id,
            'quantity': self.quantity,
            'priceAtAdd': money_json(self.price_at_add),
        }
