"""Out-of-stock availability requests from buyers."""
from sqlalchemy import Column, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from selllocal.database import Base, IdType
from selllocal.utils.dates import utcnow, isoformat


class AvailabilityRequest(Base):
    """A buyer asking a seller to restock a product."""

    __tablename__ = 'availability_request'

    id = Column(IdType, primary_key=True, autoincrement=True)
    product_id = Column(IdType, ForeignKey('product.id', ondelete='CASCADE'), nullable=False)
    seller_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    buyer_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    buyer_name = Column(String(200), nullable=False)
    buyer_phone = Column(String(20), nullable=False)
    product_name = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default='pending')
    notified_at = Column(DateTime, nullable=True)
    fulfilled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    product = relationship('Product')
    buyer = relationship('User', foreign_keys=[buyer_id])

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'notified', 'fulfilled')", name='availability_request_status_check'),
    )

    def __repr__(self):
        return f"<AvailabilityRequest(id={self.id}, product_id={self.product_id}, status='{self.status}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'product': self.product.summary() if self.product else self.product_id,
            'seller': self.seller_id,
            'buyer': self.buyer.summary() if self.buyer else self.buyer_id,
            'buyerName': self.buyer_name,
            'buyerPhone': self.buyer_phone,
            'productName': self.product_name,
            'status': self.status,
            'notifiedAt': isoformat(self.notified_at),
            'fulfilledAt': isoformat(self.fulfilled_at),
            'createdAt': isoformat(self.created_at),
        }
