"""Broadcast opt-in list entries."""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from selllocal.database import Base, IdType
from selllocal.utils.dates import utcnow, isoformat

SUBSCRIPTION_SOURCES = ('manual', 'checkout', 'registration', 'product_page', 'admin')


class BroadcastSubscription(Base):
    """One phone number on one seller's broadcast list."""

    __tablename__ = 'broadcast_subscription'

    id = Column(IdType, primary_key=True, autoincrement=True)
    seller_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    buyer_id = Column(IdType, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    phone = Column(String(20), nullable=False)
    name = Column(String(200), nullable=True)
    is_subscribed = Column(Boolean, nullable=False, default=True)
    subscribed_at = Column(DateTime, nullable=False, default=utcnow)
    unsubscribed_at = Column(DateTime, nullable=True)
    source = Column(String(20), nullable=False, default='manual')
    opt_in_token = Column(String(64), nullable=True, unique=True)
    opt_out_token = Column(String(64), nullable=True, unique=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    seller = relationship('User', foreign_keys=[seller_id])
    buyer = relationship('User', foreign_keys=[buyer_id])

    __table_args__ = (
        UniqueConstraint('seller_id', 'phone', name='broadcast_subscription_seller_phone_key'),
    )

    def __repr__(self):
        return f"<BroadcastSubscription(id={self.id}, seller_id={self.seller_id}, phone='{self.phone}', subscribed={self.is_subscribed})>"

    def to_dict(self):
        return {
            'id': self.id,
            'seller': self.seller_id,
            'buyer': self.buyer.summary() if self.buyer else None,
            'phone': self.phone,
            'name': self.name,
            'isSubscribed': self.is_subscribed,
            'subscribedAt': isoformat(self.subscribed_at),
            'unsubscribedAt': isoformat(self.unsubscribed_at),
            'source': self.source,
        }
