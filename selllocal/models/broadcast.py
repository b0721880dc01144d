"""Broadcast and BroadcastError models."""
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from selllocal.database import Base, IdType
from selllocal.utils.dates import utcnow, isoformat


class BroadcastStatus:
    DRAFT = 'draft'
    SCHEDULED = 'scheduled'
    SENDING = 'sending'
    SENT = 'sent'
    FAILED = 'failed'
    CANCELLED = 'cancelled'

    ALL = (DRAFT, SCHEDULED, SENDING, SENT, FAILED, CANCELLED)


BROADCAST_TYPES = ('new_arrival', 'promotion', 'announcement', 'custom')


class Broadcast(Base):
    """A WhatsApp message a seller sends to every opted-in subscriber."""

    __tablename__ = 'broadcast'

    id = Column(IdType, primary_key=True, autoincrement=True)
    seller_id = Column(IdType, ForeignKey('users.id'), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    message = Column(String(1000), nullable=False)
    type = Column(String(20), nullable=False, default='custom')
    product_id = Column(IdType, ForeignKey('product.id', ondelete='SET NULL'), nullable=True)
    promotion_id = Column(IdType, ForeignKey('promotion.id', ondelete='SET NULL'), nullable=True)
    store_link = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=BroadcastStatus.DRAFT)
    scheduled_at = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    total_recipients = Column(Integer, nullable=False, default=0)
    sent_count = Column(Integer, nullable=False, default=0)
    delivered_count = Column(Integer, nullable=False, default=0)
    failed_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    seller = relationship('User')
    product = relationship('Product')
    promotion = relationship('Promotion')
    errors = relationship(
        'BroadcastError',
        back_populates='broadcast',
        cascade="all, delete-orphan",
        order_by='BroadcastError.id'
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'scheduled', 'sending', 'sent', 'failed', 'cancelled')",
            name='broadcast_status_check'
        ),
    )

    def __repr__(self):
        return f"<Broadcast(id={self.id}, title='{self.title}', status='{self.status}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'seller': self.seller_id,
            'title': self.title,
            'message': self.message,
            'type': self.type,
            'product': {'id': self.product.id, 'name': self.product.name, 'slug': self.product.slug}
            if self.product else None,
            'promotion': {'id': self.promotion.id, 'name': self.promotion.name}
            if self.promotion else None,
            'storeLink': self.store_link,
            'status': self.status,
            'scheduledAt': isoformat(self.scheduled_at),
            'sentAt': isoformat(self.sent_at),
            'totalRecipients': self.total_recipients,
            'sentCount': self.sent_count,
            'deliveredCount': self.delivered_count,
            'failedCount': self.failed_count,
            'errors': [error.to_dict() for error in self.errors],
            'createdAt': isoformat(self.created_at),
        }


class BroadcastError(Base):
    """A failed delivery recorded while sending a broadcast."""

    __tablename__ = 'broadcast_error'

    id = Column(IdType, primary_key=True, autoincrement=True)
    broadcast_id = Column(IdType, ForeignKey('broadcast.id', ondelete='CASCADE'), nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    error = Column(Text, nullable=True)
    timestamp = Column(DateTime, nullable=False, default=utcnow)

    broadcast = relationship('Broadcast', back_populates='errors')

    def to_dict(self):
        return {'phone': self.phone, 'error': self.error, 'timestamp': isoformat(self.timestamp)}
