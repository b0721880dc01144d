"""Storefront analytics events."""
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship

from selllocal.database import Base, IdType
from selllocal.utils.dates import utcnow, isoformat


class EventType:
    PAGE_VIEW = 'page_view'
    PRODUCT_VIEW = 'product_view'
    ADD_TO_CART = 'add_to_cart'
    REMOVE_FROM_CART = 'remove_from_cart'
    CHECKOUT_INITIATED = 'checkout_initiated'
    CHECKOUT_COMPLETED = 'checkout_completed'
    VISITOR_REGISTRATION = 'visitor_registration'

    ALL = (
        PAGE_VIEW, PRODUCT_VIEW, ADD_TO_CART, REMOVE_FROM_CART,
        CHECKOUT_INITIATED, CHECKOUT_COMPLETED, VISITOR_REGISTRATION,
    )


class AnalyticsEvent(Base):
    """One tracked storefront interaction."""

    __tablename__ = 'analytics_event'

    id = Column(IdType, primary_key=True, autoincrement=True)
    seller_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    event_type = Column(String(30), nullable=False)
    session_id = Column(String(100), nullable=False)
    buyer_id = Column(IdType, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    product_id = Column(IdType, ForeignKey('product.id', ondelete='SET NULL'), nullable=True)
    page = Column(String(500), nullable=True)
    event_metadata = Column('metadata', JSON, nullable=False, default=dict)
    visitor_name = Column(String(200), nullable=True)
    visitor_phone = Column(String(20), nullable=True)
    user_agent = Column(String(500), nullable=True)
    ip_address = Column(String(64), nullable=True)
    referrer = Column(String(500), nullable=True)
    timestamp = Column(DateTime, nullable=False, default=utcnow)

    product = relationship('Product')

    __table_args__ = (
        Index('analytics_event_seller_time_idx', 'seller_id', 'timestamp'),
        Index('analytics_event_seller_type_idx', 'seller_id', 'event_type'),
    )

    def __repr__(self):
        return f"<AnalyticsEvent(id={self.id}, seller_id={self.seller_id}, type='{self.event_type}')>"

    def visitor_dict(self):
        return {
            'id': self.id,
            'visitorName': self.visitor_name,
            'visitorPhone': self.visitor_phone,
            'sessionId': self.session_id,
            'timestamp': isoformat(self.timestamp),
            'ipAddress': self.ip_address,
            'userAgent': self.user_agent,
            'metadata': dict(self.event_metadata or {}),
        }
