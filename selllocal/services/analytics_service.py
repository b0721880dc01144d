"""
Storefront analytics: event tracking and seller dashboards.

Aggregations that depend on date functions (hourly and daily buckets) are
folded in Python so the same code runs on PostgreSQL and SQLite.
"""
import logging
import random
import time
from collections import Counter
from datetime import timedelta

from sqlalchemy import func

from selllocal.exceptions import NotFoundError
from selllocal.models import AnalyticsEvent, EventType, Product, User, UserRole
from selllocal.utils.dates import utcnow

logger = logging.getLogger(__name__)

PERIODS = {
    '24h': timedelta(hours=24),
    '7d': timedelta(days=7),
    '30d': timedelta(days=30),
    '90d': timedelta(days=90),
}
DEFAULT_PERIOD = '7d'


def period_start(period, now=None):
    """Start of the window for a named period; unknown names mean 7 days."""
    now = now or utcnow()
    return now - PERIODS.get(period, PERIODS[DEFAULT_PERIOD])


def _days_in(period, default=7):
    """Parse '14d' style periods into a day count."""
    try:
        days = int(str(period).rstrip('d'))
    except (TypeError, ValueError):
        return default
    return days if days > 0 else default


def _rate(numerator, denominator, digits=1):
    if not denominator:
        return 0
    return round(numerator / denominator * 100, digits)


def anonymous_session_id():
    return f"anon_{int(time.time() * 1000)}_{random.random()}"


def record_event(session, seller_id, event_type, session_id=None, **fields):
    """Add an event to the current unit of work. The caller commits."""
    event = AnalyticsEvent(
        seller_id=seller_id,
        event_type=event_type,
        session_id=session_id or anonymous_session_id(),
        buyer_id=fields.get('buyer_id'),
        product_id=fields.get('product_id'),
        page=fields.get('page'),
        event_metadata=fields.get('metadata') or {},
        visitor_name=fields.get('visitor_name'),
        visitor_phone=fields.get('visitor_phone'),
        user_agent=fields.get('user_agent'),
        ip_address=fields.get('ip_address'),
        referrer=fields.get('referrer'),
    )
    session.add(event)
    return event


def track_event(session, data, user_agent=None, ip_address=None, referrer=None):
    """
    Record a public storefront event from a validated TrackEventInput.

    A visitor_registration carrying a phone also opts the visitor into the
    seller's broadcast list.
    """
    from selllocal.services import broadcast_service

    seller = session.query(User).filter(
        User.alias == data.seller_alias,
        User.role == UserRole.SELLER,
        User.is_active == True,  # noqa: E712
        User.is_approved == True  # noqa: E712
    ).first()
    if seller is None:
        raise NotFoundError('Seller not found')

    product_id = data.product_id
    if product_id is not None and session.get(Product, product_id) is None:
        product_id = None

    record_event(
        session, seller.id, data.event_type, data.session_id,
        buyer_id=data.buyer_id,
        product_id=product_id,
        page=data.page,
        metadata=data.metadata,
        visitor_name=data.visitor_name,
        visitor_phone=data.visitor_phone,
        user_agent=(user_agent or '')[:500] or None,
        ip_address=ip_address,
        referrer=(referrer or '')[:500] or None,
    )

    if data.event_type == EventType.VISITOR_REGISTRATION and data.visitor_phone:
        broadcast_service.opt_in_visitor(session, seller.id, data.visitor_phone, data.visitor_name)

    session.commit()
    return {'success': True}


def _count(session, seller_id, event_type, since, product_id=None):
    query = session.query(func.count(AnalyticsEvent.id)).filter(
        AnalyticsEvent.seller_id == seller_id,
        AnalyticsEvent.event_type == event_type,
        AnalyticsEvent.timestamp >= since
    )
    if product_id is not None:
        query = query.filter(AnalyticsEvent.product_id == product_id)
    return query.scalar() or 0


def _top_products(session, seller_id, since, limit=10):
    views = func.count(AnalyticsEvent.id).label('views')
    rows = session.query(
        AnalyticsEvent.product_id,
        Product.name,
        views,
        func.count(func.distinct(AnalyticsEvent.session_id)).label('unique_views')
    ).join(Product, Product.id == AnalyticsEvent.product_id).filter(
        AnalyticsEvent.seller_id == seller_id,
        AnalyticsEvent.event_type == EventType.PRODUCT_VIEW,
        AnalyticsEvent.timestamp >= since
    ).group_by(AnalyticsEvent.product_id, Product.name).order_by(views.desc()).limit(limit).all()

    return [
        {'productId': product_id, 'productName': name, 'views': count, 'uniqueViews': unique}
        for product_id, name, count, unique in rows
    ]


def _activity(session, seller_id, since):
    rows = session.query(AnalyticsEvent.timestamp, AnalyticsEvent.event_type).filter(
        AnalyticsEvent.seller_id == seller_id,
        AnalyticsEvent.timestamp >= since
    ).all()

    hours = Counter()
    days = {}
    daily_fields = {
        EventType.PAGE_VIEW: 'pageViews',
        EventType.PRODUCT_VIEW: 'productViews',
        EventType.ADD_TO_CART: 'addToCart',
        EventType.CHECKOUT_INITIATED: 'checkouts',
    }
    for timestamp, event_type in rows:
        hours[timestamp.hour] += 1
        day = days.setdefault(timestamp.strftime('%Y-%m-%d'), {
            'pageViews': 0, 'productViews': 0, 'addToCart': 0, 'checkouts': 0,
        })
        if event_type in daily_fields:
            day[daily_fields[event_type]] += 1

    hourly = [{'hour': hour, 'count': hours[hour]} for hour in sorted(hours)]
    daily = [dict(date=date, **days[date]) for date in sorted(days)]
    return hourly, daily


def get_overview(session, seller, period=DEFAULT_PERIOD):
    """Dashboard counters, conversion rates and activity series for a period."""
    since = period_start(period)
    seller_id = seller.id

    page_views = _count(session, seller_id, EventType.PAGE_VIEW, since)
    unique_visitors = session.query(func.count(func.distinct(AnalyticsEvent.session_id))).filter(
        AnalyticsEvent.seller_id == seller_id,
        AnalyticsEvent.event_type == EventType.PAGE_VIEW,
        AnalyticsEvent.timestamp >= since
    ).scalar() or 0
    product_views = _count(session, seller_id, EventType.PRODUCT_VIEW, since)
    add_to_cart = _count(session, seller_id, EventType.ADD_TO_CART, since)
    checkout_initiated = _count(session, seller_id, EventType.CHECKOUT_INITIATED, since)
    checkout_completed = _count(session, seller_id, EventType.CHECKOUT_COMPLETED, since)

    hourly, daily = _activity(session, seller_id, since)

    return {
        'overview': {
            'totalPageViews': page_views,
            'uniqueVisitors': unique_visitors,
            'productViews': product_views,
            'addToCartEvents': add_to_cart,
            'checkoutInitiated': checkout_initiated,
            'checkoutCompleted': checkout_completed,
            'cartToCheckoutRate': _rate(add_to_cart, product_views),
            'checkoutConversionRate': _rate(checkout_initiated, add_to_cart),
            'cartAbandonmentRate': _rate(add_to_cart - checkout_initiated, add_to_cart),
        },
        'topProducts': _top_products(session, seller_id, since),
        'hourlyActivity': hourly,
        'dailyActivity': daily,
        'period': period,
    }


def get_product_analytics(session, seller, product_id, period=DEFAULT_PERIOD):
    product = session.query(Product).filter(
        Product.id == product_id,
        Product.seller_id == seller.id
    ).first()
    if product is None:
        raise NotFoundError('Product not found')

    since = utcnow() - timedelta(days=_days_in(period))
    views = _count(session, seller.id, EventType.PRODUCT_VIEW, since, product_id=product.id)
    add_to_cart = _count(session, seller.id, EventType.ADD_TO_CART, since, product_id=product.id)
    return {
        'productViews': views,
        'addToCart': add_to_cart,
        'conversionRate': _rate(add_to_cart, views, digits=2),
    }


def get_visitors(session, seller, period='30d', limit=100):
    """Storefront visitors who left a name and phone, newest first."""
    since = utcnow() - timedelta(days=_days_in(period, default=30))
    events = session.query(AnalyticsEvent).filter(
        AnalyticsEvent.seller_id == seller.id,
        AnalyticsEvent.event_type == EventType.VISITOR_REGISTRATION,
        AnalyticsEvent.visitor_phone.isnot(None),
        AnalyticsEvent.timestamp >= since
    ).order_by(AnalyticsEvent.timestamp.desc(), AnalyticsEvent.id.desc()).limit(limit).all()

    visitors = [event.visitor_dict() for event in events]
    return {'visitors': visitors, 'total': len(visitors)}

