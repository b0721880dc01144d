"""
WhatsApp broadcasts and the subscriber lists behind them.

Sending is gated by two admin switches: the global ``broadcasts_enabled``
config row and the seller's own ``broadcasts_enabled`` column. Both are
read into a BroadcastContext once per request.
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy import func

from selllocal.blueprints.metrics import broadcast_messages_total
from selllocal.exceptions import BusinessLogicError, NotFoundError
from selllocal.models import (
    Broadcast, BroadcastError, BroadcastStatus, BroadcastSubscription, ConfigSetting,
    Product, Promotion, User, UserRole
)
from selllocal.utils.dates import utcnow
from selllocal.utils.pagination import pagination_dict, parse_pagination
from selllocal.utils.phone import normalize_indian_phone
from selllocal.utils.whatsapp import build_broadcast_message, generate_token, send_whatsapp_message

logger = logging.getLogger(__name__)

BROADCASTS_ENABLED_KEY = 'broadcasts_enabled'

GLOBAL_DISABLED_REASON = 'Broadcasts are disabled globally by admin'
SELLER_DISABLED_REASON = 'Broadcasts are disabled for this seller by admin'


@dataclass(frozen=True)
class BroadcastContext:
    """Resolved admin switches for one seller."""
    global_enabled: bool
    seller_enabled: bool

    @property
    def can_send(self) -> bool:
        return self.global_enabled and self.seller_enabled

    @property
    def reason(self) -> Optional[str]:
        if not self.global_enabled:
            return GLOBAL_DISABLED_REASON
        if not self.seller_enabled:
            return SELLER_DISABLED_REASON
        return None

    def to_dict(self):
        return {
            'globalEnabled': self.global_enabled,
            'sellerEnabled': self.seller_enabled,
            'canSend': self.can_send,
            'reason': self.reason,
        }


def global_broadcasts_enabled(session) -> bool:
    return ConfigSetting.get_value(session, BROADCASTS_ENABLED_KEY, True) is True


def build_broadcast_context(session, seller) -> BroadcastContext:
    return BroadcastContext(
        global_enabled=global_broadcasts_enabled(session),
        seller_enabled=seller.broadcasts_enabled is not False,
    )


def _opt_out_link(subscription):
    return f"{current_app.config['FRONTEND_URL']}/unsubscribe?token={subscription.opt_out_token}"


def _ensure_opt_out_token(subscription):
    if not subscription.opt_out_token:
        subscription.opt_out_token = generate_token()
    return subscription.opt_out_token


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------

def list_subscriptions(session, seller, args):
    page, limit, offset = parse_pagination(args, default_limit=50)
    query = session.query(BroadcastSubscription).filter(BroadcastSubscription.seller_id == seller.id)

    status = args.get('status', 'all')
    if status == 'subscribed':
        query = query.filter(BroadcastSubscription.is_subscribed == True)  # noqa: E712
    elif status == 'unsubscribed':
        query = query.filter(BroadcastSubscription.is_subscribed == False)  # noqa: E712

    total = query.count()
    subscriptions = query.order_by(
        BroadcastSubscription.created_at.desc(), BroadcastSubscription.id.desc()
    ).offset(offset).limit(limit).all()

    subscribed = session.query(func.count(BroadcastSubscription.id)).filter(
        BroadcastSubscription.seller_id == seller.id,
        BroadcastSubscription.is_subscribed == True  # noqa: E712
    ).scalar() or 0
    everyone = session.query(func.count(BroadcastSubscription.id)).filter(
        BroadcastSubscription.seller_id == seller.id
    ).scalar() or 0

    return {
        'subscriptions': [subscription.to_dict() for subscription in subscriptions],
        'pagination': pagination_dict(page, limit, total),
        'stats': {
            'total': everyone,
            'subscribed': subscribed,
            'unsubscribed': everyone - subscribed,
        },
    }


def _upsert_subscription(session, seller_id, phone, name=None, buyer_id=None, source='manual'):
    """Subscribe a normalized phone, re-subscribing an opted-out row. No commit."""
    subscription = session.query(BroadcastSubscription).filter(
        BroadcastSubscription.seller_id == seller_id,
        BroadcastSubscription.phone == phone
    ).first()

    if subscription is None:
        subscription = BroadcastSubscription(
            seller_id=seller_id,
            buyer_id=buyer_id,
            phone=phone,
            name=name or '',
            is_subscribed=True,
            source=source,
            opt_in_token=generate_token(),
        )
        session.add(subscription)
    elif not subscription.is_subscribed:
        subscription.is_subscribed = True
        subscription.subscribed_at = utcnow()
        subscription.unsubscribed_at = None
        subscription.opt_out_token = None
        subscription.opt_in_token = generate_token()
    return subscription


def subscribe(session, data, user=None):
    """
    Opt a phone number into a seller's list.

    Sellers add to their own list; visitors and buyers name the seller.
    """
    if not data.phone:
        raise BusinessLogicError('Phone number is required')
    try:
        phone = normalize_indian_phone(data.phone)
    except ValueError:
        raise BusinessLogicError('Invalid phone number format')

    if data.seller_id:
        seller = session.get(User, data.seller_id)
    elif user is not None and user.role == UserRole.SELLER:
        seller = user
    else:
        raise BusinessLogicError('Seller ID is required')
    if seller is None or seller.role != UserRole.SELLER:
        raise NotFoundError('Seller not found')

    is_buyer = user is not None and user.role == UserRole.BUYER
    source = data.source or ('registration' if is_buyer else 'manual')
    subscription = _upsert_subscription(
        session, seller.id, phone,
        name=data.name or (user.name if user is not None else ''),
        buyer_id=user.id if is_buyer else None,
        source=source
    )
    session.commit()
    logger.info(f"[BROADCAST] {phone} subscribed to seller {seller.id}")

    return {
        'message': 'Successfully subscribed to updates',
        'subscription': {
            'phone': subscription.phone,
            'name': subscription.name,
            'isSubscribed': subscription.is_subscribed,
        },
    }


def opt_in_visitor(session, seller_id, raw_phone, name=None):
    """Subscribe a storefront visitor. Invalid numbers are skipped. No commit."""
    try:
        phone = normalize_indian_phone(raw_phone)
    except ValueError:
        logger.info(f"[BROADCAST] Skipping opt-in for invalid phone on seller {seller_id}")
        return None
    return _upsert_subscription(session, seller_id, phone, name=name, source='registration')


def unsubscribe(session, data):
    """Opt out by opt-out token, or by phone plus seller id."""
    if not data.token and not data.phone:
        raise BusinessLogicError('Phone number or token is required')

    if data.token:
        subscription = session.query(BroadcastSubscription).filter(
            BroadcastSubscription.opt_out_token == data.token
        ).first()
    else:
        if not data.seller_id:
            raise BusinessLogicError('Seller ID is required when using phone number')
        try:
            phone = normalize_indian_phone(data.phone)
        except ValueError:
            raise BusinessLogicError('Invalid phone number format')
        subscription = session.query(BroadcastSubscription).filter(
            BroadcastSubscription.seller_id == data.seller_id,
            BroadcastSubscription.phone == phone
        ).first()

    if subscription is None:
        raise NotFoundError('Subscription not found')
    if not subscription.is_subscribed:
        return {'message': 'Already unsubscribed'}

    subscription.is_subscribed = False
    subscription.unsubscribed_at = utcnow()
    subscription.opt_out_token = generate_token()
    session.commit()
    return {'message': 'Successfully unsubscribed from updates'}


def get_opt_out_link(session, seller, subscription_id):
    subscription = session.query(BroadcastSubscription).filter(
        BroadcastSubscription.id == subscription_id,
        BroadcastSubscription.seller_id == seller.id
    ).first()
    if subscription is None:
        raise NotFoundError('Subscription not found')

    if not subscription.opt_out_token:
        _ensure_opt_out_token(subscription)
        session.commit()
    return {'optOutLink': _opt_out_link(subscription)}


# ---------------------------------------------------------------------------
# Broadcasts
# ---------------------------------------------------------------------------

def get_seller_broadcast(session, seller, broadcast_id):
    broadcast = session.query(Broadcast).filter(
        Broadcast.id == broadcast_id,
        Broadcast.seller_id == seller.id
    ).first()
    if broadcast is None:
        raise NotFoundError('Broadcast not found')
    return broadcast


def list_broadcasts(session, seller, args):
    page, limit, offset = parse_pagination(args)
    query = session.query(Broadcast).filter(Broadcast.seller_id == seller.id)
    if args.get('status'):
        query = query.filter(Broadcast.status == args.get('status'))

    total = query.count()
    broadcasts = query.order_by(Broadcast.created_at.desc(), Broadcast.id.desc()).offset(offset).limit(limit).all()
    return {
        'broadcasts': [broadcast.to_dict() for broadcast in broadcasts],
        'pagination': pagination_dict(page, limit, total),
    }


def _check_references(session, seller, product_id, promotion_id):
    if product_id is not None:
        product = session.get(Product, product_id)
        if product is None or product.seller_id != seller.id:
            raise NotFoundError('Product not found')
    if promotion_id is not None:
        promotion = session.get(Promotion, promotion_id)
        if promotion is None or promotion.seller_id != seller.id:
            raise NotFoundError('Promotion not found')


def create_broadcast(session, seller, data):
    _check_references(session, seller, data.product_id, data.promotion_id)
    broadcast = Broadcast(
        seller_id=seller.id,
        title=data.title,
        message=data.message,
        type=data.type,
        product_id=data.product_id,
        promotion_id=data.promotion_id,
        store_link=f"{current_app.config['FRONTEND_URL']}/store/{seller.alias}",
        scheduled_at=data.scheduled_at,
        status=BroadcastStatus.SCHEDULED if data.scheduled_at else BroadcastStatus.DRAFT,
    )
    session.add(broadcast)
    session.commit()
    return broadcast.to_dict()


def update_broadcast(session, seller, broadcast_id, data):
    broadcast = get_seller_broadcast(session, seller, broadcast_id)
    if broadcast.status in (BroadcastStatus.SENT, BroadcastStatus.SENDING):
        raise BusinessLogicError('Cannot edit a broadcast that has been sent')

    updates = {key: value for key, value in data.model_dump(exclude_unset=True).items() if value is not None}
    _check_references(session, seller, updates.get('product_id'), updates.get('promotion_id'))
    for field in ('title', 'message', 'type', 'product_id', 'promotion_id'):
        if field in updates:
            setattr(broadcast, field, updates[field])
    if 'scheduled_at' in updates:
        broadcast.scheduled_at = updates['scheduled_at']
        broadcast.status = BroadcastStatus.SCHEDULED

    session.commit()
    return broadcast.to_dict()


def delete_broadcast(session, seller, broadcast_id):
    broadcast = get_seller_broadcast(session, seller, broadcast_id)
    if broadcast.status == BroadcastStatus.SENT:
        raise BusinessLogicError('Cannot delete a broadcast that has been sent')
    session.delete(broadcast)
    session.commit()
    return {'message': 'Broadcast deleted successfully'}


def compose_base_message(broadcast):
    """Broadcast body plus the product and promotion links it references."""
    message = broadcast.message
    if broadcast.product is not None and broadcast.store_link:
        message += f"\n\n🛍️ View Product: {broadcast.store_link}/product/{broadcast.product.slug}"
    if broadcast.promotion_id is not None and broadcast.store_link:
        message += f"\n\n🎉 Check out our promotion: {broadcast.store_link}"
    return message


def send_broadcast(session, seller, broadcast_id):
    """
    Deliver a broadcast to every subscribed number, one at a time.

    Status goes draft/scheduled -> sending -> sent. An unexpected error marks
    the broadcast failed and is re-raised.
    """
    broadcast = get_seller_broadcast(session, seller, broadcast_id)
    if broadcast.status in (BroadcastStatus.SENT, BroadcastStatus.SENDING):
        raise BusinessLogicError('Broadcast has already been sent')

    subscriptions = session.query(BroadcastSubscription).filter(
        BroadcastSubscription.seller_id == seller.id,
        BroadcastSubscription.is_subscribed == True  # noqa: E712
    ).order_by(BroadcastSubscription.id).all()
    if not subscriptions:
        raise BusinessLogicError('No subscribed recipients found')

    broadcast.status = BroadcastStatus.SENDING
    broadcast.total_recipients = len(subscriptions)
    session.commit()

    delay = current_app.config.get('BROADCAST_SEND_DELAY', 0.2)
    results = {'sent': 0, 'failed': 0, 'errors': []}
    try:
        base_message = compose_base_message(broadcast)
        for index, subscription in enumerate(subscriptions):
            _ensure_opt_out_token(subscription)
            message = build_broadcast_message(base_message, broadcast.store_link, _opt_out_link(subscription))

            result = send_whatsapp_message(subscription.phone, message)
            if result['success']:
                results['sent'] += 1
                broadcast_messages_total.labels(result='sent').inc()
            else:
                results['failed'] += 1
                results['errors'].append({'phone': subscription.phone, 'error': result['error']})
                broadcast.errors.append(BroadcastError(phone=subscription.phone, error=result['error']))
                broadcast_messages_total.labels(result='failed').inc()

            if delay and index < len(subscriptions) - 1:
                time.sleep(delay)

        broadcast.status = BroadcastStatus.SENT
        broadcast.sent_at = utcnow()
        broadcast.sent_count = results['sent']
        broadcast.failed_count = results['failed']
        session.commit()
    except Exception:
        session.rollback()
        broadcast = session.get(Broadcast, broadcast_id)
        if broadcast is not None:
            broadcast.status = BroadcastStatus.FAILED
            session.commit()
        logger.exception(f"[BROADCAST] Sending broadcast {broadcast_id} failed")
        raise

    logger.info(
        f"[BROADCAST] Broadcast {broadcast.id} sent: {results['sent']} delivered, {results['failed']} failed"
    )
    return {'message': 'Broadcast sent successfully', 'broadcast': broadcast.to_dict(), 'results': results}
