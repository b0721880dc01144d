"""Platform administration: seller approval, validity windows and toggles."""
import logging
import secrets
from datetime import timedelta

from flask import current_app
from sqlalchemy import func, or_

from selllocal.exceptions import BusinessLogicError, NotFoundError
from selllocal.models import ConfigSetting, Product, User, UserRole
from selllocal.services.broadcast_service import BROADCASTS_ENABLED_KEY, global_broadcasts_enabled
from selllocal.utils.dates import add_months, format_long_date, isoformat, utcnow
from selllocal.utils.pagination import pagination_dict, parse_pagination
from selllocal.utils.phone import normalize_indian_phone
from selllocal.utils.whatsapp import build_whatsapp_url

logger = logging.getLogger(__name__)

VERIFICATION_TTL = timedelta(days=7)
DEFAULT_ADMIN_EMAIL = 'admin@selllocalonline.com'


def get_contact_info(session):
    """Public admin contact: ADMIN_PHONE, else the first admin's phone."""
    phone = current_app.config.get('ADMIN_PHONE')
    if not phone:
        admin = session.query(User).filter(User.role == UserRole.ADMIN).order_by(User.id).first()
        phone = admin.phone if admin else None
    return {
        'whatsapp': phone,
        'email': current_app.config.get('ADMIN_EMAIL') or DEFAULT_ADMIN_EMAIL,
    }


def get_seller(session, seller_id):
    seller = session.query(User).filter(User.id == seller_id, User.role == UserRole.SELLER).first()
    if seller is None:
        raise NotFoundError('Seller not found')
    return seller


def list_sellers(session, args):
    query = session.query(User).filter(User.role == UserRole.SELLER)

    status = args.get('status')
    if status == 'pending':
        query = query.filter(User.is_approved == False)  # noqa: E712
    elif status == 'approved':
        query = query.filter(User.is_approved == True)  # noqa: E712
    elif status == 'active':
        query = query.filter(
            User.is_approved == True,  # noqa: E712
            User.is_active == True,  # noqa: E712
            User.is_suspended == False  # noqa: E712
        )
    elif status == 'inactive':
        query = query.filter(User.is_active == False)  # noqa: E712
    elif status == 'suspended':
        query = query.filter(User.is_suspended == True)  # noqa: E712

    search = (args.get('search') or '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            User.name.ilike(pattern),
            User.business_name.ilike(pattern),
            User.email.ilike(pattern)
        ))

    page, limit, offset = parse_pagination(args)
    total = query.count()
    sellers = query.order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit).all()

    seller_ids = [seller.id for seller in sellers]
    totals = dict(session.query(Product.seller_id, func.count(Product.id)).filter(
        Product.seller_id.in_(seller_ids)
    ).group_by(Product.seller_id).all()) if seller_ids else {}
    active = dict(session.query(Product.seller_id, func.count(Product.id)).filter(
        Product.seller_id.in_(seller_ids),
        Product.is_active == True  # noqa: E712
    ).group_by(Product.seller_id).all()) if seller_ids else {}

    rows = []
    for seller in sellers:
        row = seller.to_dict()
        row['productCount'] = totals.get(seller.id, 0)
        row['activeProductCount'] = active.get(seller.id, 0)
        rows.append(row)

    return {'sellers': rows, 'pagination': pagination_dict(page, limit, total)}


def get_stats(session):
    """Dashboard counters. Runs the trial expiry sweep first."""
    now = utcnow()
    suspended = User.auto_suspend_expired_sellers(session, now)
    session.commit()
    if suspended:
        logger.info(f"[ADMIN] Auto-suspended {suspended} expired seller(s)")

    def count(*criteria):
        return session.query(func.count(User.id)).filter(*criteria).scalar() or 0

    is_seller = User.role == UserRole.SELLER
    return {
        'totalSellers': count(is_seller),
        'pendingSellers': count(is_seller, User.is_approved == False),  # noqa: E712
        'activeSellers': count(
            is_seller,
            User.is_approved == True,  # noqa: E712
            User.is_active == True,  # noqa: E712
            User.is_suspended == False  # noqa: E712
        ),
        'suspendedSellers': count(is_seller, User.is_suspended == True),  # noqa: E712
        'totalBuyers': count(User.role == UserRole.BUYER),
        'totalProducts': session.query(func.count(Product.id)).scalar() or 0,
        'trialExpiringSoon': count(
            is_seller,
            User.trial_ends_at >= now,
            User.trial_ends_at <= now + timedelta(days=7),
            User.is_suspended == False  # noqa: E712
        ),
    }


def approve_seller(session, seller_id):
    seller = get_seller(session, seller_id)
    if not seller.phone_verified:
        raise BusinessLogicError(
            'Seller WhatsApp number is not verified yet. Send verification link first.'
        )

    seller.is_approved = True
    session.commit()
    logger.info(f"[ADMIN] Seller {seller.id} approved")

    text = (
        f"🎉 Congratulations {seller.name}!\n\n"
        f"Your SellLocal Online seller account for \"{seller.business_name}\" has been approved!\n\n"
        "You can now login and start adding products.\n\n"
        f"Your store URL: {seller.alias}\n\n"
        "Happy selling! 🚀"
    )
    return {
        'message': 'Seller approved successfully',
        'seller': seller.to_dict(),
        'notificationUrl': build_whatsapp_url(seller.phone, text),
    }


def send_phone_verification(session, seller_id):
    """Issue a fresh verification token and a WhatsApp link that carries it."""
    seller = get_seller(session, seller_id)
    if not seller.phone:
        raise BusinessLogicError('Seller phone number is missing')
    try:
        seller.phone = normalize_indian_phone(seller.phone)
    except ValueError as e:
        raise BusinessLogicError(str(e) or 'Invalid seller phone number')

    token = secrets.token_hex(24)
    expires_at = utcnow() + VERIFICATION_TTL
    seller.phone_verification_token = token
    seller.phone_verification_expires = expires_at
    seller.phone_verified = False
    session.commit()

    verify_url = f"{current_app.config['FRONTEND_URL']}/verify-phone?token={token}"
    text = (
        "🔒 SellLocal Online WhatsApp Number Verification\n\n"
        f"Hi {seller.name},\n\n"
        "Please verify your WhatsApp number to proceed with approval of your seller account.\n\n"
        f"✅ Tap this link to verify:\n{verify_url}\n\n"
        "If you did not request this, you can ignore this message."
    )
    return {
        'message': 'Verification link generated',
        'expiresAt': isoformat(expires_at),
        'verifyUrl': verify_url,
        'whatsappUrl': build_whatsapp_url(seller.phone, text),
    }


def toggle_seller(session, seller_id):
    seller = get_seller(session, seller_id)
    seller.is_active = not seller.is_active
    if seller.is_active:
        seller.is_suspended = False
    session.commit()
    return {
        'message': f"Seller {'activated' if seller.is_active else 'deactivated'}",
        'isActive': seller.is_active,
        'isSuspended': seller.is_suspended,
    }


def extend_validity(session, seller_id, months):
    """
    Push a seller's validity window out by whole months.

    Suspended sellers are extended from now, others from their current end.
    """
    seller = get_seller(session, seller_id)
    now = utcnow()
    base = now if seller.is_suspended else (seller.trial_ends_at or now)
    seller.trial_ends_at = add_months(base, months)
    seller.is_suspended = False
    seller.is_active = True
    session.commit()

    plural = 's' if months > 1 else ''
    text = (
        "✅ Account Extended!\n\n"
        f"Hi {seller.name},\n\n"
        f"Your SellLocal Online seller account has been extended by {months} month{plural}.\n\n"
        f"Your account is now active until {format_long_date(seller.trial_ends_at)}.\n\n"
        "You can now login and continue selling! 🚀"
    )
    return {
        'message': f'Account extended by {months} month{plural}',
        'trialEndsAt': isoformat(seller.trial_ends_at),
        'notificationUrl': build_whatsapp_url(seller.phone, text),
    }


def get_broadcasts_config(session):
    return {'enabled': global_broadcasts_enabled(session)}


def set_broadcasts_config(session, admin, enabled):
    ConfigSetting.set_value(
        session, BROADCASTS_ENABLED_KEY, enabled,
        description='Global switch for seller WhatsApp broadcasts',
        updated_by=admin.id
    )
    session.commit()
    logger.info(f"[ADMIN] Broadcasts {'enabled' if enabled else 'disabled'} globally by {admin.id}")
    return {
        'message': f"Broadcasts {'enabled' if enabled else 'disabled'} globally",
        'enabled': enabled,
    }


def get_seller_broadcasts(session, seller_id):
    seller = get_seller(session, seller_id)
    return {
        'sellerId': seller.id,
        'businessName': seller.business_name,
        'broadcastsEnabled': seller.broadcasts_enabled,
    }


def set_seller_broadcasts(session, seller_id, enabled):
    seller = get_seller(session, seller_id)
    seller.broadcasts_enabled = enabled
    session.commit()
    return {
        'message': f"Broadcasts {'enabled' if enabled else 'disabled'} for seller",
        'seller': {
            'id': seller.id,
            'name': seller.name,
            'businessName': seller.business_name,
            'broadcastsEnabled': seller.broadcasts_enabled,
        },
    }
