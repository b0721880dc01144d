"""
Registration, login and profile management.

Sellers register unapproved with a trial window and wait for an admin;
buyers register against a seller's storefront and get a token immediately.
"""
import logging

from flask import current_app
from sqlalchemy import func

from selllocal.exceptions import AuthenticationError, BusinessLogicError, NotFoundError
from selllocal.middleware import generate_token, suspension_error
from selllocal.models import Product, User, UserRole
from selllocal.services import seo_service
from selllocal.utils.dates import utcnow
from selllocal.utils.phone import normalize_indian_phone
from selllocal.utils.slugify import create_unique_alias
from selllocal.utils.whatsapp import build_whatsapp_url

logger = logging.getLogger(__name__)


def _normalize_email(email):
    return (email or '').strip().lower()


def _normalize_phone(raw):
    try:
        return normalize_indian_phone(raw)
    except ValueError as e:
        raise BusinessLogicError(str(e) or 'Invalid phone number')


def _email_taken(session, email):
    return session.query(User.id).filter(func.lower(User.email) == email).first() is not None


def find_storefront_seller(session, alias):
    """Active seller for a storefront alias, or None."""
    return session.query(User).filter(
        User.alias == alias,
        User.role == UserRole.SELLER,
        User.is_active == True  # noqa: E712
    ).first()


def register_seller(session, data):
    """
    Create an unapproved seller account.

    Args:
        data: SellerRegistration

    Returns:
        Response body (no token: the seller must wait for approval)
    """
    phone = _normalize_phone(data.phone)
    email = _normalize_email(data.email)
    if _email_taken(session, email):
        raise BusinessLogicError('Email already registered')

    seller = User(
        email=email,
        name=data.name,
        phone=phone,
        role=UserRole.SELLER,
        business_name=data.business_name,
        alias=create_unique_alias(session, data.business_name),
        theme=data.theme or 'minimal',
        business_description=data.business_description,
        address_street=data.address.street,
        address_city=data.address.city,
        address_state=data.address.state,
        address_pincode=data.address.pincode,
        is_approved=False,
        phone_verified=False,
    )
    seller.set_password(data.password)
    seller.start_trial(current_app.config.get('TRIAL_MONTHS', 1))
    session.add(seller)
    session.commit()

    admin_phone = current_app.config.get('ADMIN_PHONE')
    if admin_phone:
        message = (
            f"New seller registration!\n\nName: {seller.name}\nBusiness: {seller.business_name}\n"
            f"Email: {seller.email}\nPhone: {data.phone}\n\n"
            f"Please review and approve on SellLocal Online admin panel."
        )
        logger.info(f"[AUTH] WhatsApp notification URL: {build_whatsapp_url(admin_phone, message)}")
    logger.info(f"[AUTH] Seller registered: {seller.email} ({seller.alias})")

    return {
        'message': 'Registration successful! Please wait for admin approval.',
        'seller': {
            'id': seller.id,
            'email': seller.email,
            'name': seller.name,
            'businessName': seller.business_name,
            'alias': seller.alias,
        },
    }


def register_buyer(session, data):
    """Create a buyer on a seller's storefront and log them in."""
    seller = find_storefront_seller(session, data.seller_alias)
    if seller is None:
        raise NotFoundError('Store not found')

    email = _normalize_email(data.email)
    if _email_taken(session, email):
        raise BusinessLogicError('Email already registered')

    buyer = User(
        email=email,
        name=data.name,
        phone=_normalize_phone(data.phone) if data.phone else None,
        role=UserRole.BUYER,
        registered_on_seller_id=seller.id,
        is_approved=True,
        is_active=True,
    )
    buyer.set_password(data.password)
    session.add(buyer)
    session.commit()
    logger.info(f"[AUTH] Buyer registered on {seller.alias}: {buyer.email}")

    return {
        'token': generate_token(buyer.id),
        'user': {'id': buyer.id, 'email': buyer.email, 'name': buyer.name, 'role': buyer.role},
    }


def login(session, data):
    user = session.query(User).filter(func.lower(User.email) == _normalize_email(data.email)).first()
    if user is None or not user.check_password(data.password):
        raise AuthenticationError('Invalid credentials')

    if user.role == UserRole.SELLER:
        was_suspended = user.is_suspended
        if user.check_and_suspend_if_expired():
            if not was_suspended:
                session.commit()
            raise suspension_error()

    if not user.is_active:
        raise AuthenticationError('Account has been deactivated')

    return {
        'token': generate_token(user.id),
        'user': {
            'id': user.id,
            'email': user.email,
            'name': user.name,
            'role': user.role,
            'businessName': user.business_name,
            'alias': user.alias,
            'isApproved': user.is_approved,
            'theme': user.theme,
        },
    }


def verify_phone(session, token):
    """Mark a seller's WhatsApp number verified from an emailed/WhatsApp'd link."""
    if not token:
        raise BusinessLogicError('Missing verification token')

    seller = session.query(User).filter(
        User.role == UserRole.SELLER,
        User.phone_verification_token == token,
        User.phone_verification_expires > utcnow()
    ).first()
    if seller is None:
        raise BusinessLogicError('Invalid or expired verification link')

    seller.phone_verified = True
    seller.phone_verification_token = None
    seller.phone_verification_expires = None
    session.commit()
    logger.info(f"[AUTH] Phone verified for seller {seller.id}")
    return {'message': 'WhatsApp number verified successfully'}


def _has_custom_seo(user):
    return bool(user.seo_meta_title or user.seo_meta_description or user.seo_keywords)


def _active_categories(session, seller_id):
    rows = session.query(Product.category).filter(
        Product.seller_id == seller_id,
        Product.is_active == True  # noqa: E712
    ).distinct().order_by(Product.category).all()
    return [row[0] for row in rows]


def update_profile(session, user, data):
    """
    Apply a partial profile update.

    Sellers must keep a complete address. A seller phone change resets
    verification. When a seller's location changes and no SEO was set by
    hand, the SEO fields are regenerated.
    """
    updates = {key: value for key, value in data.model_dump(exclude_unset=True).items() if value is not None}

    address_update = updates.pop('address', None)
    if address_update is not None:
        address_update = {key: value for key, value in address_update.items() if value is not None}

    if user.role == UserRole.SELLER:
        merged_address = user.address_dict()
        if address_update:
            merged_address.update(address_update)
        missing = [field for field, value in merged_address.items() if not str(value or '').strip()]
        if missing:
            if address_update is not None:
                raise BusinessLogicError(f"Complete address is required. Missing: {', '.join(missing)}")
            raise BusinessLogicError(
                'Complete address is required (street, city, state, pincode). '
                'Please fill in all address fields.'
            )

        location_changed = address_update is not None or updates.get('seo_local_area')
        if location_changed and not _has_custom_seo(user):
            seller_data = {
                'businessName': user.business_name,
                'businessDescription': user.business_description,
                'address': merged_address,
                'seoLocalArea': updates.get('seo_local_area') or user.seo_local_area,
            }
            generated = seo_service.auto_generate(seller_data, _active_categories(session, user.id))
            updates['seo_meta_title'] = updates.get('seo_meta_title') or generated['seoMetaTitle']
            updates['seo_meta_description'] = updates.get('seo_meta_description') or generated['seoMetaDescription']
            updates['seo_keywords'] = updates.get('seo_keywords') or generated['seoKeywords']
            if not updates.get('seo_local_area') and generated['seoLocalArea']:
                updates['seo_local_area'] = generated['seoLocalArea']
            logger.info(f"[AUTH] Regenerated hyperlocal SEO for seller {user.id}")

    if address_update:
        for field, value in address_update.items():
            setattr(user, f'address_{field}', value)

    if updates.get('phone'):
        phone = _normalize_phone(updates.pop('phone'))
        if user.role == UserRole.SELLER and phone != user.phone:
            user.phone_verified = False
            user.phone_verification_token = None
            user.phone_verification_expires = None
        user.phone = phone
    else:
        updates.pop('phone', None)

    for field, value in updates.items():
        setattr(user, field, value)

    session.commit()
    return user.to_dict()
