"""Out-of-stock availability requests from buyers to sellers."""
import logging
from datetime import timedelta

from flask import current_app

from selllocal.exceptions import BusinessLogicError, NotFoundError
from selllocal.models import AvailabilityRequest, Product, User, UserRole
from selllocal.utils.dates import utcnow
from selllocal.utils.whatsapp import build_whatsapp_url

logger = logging.getLogger(__name__)

NOT_PROVIDED = 'Not provided'


def request_availability(session, buyer, data):
    """
    Record a buyer's request and build the WhatsApp alert for the seller.

    A buyer may ask about the same product once per dedupe window.
    """
    seller = session.query(User).filter(
        User.alias == data.seller_alias,
        User.role == UserRole.SELLER
    ).first()
    if seller is None:
        raise NotFoundError('Seller not found')

    product = session.query(Product).filter(
        Product.id == data.product_id,
        Product.seller_id == seller.id
    ).first()
    if product is None:
        raise NotFoundError('Product not found')

    hours = current_app.config.get('AVAILABILITY_DEDUPE_HOURS', 24)
    recent = session.query(AvailabilityRequest.id).filter(
        AvailabilityRequest.product_id == product.id,
        AvailabilityRequest.buyer_id == buyer.id,
        AvailabilityRequest.created_at >= utcnow() - timedelta(hours=hours)
    ).first()
    if recent:
        raise BusinessLogicError('You have already requested this product recently')

    buyer_phone = buyer.phone or NOT_PROVIDED
    text = (
        "🔔 New Availability Request\n\n"
        f"Product: {product.name}\n"
        f"Buyer: {buyer.name}\n"
        f"Phone: {buyer_phone}\n"
        "\nPlease update stock if available."
    )

    request = AvailabilityRequest(
        product_id=product.id,
        seller_id=seller.id,
        buyer_id=buyer.id,
        buyer_name=buyer.name,
        buyer_phone=buyer_phone,
        product_name=product.name,
        status='notified',
        notified_at=utcnow(),
    )
    session.add(request)
    session.commit()
    logger.info(f"[AVAILABILITY] Buyer {buyer.id} asked seller {seller.id} about product {product.id}")

    return {
        'message': 'Availability request sent to seller',
        'request': request.to_dict(),
        'whatsappUrl': build_whatsapp_url(seller.phone, text),
    }


def list_for_seller(session, seller, limit=50):
    requests = session.query(AvailabilityRequest).filter(
        AvailabilityRequest.seller_id == seller.id
    ).order_by(AvailabilityRequest.created_at.desc(), AvailabilityRequest.id.desc()).limit(limit).all()
    return [request.to_dict() for request in requests]


def fulfill(session, seller, request_id):
    request = session.query(AvailabilityRequest).filter(
        AvailabilityRequest.id == request_id,
        AvailabilityRequest.seller_id == seller.id
    ).first()
    if request is None:
        raise NotFoundError('Request not found')

    request.status = 'fulfilled'
    request.fulfilled_at = utcnow()
    session.commit()
    return {'message': 'Request marked as fulfilled', 'request': request.to_dict()}
