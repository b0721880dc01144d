"""Google Merchant Center feed endpoints."""
import logging

from flask import Blueprint, Response, g, jsonify

from selllocal.database import get_session
from selllocal.exceptions import NotFoundError
from selllocal.middleware import protect, seller_only
from selllocal.services import merchant_feed_service

logger = logging.getLogger(__name__)

merchant_feed_bp = Blueprint('merchant_feed', __name__, url_prefix='/api/merchant-feed')

XML_MIMETYPE = 'application/xml; charset=utf-8'


def _xml_response(body, status=200, cache=False):
    response = Response(body, status=status, content_type=XML_MIMETYPE)
    if cache:
        response.headers['Cache-Control'] = 'public, max-age=3600'
    return response


@merchant_feed_bp.route('/my-feed-url')
@protect
@seller_only
def my_feed_url():
    return jsonify(merchant_feed_service.get_feed_url(get_session(), g.user))


@merchant_feed_bp.route('/feed-info')
@protect
@seller_only
def feed_info():
    return jsonify(merchant_feed_service.get_feed_info(get_session(), g.user))


@merchant_feed_bp.route('/<int:seller_id>/feed.xml')
def feed(seller_id):
    """Public XML feed. Errors are reported as XML, not JSON."""
    try:
        body = merchant_feed_service.generate_feed(get_session(), seller_id)
    except NotFoundError as e:
        return _xml_response(merchant_feed_service.error_document(e.message), status=404)
    except Exception as e:
        logger.exception(f"[FEED] Failed to build feed for seller {seller_id}: {e}")
        get_session().rollback()
        return _xml_response(merchant_feed_service.error_document('Error generating feed'), status=500)
    return _xml_response(body, cache=True)
