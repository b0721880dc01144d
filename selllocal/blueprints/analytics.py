"""Storefront tracking and seller analytics dashboards."""
from flask import Blueprint, g, jsonify, request

from selllocal.database import get_session
from selllocal.middleware import check_trial, protect, seller_only
from selllocal.schemas import parse_body
from selllocal.schemas.analytics import TrackEventInput
from selllocal.services import analytics_service

analytics_bp = Blueprint('analytics', __name__, url_prefix='/api/analytics')


def _client_ip():
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr


@analytics_bp.route('/track', methods=['POST'])
def track():
    data = parse_body(TrackEventInput, request.get_json(silent=True))
    result = analytics_service.track_event(
        get_session(), data,
        user_agent=request.headers.get('User-Agent'),
        ip_address=_client_ip(),
        referrer=request.headers.get('Referer')
    )
    return jsonify(result)


@analytics_bp.route('/overview')
@protect
@seller_only
@check_trial
def overview():
    period = request.args.get('period', analytics_service.DEFAULT_PERIOD)
    return jsonify(analytics_service.get_overview(get_session(), g.user, period))


@analytics_bp.route('/products/<int:product_id>')
@protect
@seller_only
@check_trial
def product_analytics(product_id):
    period = request.args.get('period', analytics_service.DEFAULT_PERIOD)
    return jsonify(analytics_service.get_product_analytics(get_session(), g.user, product_id, period))


@analytics_bp.route('/visitors')
@protect
@seller_only
@check_trial
def visitors():
    limit = request.args.get('limit', 100, type=int)
    return jsonify(analytics_service.get_visitors(
        get_session(), g.user,
        period=request.args.get('period', '30d'),
        limit=max(1, min(limit, 500))
    ))
