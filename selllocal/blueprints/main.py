"""Health check endpoints."""
from flask import Blueprint, jsonify

from selllocal import database
from selllocal.services.cache_service import get_category_cache
from selllocal.utils.dates import isoformat, utcnow

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Database health check.

    Returns:
        200: Healthy (DB connected)
        500: Unhealthy (DB error)
    """
    try:
        if database.ping():
            return jsonify({
                'status': 'healthy',
                'database': 'connected',
                'message': 'Database connection successful'
            }), 200
        return jsonify({
            'status': 'unhealthy',
            'database': 'error',
            'message': 'Unexpected query result'
        }), 500
    except Exception as e:
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'error': str(e),
            'message': 'Failed to connect to database'
        }), 500


@main_bp.route('/health/cache')
def health_cache():
    """Cache health. Never 500: the API keeps working without Redis."""
    cache = get_category_cache()
    if not cache.enabled:
        return jsonify({
            'status': 'degraded',
            'cache': 'unavailable',
            'message': 'Cache disabled or Redis unavailable (app continues without cache)'
        }), 200

    if cache.round_trip():
        return jsonify({'status': 'ok', 'cache': 'connected', 'message': 'Cache is working correctly'}), 200
    return jsonify({
        'status': 'degraded',
        'cache': 'error',
        'message': 'Redis connected but operations failing'
    }), 200


@main_bp.route('/api/health')
def api_health():
    return jsonify({'status': 'ok', 'timestamp': isoformat(utcnow())})
