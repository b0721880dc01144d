"""
Admin endpoints: seller approval, validity windows and broadcast switches.

Everything except /contact-info requires an admin token.
"""
from flask import Blueprint, g, jsonify, request

from selllocal.database import get_session
from selllocal.middleware import admin_only, protect
from selllocal.schemas import parse_body
from selllocal.schemas.admin import ExtendValidityInput, SellerToggleInput, ToggleInput
from selllocal.services import admin_service

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


@admin_bp.route('/contact-info')
def contact_info():
    return jsonify(admin_service.get_contact_info(get_session()))


@admin_bp.route('/sellers')
@protect
@admin_only
def list_sellers():
    return jsonify(admin_service.list_sellers(get_session(), request.args))


@admin_bp.route('/stats')
@protect
@admin_only
def stats():
    return jsonify(admin_service.get_stats(get_session()))


@admin_bp.route('/sellers/<int:seller_id>/approve', methods=['PATCH'])
@protect
@admin_only
def approve_seller(seller_id):
    return jsonify(admin_service.approve_seller(get_session(), seller_id))


@admin_bp.route('/sellers/<int:seller_id>/send-phone-verification', methods=['POST'])
@protect
@admin_only
def send_phone_verification(seller_id):
    return jsonify(admin_service.send_phone_verification(get_session(), seller_id))


@admin_bp.route('/sellers/<int:seller_id>/toggle', methods=['PATCH'])
@protect
@admin_only
def toggle_seller(seller_id):
    return jsonify(admin_service.toggle_seller(get_session(), seller_id))


@admin_bp.route('/sellers/<int:seller_id>/extend-validity', methods=['PATCH'])
@protect
@admin_only
def extend_validity(seller_id):
    data = parse_body(ExtendValidityInput, request.get_json(silent=True))
    return jsonify(admin_service.extend_validity(get_session(), seller_id, data.months))


@admin_bp.route('/config/broadcasts-enabled')
@protect
@admin_only
def get_broadcasts_config():
    return jsonify(admin_service.get_broadcasts_config(get_session()))


@admin_bp.route('/config/broadcasts-enabled', methods=['PUT'])
@protect
@admin_only
def set_broadcasts_config():
    data = parse_body(ToggleInput, request.get_json(silent=True))
    return jsonify(admin_service.set_broadcasts_config(get_session(), g.user, data.enabled))


@admin_bp.route('/sellers/<int:seller_id>/broadcasts-enabled')
@protect
@admin_only
def get_seller_broadcasts(seller_id):
    return jsonify(admin_service.get_seller_broadcasts(get_session(), seller_id))


@admin_bp.route('/sellers/<int:seller_id>/broadcasts-enabled', methods=['PUT'])
@protect
@admin_only
def set_seller_broadcasts(seller_id):
    data = parse_body(SellerToggleInput, request.get_json(silent=True))
    return jsonify(admin_service.set_seller_broadcasts(get_session(), seller_id, data.enabled))
