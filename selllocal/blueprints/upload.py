"""Seller logo and banner uploads."""
from flask import Blueprint, g, jsonify, request

from selllocal.database import get_session
from selllocal.middleware import protect, seller_only
from selllocal.services import upload_service

upload_bp = Blueprint('upload', __name__, url_prefix='/api/upload')


@upload_bp.route('/logo', methods=['POST'])
@protect
@seller_only
def upload_logo():
    result = upload_service.update_business_image(get_session(), g.user, request.files.get('logo'), 'logo')
    return jsonify(result)


@upload_bp.route('/banner', methods=['POST'])
@protect
@seller_only
def upload_banner():
    result = upload_service.update_business_image(get_session(), g.user, request.files.get('banner'), 'banner')
    return jsonify(result)
