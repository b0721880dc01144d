"""Registration, login and profile endpoints."""
from flask import Blueprint, g, jsonify, request

from selllocal.database import get_session
from selllocal.middleware import protect
from selllocal.schemas import parse_body
from selllocal.schemas.auth import BuyerRegistration, LoginInput, ProfileUpdate, SellerRegistration
from selllocal.services import auth_service

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/register/seller', methods=['POST'])
def register_seller():
    data = parse_body(SellerRegistration, request.get_json(silent=True))
    return jsonify(auth_service.register_seller(get_session(), data)), 201


@auth_bp.route('/register/buyer', methods=['POST'])
def register_buyer():
    data = parse_body(BuyerRegistration, request.get_json(silent=True))
    return jsonify(auth_service.register_buyer(get_session(), data)), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = parse_body(LoginInput, request.get_json(silent=True))
    return jsonify(auth_service.login(get_session(), data))


@auth_bp.route('/me')
@protect
def me():
    return jsonify(g.user.to_dict())


@auth_bp.route('/profile', methods=['PUT'])
@protect
def update_profile():
    data = parse_body(ProfileUpdate, request.get_json(silent=True))
    return jsonify(auth_service.update_profile(get_session(), g.user, data))


@auth_bp.route('/verify-phone')
def verify_phone():
    """Landing endpoint for the WhatsApp verification link."""
    return jsonify(auth_service.verify_phone(get_session(), request.args.get('token')))
