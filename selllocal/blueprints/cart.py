"""Buyer cart endpoints and WhatsApp checkout."""
from flask import Blueprint, g, jsonify, request

from selllocal.database import get_session
from selllocal.middleware import protect
from selllocal.schemas import parse_body
from selllocal.schemas.cart import CartItemInput, CheckoutInput
from selllocal.services import cart_service

cart_bp = Blueprint('cart', __name__, url_prefix='/api/cart')


@cart_bp.route('/<seller_alias>')
@protect
def view_cart(seller_alias):
    return jsonify(cart_service.view_cart(get_session(), g.user, seller_alias))


@cart_bp.route('/add', methods=['POST'])
@protect
def add_item():
    data = parse_body(CartItemInput, request.get_json(silent=True))
    return jsonify(cart_service.add_item(get_session(), g.user, data))


@cart_bp.route('/update', methods=['PUT'])
@protect
def update_item():
    data = parse_body(CartItemInput, request.get_json(silent=True))
    return jsonify(cart_service.update_item(get_session(), g.user, data))


@cart_bp.route('/remove/<seller_alias>/<int:product_id>', methods=['DELETE'])
@protect
def remove_item(seller_alias, product_id):
    return jsonify(cart_service.remove_item(get_session(), g.user, seller_alias, product_id))


@cart_bp.route('/checkout/<seller_alias>', methods=['POST'])
@protect
def checkout(seller_alias):
    data = parse_body(CheckoutInput, request.get_json(silent=True))
    return jsonify(cart_service.checkout(get_session(), g.user, seller_alias, notes=data.notes))
