"""
Catalogue endpoints.

Public storefront reads live under /store; everything else is the seller's
own catalogue management and takes multipart forms.
"""
from flask import Blueprint, g, jsonify, request

from selllocal.database import get_session
from selllocal.middleware import check_trial, protect, seller_only
from selllocal.schemas import parse_body
from selllocal.schemas.product import ProductInput, ProductUpdate, form_to_dict
from selllocal.services import product_service

products_bp = Blueprint('products', __name__, url_prefix='/api/products')


def _form_payload():
    if request.form:
        return form_to_dict(request.form)
    return request.get_json(silent=True) or {}


@products_bp.route('/store/<alias>')
def store_products(alias):
    return jsonify(product_service.list_store_products(get_session(), alias, request.args))


@products_bp.route('/store/<alias>/<slug>')
def store_product(alias, slug):
    return jsonify(product_service.get_store_product(get_session(), alias, slug))


@products_bp.route('/my-products')
@protect
@seller_only
@check_trial
def my_products():
    return jsonify(product_service.list_seller_products(get_session(), g.user, request.args))


@products_bp.route('/', methods=['POST'])
@protect
@seller_only
@check_trial
def create_product():
    data = parse_body(ProductInput, _form_payload())
    product = product_service.create_product(
        get_session(), g.user, data,
        image_files=request.files.getlist('images'),
        video_file=request.files.get('video')
    )
    return jsonify(product), 201


@products_bp.route('/<int:product_id>', methods=['PUT'])
@protect
@seller_only
@check_trial
def update_product(product_id):
    data = parse_body(ProductUpdate, _form_payload())
    product = product_service.update_product(
        get_session(), g.user, product_id, data,
        image_files=request.files.getlist('images'),
        video_file=request.files.get('video')
    )
    return jsonify(product)


@products_bp.route('/<int:product_id>/toggle', methods=['PATCH'])
@protect
@seller_only
@check_trial
def toggle_product(product_id):
    return jsonify(product_service.toggle_product(get_session(), g.user, product_id))


@products_bp.route('/<int:product_id>', methods=['DELETE'])
@protect
@seller_only
@check_trial
def delete_product(product_id):
    return jsonify(product_service.delete_product(get_session(), g.user, product_id))
