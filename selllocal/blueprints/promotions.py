"""Seller promotion endpoints."""
from flask import Blueprint, g, jsonify, request

from selllocal.database import get_session
from selllocal.middleware import check_trial, protect, seller_only
from selllocal.schemas import parse_body
from selllocal.schemas.promotion import PromotionInput, PromotionUpdate
from selllocal.services import promotion_service

promotions_bp = Blueprint('promotions', __name__, url_prefix='/api/promotions')


@promotions_bp.route('/')
@protect
@seller_only
@check_trial
def list_promotions():
    return jsonify(promotion_service.list_promotions(get_session(), g.user, request.args.get('status')))


@promotions_bp.route('/', methods=['POST'])
@protect
@seller_only
@check_trial
def create_promotion():
    data = parse_body(PromotionInput, request.get_json(silent=True))
    return jsonify(promotion_service.create_promotion(get_session(), g.user, data)), 201


@promotions_bp.route('/<int:promotion_id>', methods=['PUT'])
@protect
@seller_only
@check_trial
def update_promotion(promotion_id):
    data = parse_body(PromotionUpdate, request.get_json(silent=True))
    return jsonify(promotion_service.update_promotion(get_session(), g.user, promotion_id, data))


@promotions_bp.route('/<int:promotion_id>/toggle', methods=['PATCH'])
@protect
@seller_only
@check_trial
def toggle_promotion(promotion_id):
    return jsonify(promotion_service.toggle_promotion(get_session(), g.user, promotion_id))


@promotions_bp.route('/<int:promotion_id>', methods=['DELETE'])
@protect
@seller_only
@check_trial
def delete_promotion(promotion_id):
    return jsonify(promotion_service.delete_promotion(get_session(), g.user, promotion_id))
