"""
Broadcast and subscription endpoints.

Seller routes pass through require_broadcasts_enabled, which refuses with
403 and the admin's reason when either broadcast switch is off.
"""
from flask import Blueprint, g, jsonify, request

from selllocal.database import get_session
from selllocal.middleware import (
    check_trial, optional_auth, protect, require_broadcasts_enabled, seller_only
)
from selllocal.schemas import parse_body
from selllocal.schemas.broadcast import BroadcastInput, BroadcastUpdate, SubscribeInput, UnsubscribeInput
from selllocal.services import broadcast_service

broadcasts_bp = Blueprint('broadcasts', __name__, url_prefix='/api/broadcasts')


# Subscriptions

@broadcasts_bp.route('/subscriptions')
@protect
@seller_only
@check_trial
@require_broadcasts_enabled
def list_subscriptions():
    return jsonify(broadcast_service.list_subscriptions(get_session(), g.user, request.args))


@broadcasts_bp.route('/subscriptions', methods=['POST'])
@optional_auth
def subscribe():
    data = parse_body(SubscribeInput, request.get_json(silent=True))
    return jsonify(broadcast_service.subscribe(get_session(), data, user=g.user))


@broadcasts_bp.route('/subscriptions/unsubscribe', methods=['POST'])
def unsubscribe():
    data = parse_body(UnsubscribeInput, request.get_json(silent=True))
    return jsonify(broadcast_service.unsubscribe(get_session(), data))


@broadcasts_bp.route('/subscriptions/<int:subscription_id>/opt-out-link')
@protect
@seller_only
@require_broadcasts_enabled
def opt_out_link(subscription_id):
    return jsonify(broadcast_service.get_opt_out_link(get_session(), g.user, subscription_id))


# Broadcasts

@broadcasts_bp.route('/status/check')
@protect
@seller_only
def status_check():
    context = broadcast_service.build_broadcast_context(get_session(), g.user)
    return jsonify(context.to_dict())


@broadcasts_bp.route('/')
@protect
@seller_only
@check_trial
@require_broadcasts_enabled
def list_broadcasts():
    return jsonify(broadcast_service.list_broadcasts(get_session(), g.user, request.args))


@broadcasts_bp.route('/<int:broadcast_id>')
@protect
@seller_only
@check_trial
@require_broadcasts_enabled
def get_broadcast(broadcast_id):
    broadcast = broadcast_service.get_seller_broadcast(get_session(), g.user, broadcast_id)
    return jsonify(broadcast.to_dict())


@broadcasts_bp.route('/', methods=['POST'])
@protect
@seller_only
@check_trial
@require_broadcasts_enabled
def create_broadcast():
    data = parse_body(BroadcastInput, request.get_json(silent=True))
    return jsonify(broadcast_service.create_broadcast(get_session(), g.user, data)), 201


@broadcasts_bp.route('/<int:broadcast_id>', methods=['PUT'])
@protect
@seller_only
@check_trial
@require_broadcasts_enabled
def update_broadcast(broadcast_id):
    data = parse_body(BroadcastUpdate, request.get_json(silent=True))
    return jsonify(broadcast_service.update_broadcast(get_session(), g.user, broadcast_id, data))


@broadcasts_bp.route('/<int:broadcast_id>/send', methods=['POST'])
@protect
@seller_only
@check_trial
@require_broadcasts_enabled
def send_broadcast(broadcast_id):
    return jsonify(broadcast_service.send_broadcast(get_session(), g.user, broadcast_id))


@broadcasts_bp.route('/<int:broadcast_id>', methods=['DELETE'])
@protect
@seller_only
@check_trial
@require_broadcasts_enabled
def delete_broadcast(broadcast_id):
    return jsonify(broadcast_service.delete_broadcast(get_session(), g.user, broadcast_id))
