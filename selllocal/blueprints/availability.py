"""Availability request endpoints."""
from flask import Blueprint, g, jsonify, request

from selllocal.database import get_session
from selllocal.middleware import protect
from selllocal.schemas import parse_body
from selllocal.schemas.availability import AvailabilityRequestInput
from selllocal.services import availability_service

availability_bp = Blueprint('availability', __name__, url_prefix='/api/availability')


@availability_bp.route('/request', methods=['POST'])
@protect
def request_availability():
    data = parse_body(AvailabilityRequestInput, request.get_json(silent=True))
    return jsonify(availability_service.request_availability(get_session(), g.user, data))


@availability_bp.route('/seller')
@protect
def seller_requests():
    return jsonify(availability_service.list_for_seller(get_session(), g.user))


@availability_bp.route('/<int:request_id>/fulfill', methods=['PATCH'])
@protect
def fulfill(request_id):
    return jsonify(availability_service.fulfill(get_session(), g.user, request_id))
