"""Spreadsheet import endpoints."""
from flask import Blueprint, g, jsonify, request, send_file

from selllocal.database import get_session
from selllocal.middleware import check_trial, protect, seller_only
from selllocal.services import bulk_upload_service

bulk_upload_bp = Blueprint('bulk_upload', __name__, url_prefix='/api/bulk-upload')


@bulk_upload_bp.route('/sample')
@protect
@seller_only
def sample():
    return send_file(
        bulk_upload_service.build_template(),
        mimetype=bulk_upload_service.XLSX_MIMETYPE,
        as_attachment=True,
        download_name=bulk_upload_service.TEMPLATE_FILENAME
    )


@bulk_upload_bp.route('/products', methods=['POST'])
@protect
@seller_only
@check_trial
def import_products():
    result = bulk_upload_service.import_products(get_session(), g.user, request.files.get('excel'))
    return jsonify(result)
