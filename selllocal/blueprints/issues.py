"""Issue reporting endpoints. Role checks live in the service."""
from flask import Blueprint, g, jsonify, request

from selllocal.database import get_session
from selllocal.middleware import protect
from selllocal.schemas import parse_body
from selllocal.schemas.issue import IssueReportInput, IssueStatusUpdate
from selllocal.services import issue_service

issues_bp = Blueprint('issues', __name__, url_prefix='/api/issues')


@issues_bp.route('/report', methods=['POST'])
@protect
def report():
    data = parse_body(IssueReportInput, request.get_json(silent=True))
    return jsonify(issue_service.report_issue(get_session(), g.user, data)), 201


@issues_bp.route('/')
@protect
def list_issues():
    return jsonify(issue_service.list_issues(get_session(), g.user, request.args))


@issues_bp.route('/stats')
@protect
def stats():
    return jsonify(issue_service.get_stats(get_session(), g.user))


@issues_bp.route('/<int:issue_id>/status', methods=['PATCH'])
@protect
def update_status(issue_id):
    data = parse_body(IssueStatusUpdate, request.get_json(silent=True))
    return jsonify(issue_service.update_status(get_session(), g.user, issue_id, data))


@issues_bp.route('/my-issues')
@protect
def my_issues():
    return jsonify(issue_service.list_own(get_session(), g.user))
