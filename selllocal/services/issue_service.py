"""In-app issue reports and their admin triage."""
import logging

from sqlalchemy import func

from selllocal.exceptions import NotFoundError, UnauthorizedError
from selllocal.models import IssueReport
from selllocal.utils.dates import utcnow
from selllocal.utils.pagination import parse_pagination

logger = logging.getLogger(__name__)

CLOSING_STATUSES = ('resolved', 'closed')


def _require_admin(user, message):
    if not user.is_admin:
        raise UnauthorizedError(message)


def report_issue(session, user, data):
    if user.is_admin:
        raise UnauthorizedError('Admins cannot report issues')

    issue = IssueReport(
        reported_by=user.id,
        reporter_role=user.role,
        reporter_email=user.email,
        reporter_name=user.name,
        issue_type=data.issue_type,
        title=data.title,
        description=data.description,
        page_url=data.page_url,
        screenshot=data.screenshot,
        browser_info=data.browser_info,
    )
    session.add(issue)
    session.commit()
    logger.info(f"[ISSUES] Issue {issue.id} reported by user {user.id}")
    return {'message': 'Issue reported successfully', 'issue': issue.to_dict()}


def list_issues(session, user, args):
    _require_admin(user, 'Only admins can view all issues')
    page, limit, offset = parse_pagination(args)

    query = session.query(IssueReport)
    if args.get('status'):
        query = query.filter(IssueReport.status == args.get('status'))

    total = query.count()
    issues = query.order_by(IssueReport.created_at.desc(), IssueReport.id.desc()).offset(offset).limit(limit).all()
    return {
        'issues': [issue.to_dict() for issue in issues],
        'total': total,
        'page': page,
        'limit': limit,
        'totalPages': -(-total // limit),
    }


def get_stats(session, user):
    _require_admin(user, 'Only admins can view statistics')
    rows = session.query(IssueReport.status, func.count(IssueReport.id)).group_by(IssueReport.status).all()
    by_status = {status: count for status, count in rows}
    return {
        'total': sum(by_status.values()),
        'pending': by_status.get('pending', 0),
        'byStatus': by_status,
    }


def update_status(session, user, issue_id, data):
    _require_admin(user, 'Only admins can update issue status')
    issue = session.get(IssueReport, issue_id)
    if issue is None:
        raise NotFoundError('Issue not found')

    issue.status = data.status
    if data.admin_notes is not None:
        issue.admin_notes = data.admin_notes
    if data.status in CLOSING_STATUSES:
        issue.resolved_at = utcnow()
        issue.resolved_by = user.id
    session.commit()
    return {'message': 'Issue status updated', 'issue': issue.to_dict()}


def list_own(session, user):
    issues = session.query(IssueReport).filter(
        IssueReport.reported_by == user.id
    ).order_by(IssueReport.created_at.desc(), IssueReport.id.desc()).all()
    return {'issues': [issue.to_dict() for issue in issues]}
