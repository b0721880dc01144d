"""Issue reports submitted by sellers and buyers."""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON, CheckConstraint
from sqlalchemy.orm import relationship

from selllocal.database import Base, IdType
from selllocal.utils.dates import utcnow, isoformat

ISSUE_TYPES = ('bug', 'ui_issue', 'feature_request', 'other')
ISSUE_STATUSES = ('pending', 'in_progress', 'resolved', 'closed')


class IssueReport(Base):
    """A bug or feature report with a screenshot, triaged by admins."""

    __tablename__ = 'issue_report'

    id = Column(IdType, primary_key=True, autoincrement=True)
    reported_by = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    reporter_role = Column(String(20), nullable=False)
    reporter_email = Column(String(255), nullable=False)
    reporter_name = Column(String(200), nullable=False)
    issue_type = Column(String(30), nullable=False, default='bug')
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    page_url = Column(String(1000), nullable=False)
    screenshot = Column(Text, nullable=False)
    browser_info = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), nullable=False, default='pending')
    admin_notes = Column(Text, nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by = Column(IdType, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    reporter = relationship('User', foreign_keys=[reported_by])
    resolver = relationship('User', foreign_keys=[resolved_by])

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'resolved', 'closed')",
            name='issue_report_status_check'
        ),
    )

    def __repr__(self):
        return f"<IssueReport(id={self.id}, title='{self.title}', status='{self.status}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'reportedBy': self.reporter.summary() if self.reporter else self.reported_by,
            'reporterRole': self.reporter_role,
            'reporterEmail': self.reporter_email,
            'reporterName': self.reporter_name,
            'issueType': self.issue_type,
            'title': self.title,
            'description': self.description,
            'pageUrl': self.page_url,
            'screenshot': self.screenshot,
            'browserInfo': dict(self.browser_info or {}),
            'status': self.status,
            'adminNotes': self.admin_notes,
            'resolvedAt': isoformat(self.resolved_at),
            'resolvedBy': self.resolver.summary() if self.resolver else None,
            'createdAt': isoformat(self.created_at),
        }
