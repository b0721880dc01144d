"""Platform-wide configuration rows (e.g. the global broadcast toggle)."""
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON

from selllocal.database import Base, IdType
from selllocal.utils.dates import utcnow


class ConfigSetting(Base):
    """Key/value setting managed by admins."""

    __tablename__ = 'config_setting'

    id = Column(IdType, primary_key=True, autoincrement=True)
    key = Column(String(100), nullable=False, unique=True)
    value = Column(JSON, nullable=True)
    description = Column(String(500), nullable=True)
    updated_by = Column(IdType, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<ConfigSetting(key='{self.key}', value={self.value!r})>"

    @classmethod
    def get_value(cls, session, key, default=None):
        row = session.query(cls).filter_by(key=key).first()
        if row is None or row.value is None:
            return default
        return row.value

    @classmethod
    def set_value(cls, session, key, value, description=None, updated_by=None):
        """Insert or update a setting. The caller commits."""
        row = session.query(cls).filter_by(key=key).first()
        if row is None:
            row = cls(key=key)
            session.add(row)
        row.value = value
        if description is not None:
            row.description = description
        row.updated_by = updated_by
        return row
