"""User model - admins, sellers and buyers share one table."""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, JSON, Text, update
from sqlalchemy.orm import relationship
from werkzeug.security import generate_password_hash, check_password_hash

from selllocal.database import Base, IdType
from selllocal.utils.dates import utcnow, add_months, isoformat


class UserRole:
    ADMIN = 'admin'
    SELLER = 'seller'
    BUYER = 'buyer'

    ALL = (ADMIN, SELLER, BUYER)


THEMES = ('ocean', 'sunset', 'forest', 'midnight', 'rose', 'minimal')


class User(Base):
    """Platform user. Seller rows also carry the storefront profile."""

    __tablename__ = 'users'

    id = Column(IdType, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.BUYER)
    name = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=True)

    # WhatsApp number verification (sellers)
    phone_verified = Column(Boolean, nullable=False, default=False)
    phone_verification_token = Column(String(64), nullable=True, index=True)
    phone_verification_expires = Column(DateTime, nullable=True)

    # Storefront
    business_name = Column(String(200), nullable=True)
    alias = Column(String(120), nullable=True, unique=True)
    theme = Column(String(20), nullable=False, default='minimal')
    business_description = Column(String(500), nullable=True)
    business_logo = Column(String(500), nullable=True)
    business_banner = Column(String(500), nullable=True)
    address_street = Column(String(255), nullable=True)
    address_city = Column(String(100), nullable=True)
    address_state = Column(String(100), nullable=True)
    address_pincode = Column(String(20), nullable=True)

    # Hyperlocal SEO
    seo_meta_title = Column(String(60), nullable=True)
    seo_meta_description = Column(String(160), nullable=True)
    seo_keywords = Column(JSON, nullable=False, default=list)
    seo_local_area = Column(String(200), nullable=True)

    instagram_handle = Column(String(100), nullable=True)
    facebook_handle = Column(String(100), nullable=True)

    # Lifecycle
    is_approved = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    is_suspended = Column(Boolean, nullable=False, default=False)
    registration_date = Column(DateTime, nullable=False, default=utcnow)
    trial_ends_at = Column(DateTime, nullable=True)
    registered_on_seller_id = Column(IdType, ForeignKey('users.id'), nullable=True)
    broadcasts_enabled = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    registered_on_seller = relationship('User', remote_side=[id])
    products = relationship('Product', back_populates='seller', cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    @property
    def is_seller(self):
        return self.role == UserRole.SELLER

    @property
    def has_complete_address(self):
        return not self.missing_address_fields()

    def missing_address_fields(self):
        fields = {
            'street': self.address_street,
            'city': self.address_city,
            'state': self.address_state,
            'pincode': self.address_pincode,
        }
        return [name for name, value in fields.items() if not (value or '').strip()]

    def set_password(self, password):
        """Set password hash."""
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        """Check password against hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def start_trial(self, months, now=None):
        now = now or utcnow()
        self.registration_date = now
        self.trial_ends_at = add_months(now, months)

    def check_and_suspend_if_expired(self, now=None):
        """
        Suspend a seller whose trial window has ended.

        Returns True when the seller is (now) suspended.
        """
        if self.role != UserRole.SELLER:
            return False
        now = now or utcnow()
        if self.trial_ends_at and self.trial_ends_at < now and not self.is_suspended:
            self.is_suspended = True
            self.is_active = False
        return bool(self.is_suspended)

    @classmethod
    def auto_suspend_expired_sellers(cls, session, now=None):
        """Bulk-suspend every seller past their trial. Returns the row count."""
        now = now or utcnow()
        result = session.execute(
            update(cls)
            .where(
                cls.role == UserRole.SELLER,
                cls.trial_ends_at < now,
                cls.is_suspended == False  # noqa: E712
            )
            .values(is_suspended=True, is_active=False)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def address_dict(self):
        return {
            'street': self.address_street or '',
            'city': self.address_city or '',
            'state': self.address_state or '',
            'pincode': self.address_pincode or '',
        }

    def to_dict(self):
        """Serialize without the password hash."""
        return {
            'id': self.id,
            'email': self.email,
            'role': self.role,
            'name': self.name,
            'phone': self.phone,
            'phoneVerified': self.phone_verified,
            'businessName': self.business_name,
            'alias': self.alias,
            'theme': self.theme,
            'businessDescription': self.business_description,
            'businessLogo': self.business_logo,
            'businessBanner': self.business_banner,
            'address': self.address_dict(),
            'seoMetaTitle': self.seo_meta_title,
            'seoMetaDescription': self.seo_meta_description,
            'seoKeywords': list(self.seo_keywords or []),
            'seoLocalArea': self.seo_local_area,
            'instagramHandle': self.instagram_handle or '',
            'facebookHandle': self.facebook_handle or '',
            'isApproved': self.is_approved,
            'isActive': self.is_active,
            'isSuspended': self.is_suspended,
            'registrationDate': isoformat(self.registration_date),
            'trialEndsAt': isoformat(self.trial_ends_at),
            'broadcastsEnabled': self.broadcasts_enabled,
            'createdAt': isoformat(self.created_at),
        }

    def summary(self):
        return {'id': self.id, 'name': self.name, 'email': self.email}
