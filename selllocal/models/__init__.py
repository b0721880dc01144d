"""Models package - exports all SQLAlchemy models."""
# Accounts
from selllocal.models.user import User, UserRole, THEMES
from selllocal.models.config_setting import ConfigSetting

# Catalogue
from selllocal.models.product import Product, PriceTier, UNITS
from selllocal.models.promotion import Promotion, DiscountType, promotion_product
from selllocal.models.cart import Cart, CartItem

# Engagement
from selllocal.models.broadcast import Broadcast, BroadcastError, BroadcastStatus, BROADCAST_TYPES
from selllocal.models.broadcast_subscription import BroadcastSubscription, SUBSCRIPTION_SOURCES
from selllocal.models.analytics_event import AnalyticsEvent, EventType
from selllocal.models.availability_request import AvailabilityRequest
from selllocal.models.issue_report import IssueReport, ISSUE_TYPES, ISSUE_STATUSES

__all__ = [
    'User', 'UserRole', 'THEMES', 'ConfigSetting',
    'Product', 'PriceTier', 'UNITS',
    'Promotion', 'DiscountType', 'promotion_product',
    'Cart', 'CartItem',
    'Broadcast', 'BroadcastError', 'BroadcastStatus', 'BROADCAST_TYPES',
    'BroadcastSubscription', 'SUBSCRIPTION_SOURCES',
    'AnalyticsEvent', 'EventType',
    'AvailabilityRequest',
    'IssueReport', 'ISSUE_TYPES', 'ISSUE_STATUSES',
]
