"""Authentication and role gating for API routes."""
import logging
from datetime import timedelta
from functools import wraps

import jwt
from flask import current_app, g, request

from selllocal.database import get_session
from selllocal.exceptions import AuthenticationError, UnauthorizedError
from selllocal.models import User, UserRole
from selllocal.utils.dates import utcnow

logger = logging.getLogger(__name__)

SUSPENDED_MESSAGE = (
    'Your account has been suspended due to expired trial. '
    'Please contact admin to extend your subscription.'
)


def generate_token(user_id):
    """Signed bearer token for a user."""
    payload = {
        'id': user_id,
        'exp': utcnow() + timedelta(days=current_app.config.get('JWT_EXPIRES_DAYS', 30)),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET'], algorithm='HS256')


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip() or None
    return None


def _decode(token):
    return jwt.decode(token, current_app.config['JWT_SECRET'], algorithms=['HS256'])


def suspension_error():
    return UnauthorizedError(SUSPENDED_MESSAGE, payload={'isSuspended': True, 'trialExpired': True})


def enforce_trial(user, db_session):
    """Suspend an expired seller and refuse the request."""
    was_suspended = user.is_suspended
    if user.check_and_suspend_if_expired():
        if not was_suspended:
            db_session.commit()
            logger.info(f"[AUTH] Seller {user.id} suspended after trial expiry")
        raise suspension_error()


def load_current_user():
    """
    Resolve the bearer token into g.user.

    Raises:
        AuthenticationError / UnauthorizedError with the client-facing message.
    """
    token = _bearer_token()
    if not token:
        raise AuthenticationError('Not authorized, no token provided')

    try:
        payload = _decode(token)
    except jwt.InvalidTokenError:
        raise AuthenticationError('Not authorized, token invalid')

    db_session = get_session()
    user = db_session.get(User, payload.get('id'))
    if user is None:
        raise AuthenticationError('User not found')

    if user.role == UserRole.SELLER:
        enforce_trial(user, db_session)

    if not user.is_active:
        raise AuthenticationError('Account has been deactivated')

    g.user = user
    return user


def protect(f):
    """Decorator: require a valid bearer token."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        load_current_user()
        return f(*args, **kwargs)
    return decorated_function


def optional_auth(f):
    """Decorator: load the user when a valid token is sent, never fail."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.user = None
        token = _bearer_token()
        if token:
            try:
                payload = _decode(token)
                user = get_session().get(User, payload.get('id'))
                if user is not None and user.is_active:
                    g.user = user
            except jwt.InvalidTokenError:
                pass
        return f(*args, **kwargs)
    return decorated_function


def admin_only(f):
    """Decorator: admins only. Must be used AFTER protect."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.user.role != UserRole.ADMIN:
            raise UnauthorizedError('Access denied. Admin only.')
        return f(*args, **kwargs)
    return decorated_function


def seller_only(f):
    """Decorator: approved sellers only. Must be used AFTER protect."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.user.role != UserRole.SELLER:
            raise UnauthorizedError('Access denied. Seller only.')
        if not g.user.is_approved:
            raise UnauthorizedError('Your account is pending approval')
        return f(*args, **kwargs)
    return decorated_function


def check_trial(f):
    """Decorator: re-check the seller trial window. Must be used AFTER protect."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.user.role == UserRole.SELLER:
            enforce_trial(g.user, get_session())
        return f(*args, **kwargs)
    return decorated_function


def require_broadcasts_enabled(f):
    """
    Decorator: refuse broadcast routes when the admin switches are off.

    Sets g.broadcast_context. Must be used AFTER protect.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from selllocal.services.broadcast_service import build_broadcast_context

        context = build_broadcast_context(get_session(), g.user)
        if not context.can_send:
            raise UnauthorizedError(context.reason)
        g.broadcast_context = context
        return f(*args, **kwargs)
    return decorated_function
