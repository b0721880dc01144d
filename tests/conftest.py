import itertools
from decimal import Decimal

import pytest
from redis.exceptions import RedisError

from selllocal import create_app, database
from selllocal.database import db_session, get_session
from selllocal.middleware import generate_token
from selllocal.models import Product, User, UserRole
from selllocal.services.cache_service import CategoryCache
from selllocal.utils.dates import add_months, utcnow


class FakeStorage:
    """In-memory stand-in for the S3 storage service."""

    base_url = 'http://storage.test/uploads'

    def __init__(self):
        self.uploaded = []
        self.deleted = []

    def upload_path(self, path, object_name, content_type=None):
        self.uploaded.append(object_name)
        return f'{self.base_url}/{object_name}'

    def upload_file(self, file_obj, object_name, content_type=None):
        self.uploaded.append(object_name)
        return f'{self.base_url}/{object_name}'

    def delete_url(self, url):
        self.deleted.append(url)
        return True


class FakeRedis:
    """Dict-backed stand-in for the handful of Redis calls the category cache makes."""

    def __init__(self):
        self.hashes = {}
        self.values = {}
        self.ttls = {}
        self.down = False

    def _check(self):
        if self.down:
            raise RedisError('connection refused')

    def hget(self, key, field):
        self._check()
        return self.hashes.get(key, {}).get(field)

    def hset(self, key, field, value):
        self._check()
        self.hashes.setdefault(key, {})[field] = value

    def expire(self, key, seconds):
        self._check()
        self.ttls[key] = seconds

    def delete(self, key):
        self._check()
        found = key in self.hashes or key in self.values
        self.hashes.pop(key, None)
        self.values.pop(key, None)
        return int(found)

    def setex(self, key, seconds, value):
        self._check()
        self.values[key] = value
        self.ttls[key] = seconds

    def get(self, key):
        self._check()
        return self.values.get(key)

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:

    def __init__(self, client):
        self.client = client
        self.calls = []

    def hset(self, *args):
        self.calls.append(('hset', args))

    def expire(self, *args):
        self.calls.append(('expire', args))

    def execute(self):
        return [getattr(self.client, name)(*args) for name, args in self.calls]


@pytest.fixture(scope='function')
def app():
    """Application bound to a fresh in-memory database."""
    app = create_app('config.TestConfig')
    ctx = app.app_context()
    ctx.push()
    yield app
    db_session.remove()
    database.drop_all()
    ctx.pop()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Database session shared with the request handlers."""
    session = get_session()
    yield session
    session.rollback()


@pytest.fixture(scope='function')
def storage(monkeypatch):
    """Replace object storage with an in-memory fake."""
    fake = FakeStorage()
    monkeypatch.setattr('selllocal.services.storage_service.get_storage_service', lambda: fake)
    return fake


@pytest.fixture(scope='function')
def redis_client(app):
    """Back the category cache with an in-memory Redis."""
    client = FakeRedis()
    app.extensions['category_cache'] = CategoryCache(client, prefix='test', ttl=300)
    return client


_sequence = itertools.count(1)


@pytest.fixture(scope='function')
def make_seller(session):
    """Factory for approved, verified sellers inside their trial."""
    def _make(**overrides):
        n = next(_sequence)
        values = dict(
            email=f'seller{n}@example.com',
            name=f'Seller {n}',
            phone=f'+91987654{n % 10000:04d}',
            role=UserRole.SELLER,
            business_name=f'Test Store {n}',
            alias=f'test-store-{n}',
            address_street='12 MG Road',
            address_city='Pune',
            address_state='Maharashtra',
            address_pincode='411001',
            is_approved=True,
            is_active=True,
            phone_verified=True,
            trial_ends_at=add_months(utcnow(), 1),
        )
        values.update(overrides)
        seller = User(**values)
        seller.set_password('password123')
        session.add(seller)
        session.commit()
        return seller
    return _make


@pytest.fixture(scope='function')
def seller(make_seller):
    return make_seller()


@pytest.fixture(scope='function')
def make_buyer(session):
    """Factory for buyers registered on a storefront."""
    def _make(seller, **overrides):
        n = next(_sequence)
        values = dict(
            email=f'buyer{n}@example.com',
            name=f'Buyer {n}',
            phone=f'+91912345{n % 10000:04d}',
            role=UserRole.BUYER,
            registered_on_seller_id=seller.id,
            is_approved=True,
            is_active=True,
        )
        values.update(overrides)
        buyer = User(**values)
        buyer.set_password('password123')
        session.add(buyer)
        session.commit()
        return buyer
    return _make


@pytest.fixture(scope='function')
def buyer(make_buyer, seller):
    return make_buyer(seller)


@pytest.fixture(scope='function')
def admin(session):
    admin = User(
        email='admin@example.com',
        name='Platform Admin',
        role=UserRole.ADMIN,
        is_approved=True,
        is_active=True,
    )
    admin.set_password('password123')
    session.add(admin)
    session.commit()
    return admin


@pytest.fixture(scope='function')
def make_product(session):
    """Factory for catalogue products."""
    def _make(seller, name='Chocolate Cake', tiers=None, **overrides):
        n = next(_sequence)
        values = dict(
            seller_id=seller.id,
            name=name,
            slug=f'product-{n}',
            description=f'{name} baked fresh every morning',
            category='Bakery',
            base_price=Decimal('100.00'),
            minimum_order_quantity=1,
            stock=50,
            unit='piece',
            tags=[],
            images=[],
            is_active=True,
        )
        values.update(overrides)
        product = Product(**values)
        product.set_price_tiers(tiers or [])
        session.add(product)
        session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def product(make_product, seller):
    return make_product(seller)


@pytest.fixture(scope='function')
def auth_headers(app):
    """Build an Authorization header for a user."""
    def _headers(user):
        return {'Authorization': f'Bearer {generate_token(user.id)}'}
    return _headers
