"""Configuration module for Flask application."""
import os
import tempfile

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '0') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024  # 50MB request ceiling

    # Authentication
    JWT_SECRET = os.getenv('JWT_SECRET', 'dev-jwt-secret-change-in-production')
    JWT_EXPIRES_DAYS = int(os.getenv('JWT_EXPIRES_DAYS', '30'))

    # Database - Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'selllocal')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'selllocal')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'selllocal')

        DATABASE_URL = (
            f"postgresql+psycopg://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'
    DB_CREATE_ALL = os.getenv('DB_CREATE_ALL', 'false').lower() == 'true'

    # Public URLs used in links and the merchant feed
    FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:3000').rstrip('/')
    API_URL = os.getenv('API_URL') or os.getenv('BACKEND_URL')

    # Platform contact
    ADMIN_PHONE = os.getenv('ADMIN_PHONE')
    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL')

    # Seller lifecycle
    TRIAL_MONTHS = int(os.getenv('TRIAL_MONTHS', '1'))

    # Broadcasts and availability
    BROADCAST_SEND_DELAY = float(os.getenv('BROADCAST_SEND_DELAY', '0.2'))
    AVAILABILITY_DEDUPE_HOURS = int(os.getenv('AVAILABILITY_DEDUPE_HOURS', '24'))

    # Local uploads (fallback for files not sent to object storage)
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))

    # Object Storage Configuration (AWS S3, DigitalOcean Spaces, MinIO)
    S3_ENDPOINT = os.getenv('S3_ENDPOINT', 'http://minio:9000')
    S3_ACCESS_KEY = os.getenv('S3_ACCESS_KEY', 'minioadmin')
    S3_SECRET_KEY = os.getenv('S3_SECRET_KEY', 'minioadmin')
    S3_BUCKET = os.getenv('S3_BUCKET', 'uploads')
    S3_REGION = os.getenv('S3_REGION', 'us-east-1')
    S3_PUBLIC_URL = os.getenv('S3_PUBLIC_URL', 'http://localhost:9000')

    # Redis Cache Configuration
    REDIS_URL = os.getenv('REDIS_URL', 'redis://redis:6379/0')
    CACHE_ENABLED = os.getenv('CACHE_ENABLED', 'true').lower() == 'true'
    CACHE_CATEGORIES_TTL = int(os.getenv('CACHE_CATEGORIES_TTL', '300'))  # seconds
    CACHE_KEY_PREFIX = os.getenv('CACHE_KEY_PREFIX', 'selllocal')


class TestConfig(Config):
    """In-memory configuration for the test suite."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    DB_CREATE_ALL = True
    CACHE_ENABLED = False
    JWT_SECRET = 'test-jwt-secret'
    FRONTEND_URL = 'http://shop.test'
    API_URL = 'http://api.test'
    ADMIN_PHONE = '+919999999999'
    ADMIN_EMAIL = 'support@selllocal.test'
    BROADCAST_SEND_DELAY = 0
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), 'selllocal-test-uploads')
