"""Database configuration and initialization."""
from sqlalchemy import create_engine, text, BigInteger, Integer
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()

# BIGSERIAL on PostgreSQL, INTEGER on SQLite so rowid autoincrement still works
IdType = BigInteger().with_variant(Integer, 'sqlite')

# Global session and engine
engine = None
db_session = scoped_session(sessionmaker(autocommit=False, autoflush=False))


def _engine_options(app, database_uri):
    """Build create_engine kwargs for the configured backend."""
    options = {
        'echo': app.config.get('SQLALCHEMY_ECHO', False),
        'pool_pre_ping': True,  # Enable connection health checks
    }
    if database_uri.startswith('sqlite'):
        # In-memory SQLite must share one connection across threads
        options['connect_args'] = {'check_same_thread': False}
        options['poolclass'] = StaticPool
    else:
        options['pool_size'] = app.config.get('DB_POOL_SIZE', 10)
        options['max_overflow'] = app.config.get('DB_MAX_OVERFLOW', 20)
    return options


def init_db(app):
    """Initialize database connection."""
    global engine

    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    engine = create_engine(database_uri, **_engine_options(app, database_uri))

    db_session.remove()
    db_session.configure(bind=engine)

    Base.query = db_session.query_property()

    if app.config.get('DB_CREATE_ALL'):
        create_all()

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_all():
    """Create every mapped table that does not exist yet."""
    # Import models so they are registered on Base.metadata
    import selllocal.models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_all():
    """Drop every mapped table (tests only)."""
    import selllocal.models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


def ping():
    """Run a trivial query against the database."""
    row = db_session.execute(text("SELECT 1 as health_check")).fetchone()
    return bool(row and row[0] == 1)


def get_session():
    """Get database session."""
    return db_session


# Alias for easier imports
db = db_session
