"""Flask application factory."""
import os
import traceback

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from selllocal.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    is_production = app.config.get('ENV') == 'production' or os.getenv('FLASK_ENV') == 'production'

    # Error tracking in production
    if os.getenv('SENTRY_DSN') and is_production:
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            profiles_sample_rate=0.1,
            environment=os.getenv('FLASK_ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    from selllocal.services.cache_service import init_cache
    init_cache(app)

    from selllocal.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # HTTPS behind the reverse proxy
    if is_production:
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for=1,
            x_proto=1,
            x_host=1,
            x_port=1,
            x_prefix=0
        )

    init_db(app)

    # Error Handlers
    from selllocal.exceptions import SellLocalError
    from selllocal.database import db_session

    @app.errorhandler(SellLocalError)
    def handle_selllocal_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"SellLocalError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"SellLocalError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'message': 'Not Found'}), 404

    @app.errorhandler(RequestEntityTooLarge)
    def too_large_error(error):
        limit_mb = (app.config.get('MAX_CONTENT_LENGTH') or 0) // (1024 * 1024)
        return jsonify({'message': f'File too large. Maximum size is {limit_mb}MB.'}), 400

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'message': error.description}), error.code

        db_session.rollback()
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'message': 'Server error', 'error': str(error)}), 500

    # Register blueprints
    from selllocal.blueprints.auth import auth_bp
    from selllocal.blueprints.main import main_bp
    from selllocal.blueprints.products import products_bp
    from selllocal.blueprints.promotions import promotions_bp
    from selllocal.blueprints.cart import cart_bp
    from selllocal.blueprints.admin import admin_bp
    from selllocal.blueprints.broadcasts import broadcasts_bp
    from selllocal.blueprints.analytics import analytics_bp
    from selllocal.blueprints.availability import availability_bp
    from selllocal.blueprints.issues import issues_bp
    from selllocal.blueprints.upload import upload_bp
    from selllocal.blueprints.bulk_upload import bulk_upload_bp
    from selllocal.blueprints.merchant_feed import merchant_feed_bp
    from selllocal.blueprints.metrics import metrics_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(promotions_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(broadcasts_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(availability_bp)
    app.register_blueprint(issues_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(bulk_upload_bp)
    app.register_blueprint(merchant_feed_bp)
    app.register_blueprint(metrics_bp)

    from selllocal.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
