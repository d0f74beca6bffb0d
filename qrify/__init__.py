# qrify/__init__.py

import logging
import os

from flask import Flask
from flask.logging import default_handler
from werkzeug.middleware.proxy_fix import ProxyFix

from qrify.config import Config
from qrify.extensions import db, cors, init_redis, init_limiter, init_scan_executor
from qrify.utils.error_handler import register_error_handlers


SECURITY_HEADERS = {
    "X-DNS-Prefetch-Control": "on",
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains; preload",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)
    default_handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    ))


def create_app(config_class=Config) -> Flask:
    static_folder = os.path.abspath(config_class.STATIC_FOLDER)
    os.makedirs(static_folder, exist_ok=True)

    app = Flask(__name__, static_folder=static_folder, static_url_path="/static")

    # Load configuration
    app.config.from_object(config_class)
    app.config["MAX_CONTENT_LENGTH"] = int(app.config.get("MAX_LOGO_BYTES", 2 * 1024 * 1024)) * 2

    _configure_logging(app)

    # Initialize extensions
    cors.init_app(app)
    db.init_app(app)
    init_redis(app)
    init_limiter(app)
    init_scan_executor(app)

    # Fix proxy headers
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    @app.after_request
    def _security_headers(response):
        for key, value in SECURITY_HEADERS.items():
            response.headers.setdefault(key, value)
        return response

    register_error_handlers(app)

    # Register blueprints
    from qrify.routes.core_routes import core_bp
    from qrify.routes.auth_routes import auth_bp
    from qrify.routes.qr_routes import qr_bp
    from qrify.routes.redirect_routes import redirect_bp
    from qrify.routes.user_routes import user_bp
    from qrify.routes.dashboard_routes import dashboard_bp
    from qrify.routes.payment_routes import payment_bp
    from qrify.routes.admin_routes import admin_bp

    app.register_blueprint(core_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(qr_bp)
    app.register_blueprint(redirect_bp, url_prefix="/api/qr/redirect")
    app.register_blueprint(user_bp, url_prefix="/api/user")
    app.register_blueprint(dashboard_bp, url_prefix="/api/dashboard")
    app.register_blueprint(payment_bp, url_prefix="/api/payments")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    # Create tables if not exists
    with app.app_context():
        from qrify import models  # noqa: F401
        db.create_all()

    return app
