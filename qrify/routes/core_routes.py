from flask import Blueprint, current_app, Response
from sqlalchemy import text

from ..extensions import db
from ..utils.response import api_response
from ..utils.seo import build_robots_txt, build_sitemap_xml

core_bp = Blueprint("core", __name__)


@core_bp.route("/")
def root():
    return api_response(True, "QRify API. Use the web frontend for UI.", None)


@core_bp.route("/health")
def health():
    return {"status": "ok"}, 200


@core_bp.route("/robots.txt")
def robots():
    return Response(build_robots_txt(current_app.config["BASE_URL"]), mimetype="text/plain")


@core_bp.route("/sitemap.xml")
def sitemap():
    return Response(build_sitemap_xml(current_app.config["BASE_URL"]), mimetype="application/xml")


@core_bp.route("/api/google-site-verification")
def google_site_verification():
    content = current_app.config.get("GOOGLE_SITE_VERIFICATION_CONTENT") or "google-site-verification-placeholder"
    return Response(content, mimetype="text/plain")


@core_bp.route("/api/test-db")
def test_db():
    try:
        db.session.execute(text("SELECT 1"))
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Database connection error: {e}")
        return api_response(False, "Database connection failed", None, 500)

    return api_response(True, "Database Connected Successfully", None)
