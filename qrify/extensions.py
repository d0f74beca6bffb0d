# qrify/extensions.py

from concurrent.futures import ThreadPoolExecutor

from flask import request
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_limiter import Limiter
import redis

from qrify.utils.client_info import get_client_ip


def _client_ip_key():
    return get_client_ip(request.headers, request.remote_addr)


db = SQLAlchemy()
cors = CORS()
limiter = Limiter(key_func=_client_ip_key)
redis_client = None
scan_executor = None


def init_redis(app):
    """Initialize Redis using REDIS_URL from config."""
    global redis_client

    url = app.config.get("REDIS_URL")
    if not url:
        app.logger.info("No REDIS_URL configured, Redis disabled.")
        redis_client = None
        return

    try:
        client = redis.Redis.from_url(url, decode_responses=True)
        client.ping()
        redis_client = client
        app.logger.info("Redis initialized successfully.")
    except Exception as exc:
        redis_client = None
        app.logger.warning(f"Redis initialization failed: {exc}")


def init_scan_executor(app):
    """Worker pool for scan logging off the redirect path."""
    global scan_executor

    if scan_executor is None and app.config.get("SCAN_LOG_ASYNC", True):
        scan_executor = ThreadPoolExecutor(
            max_workers=int(app.config.get("SCAN_LOG_WORKERS", 4)),
            thread_name_prefix="scan-log",
        )


def init_limiter(app):
    """Rate limits live in Redis when it answered at startup, in process memory otherwise."""
    storage_uri = app.config.get("REDIS_URL") if redis_client else "memory://"
    app.config.setdefault("RATELIMIT_STORAGE_URI", storage_uri)
    app.config.setdefault("RATELIMIT_IN_MEMORY_FALLBACK_ENABLED", True)
    limiter.init_app(app)
    app.logger.info(f"Rate limiter storage: {app.config['RATELIMIT_STORAGE_URI'].split('://')[0]}")
