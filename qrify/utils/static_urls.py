import os
from flask import current_app


def build_static_url(path: str | None) -> str | None:
    if not path:
        return None

    # Already absolute (e.g. logo hosted elsewhere)
    if path.startswith(("http://", "https://")):
        return path

    base_url = current_app.config.get("BASE_URL", "http://127.0.0.1:5000")

    # Normalize separators
    normalized = path.replace("\\", "/")

    if normalized.startswith("/static/"):
        normalized = normalized[len("/static/"):]
    elif normalized.startswith("static/"):
        normalized = normalized[len("static/"):]

    return f"{base_url}{current_app.static_url_path}/{normalized.lstrip('/')}"


def absolute_static_path(rel_path: str | None, within: str | None = None) -> str | None:
    """
    Convert a stored relative path (e.g. 'qrcodes/qr_abc.png')
    into an absolute filesystem path under the static folder.

    Returns None when the path resolves outside the static folder,
    or outside its `within` subfolder when one is given.
    """
    if not rel_path:
        return None

    static_root = os.path.realpath(current_app.static_folder or "static")
    root = os.path.realpath(os.path.join(static_root, within)) if within else static_root

    rel = rel_path.replace("\\", "/")
    for prefix in ("/static/", "static/"):
        if rel.startswith(prefix):
            rel = rel[len(prefix):]

    path = os.path.realpath(os.path.join(static_root, rel.lstrip("/")))
    if os.path.commonpath([root, path]) != root:
        return None
    return path


def static_relative_from_url(url: str | None) -> str | None:
    """Map a URL we issued (BASE_URL/static/...) back to its static-relative path."""
    if not url:
        return None
    base_url = current_app.config.get("BASE_URL", "")
    if base_url and url.startswith(base_url):
        url = url[len(base_url):]
    if url.startswith("/static/"):
        return url[len("/static/"):]
    return None
