import os
import uuid

from flask import current_app

from ..utils.static_urls import absolute_static_path

QR_FOLDER = "qrcodes"
PREVIEW_FOLDER = "previews"
LOGO_FOLDER = "logos"


def save_static_file(content: bytes, folder: str, filename: str | None = None, ext: str = "png") -> str:
    """Write bytes under <static>/<folder>/ and return the static-relative path."""
    target_dir = os.path.join(current_app.static_folder or "static", folder)
    os.makedirs(target_dir, exist_ok=True)

    filename = filename or f"{uuid.uuid4().hex}.{ext}"
    path = os.path.join(target_dir, filename)
    with open(path, "wb") as fh:
        fh.write(content)

    return f"{folder}/{filename}"


def delete_static_file(rel_path: str | None) -> bool:
    """Best-effort removal of a file we stored; returns True when a file was removed."""
    path = absolute_static_path(rel_path)
    if not path or not os.path.exists(path):
        return False
    try:
        os.remove(path)
        return True
    except OSError as e:
        current_app.logger.warning(f"Failed to delete static file {rel_path}: {e}")
        return False
