import base64
import io
import os

import qrcode
import requests
from PIL import Image, ImageColor, ImageDraw
from qrcode.image.styledpil import StyledPilImage
from qrcode.image.styles.moduledrawers import (
    SquareModuleDrawer, GappedSquareModuleDrawer,
    CircleModuleDrawer, RoundedModuleDrawer
)
from qrcode.image.styles.colormasks import SolidFillColorMask
from flask import current_app

from ..services.storage import LOGO_FOLDER
from .static_urls import absolute_static_path, static_relative_from_url

LOGO_RATIO = 0.25  # H-level correction tolerates ~30% damage
LOGO_PADDING_RATIO = 0.1
QUIET_ZONE = 4


class QRGenerationError(Exception):
    pass


def _parse_color(value, fallback):
    try:
        return ImageColor.getrgb(value)
    except (ValueError, TypeError, AttributeError):
        return fallback


def _module_drawer(qr_style):
    drawer_map = {
        "square": SquareModuleDrawer,
        "dots": GappedSquareModuleDrawer,
        "rounded": RoundedModuleDrawer,
    }
    return drawer_map.get((qr_style or "square").lower(), SquareModuleDrawer)()


def _eye_drawer(eye_shape):
    if (eye_shape or "square").lower() == "circle":
        return CircleModuleDrawer()
    return SquareModuleDrawer()


def load_logo(logo_url):
    """Open a logo from a data URI, an uploaded logo under static/logos, or a remote URL."""
    if logo_url.startswith("data:") or ("," in logo_url and ";base64" in logo_url):
        logo_data = logo_url.split(",", 1)[1]
        return Image.open(io.BytesIO(base64.b64decode(logo_data)))

    rel = static_relative_from_url(logo_url)
    if rel is None and not logo_url.startswith(("http://", "https://")):
        rel = logo_url
    if rel is not None:
        path = absolute_static_path(rel, within=LOGO_FOLDER)
        if not path or not os.path.exists(path):
            raise FileNotFoundError(logo_url)
        return Image.open(path)

    resp = requests.get(logo_url, timeout=5)
    resp.raise_for_status()
    return Image.open(io.BytesIO(resp.content))


def generate_qr(data, foreground_color="#000000", background_color="#ffffff",
                logo_url=None, qr_style="square", eye_shape="square", size=None) -> bytes:
    """
    Render `data` as a PNG QR code and return the raw bytes.

    The code uses high error correction so a centered logo (25% of the
    width, on a padded background-colored square) stays scannable.
    """
    size = int(size or current_app.config.get("QR_IMAGE_SIZE", 1000))
    fill_rgb = _parse_color(foreground_color, (0, 0, 0))
    back_rgb = _parse_color(background_color, (255, 255, 255))

    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=QUIET_ZONE,
    )
    qr.add_data(data)
    qr.make(fit=True)

    qr_img = qr.make_image(
        image_factory=StyledPilImage,
        module_drawer=_module_drawer(qr_style),
        eye_drawer=_eye_drawer(eye_shape),
        color_mask=SolidFillColorMask(back_color=back_rgb, front_color=fill_rgb)
    ).convert("RGB")
    qr_img = qr_img.resize((size, size), Image.NEAREST)

    if logo_url:
        try:
            logo = load_logo(logo_url)
        except Exception as e:
            current_app.logger.error(f"Failed to load logo {logo_url}: {e}")
            raise QRGenerationError("Failed to load logo image. Please check the logo URL.") from e

        logo_size = int(size * LOGO_RATIO)
        padding = int(logo_size * LOGO_PADDING_RATIO)
        logo = logo.convert("RGBA").resize((logo_size, logo_size))

        logo_x = (size - logo_size) // 2
        logo_y = (size - logo_size) // 2

        # Background square behind the logo keeps the surrounding modules readable
        ImageDraw.Draw(qr_img).rectangle(
            [logo_x - padding, logo_y - padding,
             logo_x + logo_size + padding, logo_y + logo_size + padding],
            fill=back_rgb,
        )
        qr_img.paste(logo, (logo_x, logo_y), logo)

    buffer = io.BytesIO()
    qr_img.save(buffer, format="PNG")
    return buffer.getvalue()
