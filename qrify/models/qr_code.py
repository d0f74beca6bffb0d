import datetime
from ..extensions import db

QR_TYPES = ("url", "text", "email", "phone", "whatsapp", "wifi", "upi")
QR_STYLES = ("dots", "rounded", "square")
EYE_SHAPES = ("square", "circle")


class QRCode(db.Model):
    __tablename__ = "qr_codes"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    qr_name = db.Column(db.String(200), nullable=False)
    qr_type = db.Column(db.String(20), nullable=False)
    original_data = db.Column(db.Text, nullable=True)
    short_url = db.Column(db.String(64), unique=True, nullable=True, index=True)
    qr_image_url = db.Column(db.String(255), nullable=True)  # static-relative path

    is_dynamic = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True)
    expiry_date = db.Column(db.DateTime, nullable=True)
    scan_limit = db.Column(db.Integer, nullable=True)
    scan_count = db.Column(db.Integer, default=0, nullable=False)

    # Design
    foreground_color = db.Column(db.String(20), default="#000000")
    background_color = db.Column(db.String(20), default="#ffffff")
    gradient = db.Column(db.String(100), nullable=True)
    eye_shape = db.Column(db.String(20), default="square")
    qr_style = db.Column(db.String(20), default="square")
    logo_url = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    scans = db.relationship("ScanLog", backref="qr_code", lazy="dynamic")

    def is_expired(self, now=None):
        if not self.expiry_date:
            return False
        return (now or datetime.datetime.utcnow()) > self.expiry_date

    def scan_limit_reached(self):
        return bool(self.scan_limit) and (self.scan_count or 0) >= self.scan_limit

    def __repr__(self):
        return f"<QRCode {self.short_url} ({self.qr_type})>"
