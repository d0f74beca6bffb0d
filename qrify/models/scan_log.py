import datetime
from ..extensions import db


class ScanLog(db.Model):
    __tablename__ = "scan_logs"

    id = db.Column(db.Integer, primary_key=True)
    qr_code_id = db.Column(db.Integer, db.ForeignKey("qr_codes.id"), nullable=False)
    ip_address = db.Column(db.String(64), default="Unknown")
    user_agent = db.Column(db.String(500), default="Unknown")
    device_type = db.Column(db.String(20), default="unknown")  # mobile, tablet, desktop, bot, unknown
    os = db.Column(db.String(100), default="Unknown")
    browser = db.Column(db.String(100), default="Unknown")
    country = db.Column(db.String(100), default="Unknown")
    city = db.Column(db.String(100), default="Unknown")
    referrer = db.Column(db.String(500), default="Direct")
    scanned_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False)

    # Analytics queries filter by QR and sort by time or group by IP
    __table_args__ = (
        db.Index("ix_scan_logs_qr_scanned_at", "qr_code_id", "scanned_at"),
        db.Index("ix_scan_logs_qr_ip", "qr_code_id", "ip_address"),
    )

    def __repr__(self):
        return f"<ScanLog qr={self.qr_code_id} at {self.scanned_at}>"
