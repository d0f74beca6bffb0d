import datetime
from ..extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=True)  # None for Google accounts

    provider = db.Column(db.String(20), default="email", nullable=False)  # email, google
    role = db.Column(db.String(20), default="user", nullable=False)  # user, admin
    subscription_plan = db.Column(db.String(20), default="free", nullable=False)  # free, pro, business
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    qr_codes = db.relationship("QRCode", backref="owner", lazy=True)

    @property
    def is_admin(self):
        return self.role == "admin"

    def __repr__(self):
        return f"<User {self.email}>"
