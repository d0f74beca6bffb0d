import datetime
from ..extensions import db

PAYMENT_PROVIDERS = ("razorpay", "stripe")


class Subscription(db.Model):
    __tablename__ = "subscriptions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    plan = db.Column(db.String(20), nullable=False)  # free, pro, business
    amount = db.Column(db.Float, nullable=False, default=0.0)
    currency = db.Column(db.String(10), default="INR")
    payment_provider = db.Column(db.String(20), nullable=False)
    provider_order_id = db.Column(db.String(255), nullable=True)  # razorpay order id / stripe session id
    provider_payment_id = db.Column(db.String(255), nullable=True)  # razorpay payment id / stripe payment intent
    status = db.Column(db.String(20), default="pending", nullable=False)  # active, pending, cancelled, expired, failed
    start_date = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    end_date = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    def __repr__(self):
        return f"<Subscription {self.id} {self.plan} ({self.status})>"

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "plan": self.plan,
            "amount": self.amount,
            "currency": self.currency,
            "paymentProvider": self.payment_provider,
            "providerOrderId": self.provider_order_id,
            "providerPaymentId": self.provider_payment_id,
            "status": self.status,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
        }
