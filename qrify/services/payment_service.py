import datetime
import hashlib
import hmac
import json
import time

import requests
import stripe
from flask import current_app

from ..extensions import db
from ..models.subscription import Subscription, PAYMENT_PROVIDERS
from ..models.user import User
from ..models.webhook_events import WebhookEvent
from ..repositories.user_repository import get_user_by_id
from ..utils.plan_limits import PRICING_PLANS, is_paid_plan

RAZORPAY_ORDERS_URL = "https://api.razorpay.com/v1/orders"
SUBSCRIPTION_DAYS = 30
STRIPE_SIGNATURE_TOLERANCE = 300


class PaymentProviderError(Exception):
    pass


def create_razorpay_order(user, plan: str) -> dict:
    """Create a Razorpay order for a paid plan; amount is in paise."""
    key_id = current_app.config.get("RAZORPAY_KEY_ID")
    key_secret = current_app.config.get("RAZORPAY_KEY_SECRET")
    if not key_id or not key_secret:
        raise PaymentProviderError("Razorpay credentials are not configured")

    plan_config = PRICING_PLANS[plan]
    payload = {
        "amount": plan_config["price"] * 100,
        "currency": plan_config["currency"],
        "receipt": f"rcpt_{int(time.time() * 1000)}_{str(user.id)[:6]}",
        "notes": {
            "userId": str(user.id),
            "plan": plan,
        },
    }

    try:
        response = requests.post(RAZORPAY_ORDERS_URL, json=payload, auth=(key_id, key_secret), timeout=10)
    except requests.RequestException as e:
        raise PaymentProviderError(f"Razorpay order creation failed: {e}") from e

    if response.status_code not in (200, 201):
        raise PaymentProviderError(f"Razorpay order creation failed: {response.text}")

    order = response.json()
    return {
        "orderId": order.get("id"),
        "amount": order.get("amount"),
        "currency": order.get("currency"),
        "keyId": key_id,
    }


def create_stripe_checkout_session(user, plan: str) -> dict:
    secret_key = current_app.config.get("STRIPE_SECRET_KEY")
    if not secret_key:
        raise PaymentProviderError("Stripe credentials are not configured")

    plan_config = PRICING_PLANS[plan]
    base_url = current_app.config.get("BASE_URL")

    try:
        session = stripe.checkout.Session.create(
            api_key=secret_key,
            payment_method_types=["card"],
            mode="payment",
            line_items=[{
                "quantity": 1,
                "price_data": {
                    "currency": "usd",
                    "unit_amount": plan_config["price"] * 100,
                    "product_data": {
                        "name": f"{plan_config['name']} Plan",
                        "description": plan_config["description"],
                    },
                },
            }],
            success_url=f"{base_url}/dashboard?payment=success",
            cancel_url=f"{base_url}/pricing?payment=cancelled",
            metadata={"userId": str(user.id), "plan": plan},
        )
    except stripe.StripeError as e:
        raise PaymentProviderError(f"Stripe checkout failed: {e}") from e

    return {"sessionUrl": session.url, "sessionId": session.id}


def verify_webhook_signature(payload_body, signature, secret):
    """
    Verify a Razorpay webhook signature: hex HMAC-SHA256 of the raw body.
    """
    if not signature or not secret:
        return False
    if isinstance(payload_body, str):
        payload_body = payload_body.encode('utf-8')

    expected_signature = hmac.new(
        secret.encode('utf-8'),
        payload_body,
        hashlib.sha256
    ).hexdigest()

    return hmac.compare_digest(expected_signature, signature)


def construct_stripe_event(payload_body, header, secret) -> dict:
    """
    Verify a `Stripe-Signature` header and return the event as a plain dict.

    Raises:
        stripe.SignatureVerificationError: bad, missing or stale signature
        ValueError: body is not UTF-8 JSON
    """
    event = stripe.Webhook.construct_event(
        payload_body, header, secret, tolerance=STRIPE_SIGNATURE_TOLERANCE
    )
    return event.to_dict()


def store_webhook_event(provider, event_id, event_type, event_data, signature,
                        payment_id=None, user_id=None):
    """
    Store a webhook event once.

    Returns:
        WebhookEvent: the new record, or None if this event id was seen before
    """
    existing_event = WebhookEvent.query.filter_by(event_id=event_id).first()
    if existing_event:
        current_app.logger.info(f"Webhook event {event_id} already exists, skipping")
        return None

    try:
        user_id = int(user_id) if user_id not in (None, "") else None
    except (TypeError, ValueError):
        user_id = None

    webhook_event = WebhookEvent(
        provider=provider,
        event_id=event_id,
        event_type=event_type,
        payload=json.dumps(event_data),
        signature=signature,
        processed=False,
        payment_id=payment_id,
        user_id=user_id,
        created_at=datetime.datetime.utcnow()
    )
    db.session.add(webhook_event)
    db.session.commit()
    return webhook_event


def activate_plan(user_id, plan, amount, currency, provider, order_id=None, payment_id=None):
    """Create an active Subscription for 30 days and move the user onto `plan`."""
    user = get_user_by_id(user_id)
    if not user:
        raise ValueError(f"User {user_id} not found")
    if plan not in PRICING_PLANS:
        raise ValueError(f"Unknown plan {plan}")
    if provider not in PAYMENT_PROVIDERS:
        raise ValueError(f"Unknown payment provider {provider}")

    start_date = datetime.datetime.utcnow()
    subscription = Subscription(
        user_id=user.id,
        plan=plan,
        amount=amount,
        currency=(currency or "INR").upper(),
        payment_provider=provider,
        provider_order_id=order_id,
        provider_payment_id=payment_id,
        status="active",
        start_date=start_date,
        end_date=start_date + datetime.timedelta(days=SUBSCRIPTION_DAYS),
    )
    db.session.add(subscription)
    user.subscription_plan = plan
    db.session.commit()

    current_app.logger.info(f"Activated {plan} plan for user {user.id} via {provider}")
    return subscription


def record_failed_payment(user_id, plan, amount, currency, provider, order_id=None, payment_id=None):
    user = get_user_by_id(user_id)
    if not user or plan not in PRICING_PLANS:
        return None
    subscription = Subscription(
        user_id=user.id,
        plan=plan,
        amount=amount,
        currency=(currency or "INR").upper(),
        payment_provider=provider,
        provider_order_id=order_id,
        provider_payment_id=payment_id,
        status="failed",
    )
    db.session.add(subscription)
    db.session.commit()
    return subscription


def _mark_processed(webhook_event, error=None):
    webhook_event.processed = error is None
    webhook_event.processed_at = datetime.datetime.utcnow()
    webhook_event.error_message = error
    db.session.commit()


def process_razorpay_event(event_data, signature, header_event_id=None):
    """
    Main Razorpay webhook processing function

    Returns:
        tuple: (success: bool, message: str)
    """
    event_type = event_data.get('event', 'unknown')
    payment_entity = (event_data.get('payload') or {}).get('payment', {}).get('entity', {}) or {}
    payment_id = payment_entity.get('id')
    notes = payment_entity.get('notes') or {}
    if not isinstance(notes, dict):
        notes = {}

    event_id = header_event_id or event_data.get('id') or \
        f"{event_type}_{payment_id or event_data.get('created_at', '')}"

    webhook_event = store_webhook_event(
        "razorpay", event_id, event_type, event_data, signature,
        payment_id=payment_id, user_id=notes.get('userId'),
    )
    if not webhook_event:
        return True, "Duplicate event, already processed"

    try:
        user_id = notes.get('userId')
        plan = notes.get('plan')

        if event_type == 'payment.captured':
            if user_id and is_paid_plan(plan):
                activate_plan(
                    user_id, plan,
                    amount=(payment_entity.get('amount') or 0) / 100,
                    currency=payment_entity.get('currency'),
                    provider="razorpay",
                    order_id=payment_entity.get('order_id'),
                    payment_id=payment_id,
                )
            else:
                current_app.logger.warning(f"payment.captured {payment_id} without userId/plan notes")
        elif event_type == 'payment.failed':
            current_app.logger.warning(f"Payment failed for: {notes}")
            if user_id and is_paid_plan(plan):
                record_failed_payment(
                    user_id, plan,
                    amount=(payment_entity.get('amount') or 0) / 100,
                    currency=payment_entity.get('currency'),
                    provider="razorpay",
                    order_id=payment_entity.get('order_id'),
                    payment_id=payment_id,
                )
        else:
            current_app.logger.debug(f"Razorpay event {event_type} ignored")

        _mark_processed(webhook_event)
        return True, f"Event {event_type} processed successfully"

    except Exception as e:
        db.session.rollback()
        error_msg = f"Failed to process {event_type}: {e}"
        current_app.logger.error(error_msg)
        _mark_processed(webhook_event, error_msg)
        return False, error_msg


def process_stripe_event(event_data, signature):
    event_type = event_data.get('type', 'unknown')
    session = (event_data.get('data') or {}).get('object') or {}
    metadata = session.get('metadata') or {}

    webhook_event = store_webhook_event(
        "stripe", event_data.get('id') or f"{event_type}_{session.get('id')}", event_type,
        event_data, signature, payment_id=session.get('payment_intent'),
        user_id=metadata.get('userId'),
    )
    if not webhook_event:
        return True, "Duplicate event, already processed"

    try:
        if event_type == 'checkout.session.completed':
            user_id = metadata.get('userId')
            plan = metadata.get('plan')
            if session.get('payment_status', 'paid') == 'paid' and user_id and is_paid_plan(plan):
                activate_plan(
                    user_id, plan,
                    amount=(session.get('amount_total') or 0) / 100,
                    currency=session.get('currency'),
                    provider="stripe",
                    order_id=session.get('id'),
                    payment_id=session.get('payment_intent'),
                )
            else:
                current_app.logger.warning(f"Stripe session {session.get('id')} not activatable")
        else:
            current_app.logger.debug(f"Stripe event {event_type} ignored")

        _mark_processed(webhook_event)
        return True, f"Event {event_type} processed successfully"

    except Exception as e:
        db.session.rollback()
        error_msg = f"Failed to process {event_type}: {e}"
        current_app.logger.error(error_msg)
        _mark_processed(webhook_event, error_msg)
        return False, error_msg


def get_user_subscriptions(user: User):
    return Subscription.query.filter_by(user_id=user.id).order_by(Subscription.created_at.desc()).all()
