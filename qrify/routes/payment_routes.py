import json

import stripe
from flask import Blueprint, request, current_app

from ..routes.auth_routes import token_required
from ..services.payment_service import (
    create_razorpay_order, create_stripe_checkout_session,
    verify_webhook_signature, construct_stripe_event,
    process_razorpay_event, process_stripe_event, get_user_subscriptions,
    PaymentProviderError,
)
from ..utils.plan_limits import PRICING_PLANS, is_paid_plan
from ..utils.response import api_response

payment_bp = Blueprint("payments", __name__)


@payment_bp.route('/plans')
def plans():
    return api_response(True, "Pricing plans", PRICING_PLANS)


def _requested_paid_plan():
    data = request.get_json(silent=True) or {}
    plan = data.get('plan')
    return plan if is_paid_plan(plan) else None


@payment_bp.route('/razorpay/create-order', methods=['POST'])
@token_required
def razorpay_create_order(current_user):
    plan = _requested_paid_plan()
    if not plan:
        return api_response(False, "Invalid plan", None, 400)

    try:
        order = create_razorpay_order(current_user, plan)
    except PaymentProviderError as e:
        current_app.logger.error(f"Razorpay Order Error: {e}")
        return api_response(False, "Failed to create order", None, 500)

    return api_response(True, "Order created", order)


@payment_bp.route('/razorpay/webhook', methods=['POST'])
def razorpay_webhook():
    """Razorpay webhook endpoint; authenticated by signature, not token."""
    payload_body = request.get_data()
    signature = request.headers.get('X-Razorpay-Signature')
    webhook_secret = current_app.config.get('RAZORPAY_WEBHOOK_SECRET')

    if not signature or not webhook_secret:
        current_app.logger.error("Razorpay webhook: missing signature or secret")
        return api_response(False, "Missing signature or secret", None, 400)

    if not verify_webhook_signature(payload_body, signature, webhook_secret):
        current_app.logger.error("Razorpay webhook: invalid signature")
        return api_response(False, "Invalid signature", None, 400)

    try:
        event_data = json.loads(payload_body)
    except ValueError:
        return api_response(False, "Invalid JSON", None, 400)

    current_app.logger.info(f"Received Razorpay webhook event: {event_data.get('event', 'unknown')}")
    success, message = process_razorpay_event(
        event_data, signature, header_event_id=request.headers.get('X-Razorpay-Event-Id')
    )

    # Processing errors are recorded on the stored event; acknowledge receipt either way
    if not success:
        current_app.logger.error(f"Razorpay webhook processing failed: {message}")
    return api_response(success, message, None)


@payment_bp.route('/stripe/checkout', methods=['POST'])
@token_required
def stripe_checkout(current_user):
    plan = _requested_paid_plan()
    if not plan:
        return api_response(False, "Invalid plan", None, 400)

    try:
        session = create_stripe_checkout_session(current_user, plan)
    except PaymentProviderError as e:
        current_app.logger.error(f"Stripe Checkout Error: {e}")
        return api_response(False, "Failed to create checkout session", None, 500)

    return api_response(True, "Checkout session created", session)


@payment_bp.route('/stripe/webhook', methods=['POST'])
def stripe_webhook():
    payload_body = request.get_data()
    signature = request.headers.get('Stripe-Signature')
    webhook_secret = current_app.config.get('STRIPE_WEBHOOK_SECRET')

    if not signature or not webhook_secret:
        current_app.logger.error("Stripe webhook: missing signature or secret")
        return api_response(False, "Missing signature or secret", None, 400)

    try:
        event_data = construct_stripe_event(payload_body, signature, webhook_secret)
    except stripe.SignatureVerificationError as e:
        current_app.logger.error(f"Stripe webhook: invalid signature: {e}")
        return api_response(False, "Invalid signature", None, 400)
    except ValueError:
        return api_response(False, "Invalid payload", None, 400)

    current_app.logger.info(f"Received Stripe webhook event: {event_data.get('type', 'unknown')}")
    success, message = process_stripe_event(event_data, signature)
    if not success:
        current_app.logger.error(f"Stripe webhook processing failed: {message}")
    return api_response(success, message, None)


@payment_bp.route('/subscriptions')
@token_required
def subscriptions(current_user):
    return api_response(True, "Subscriptions fetched", [s.to_dict() for s in get_user_subscriptions(current_user)])
