# utils/plan_checker.py
from ..models.qr_code import QRCode
from .plan_limits import PRICING_PLANS


class PlanLimitError(Exception):
    """Raised when a user cannot create another QR code on their plan."""

    def __init__(self, message, current_plan="free"):
        super().__init__(message)
        self.message = message
        self.current_plan = current_plan

    @property
    def upgrade_required(self):
        return self.current_plan == "free"


def subscription_guard(user):
    """
    Active-QR quota check.
    Only ACTIVE codes count, so deactivating or deleting frees a slot.
    """
    plan = getattr(user, "subscription_plan", None) or "free"
    plan_config = PRICING_PLANS.get(plan)
    if not plan_config:
        raise PlanLimitError("Invalid pricing plan configuration", plan)

    current_count = QRCode.query.filter(
        QRCode.user_id == user.id,
        QRCode.is_active == True  # noqa: E712
    ).count()
    max_codes = plan_config["max_qr_codes"]

    if current_count >= max_codes:
        if plan == "free":
            raise PlanLimitError(
                f"Free plan limit reached! You've created {current_count}/{max_codes} QR codes. "
                "Upgrade to Pro plan to create more QR codes.",
                plan,
            )
        raise PlanLimitError(
            f"You have reached the limit of {max_codes} active QR codes for the "
            f"{plan_config['name']} plan. Please upgrade to create more.",
            plan,
        )

    return {
        "authorized": True,
        "plan": plan,
        "remaining": max_codes - current_count,
    }
