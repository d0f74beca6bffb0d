# utils/plan_limits.py
PRICING_PLANS = {
    "free": {
        "name": "Free",
        "price": 0,
        "currency": "INR",
        "max_qr_codes": 3,
        "analytics": "basic",
        "description": "For individuals exploring QR codes.",
        "features": [
            "3 Dynamic QR Codes",
            "Basic Scan Analytics",
            "Standard Support",
            "Static QR Codes",
        ],
    },
    "pro": {
        "name": "Pro",
        "price": 499,
        "currency": "INR",
        "max_qr_codes": 5,
        "analytics": "full",
        "description": "For professionals and creators.",
        "features": [
            "5 Dynamic QR Codes",
            "Advanced Analytics (Geo, Device)",
            "Custom Logo & Colors",
            "Remove Watermark",
            "Priority Support",
        ],
    },
    "business": {
        "name": "Business",
        "price": 1499,
        "currency": "INR",
        "max_qr_codes": 1000000,  # effectively unlimited
        "analytics": "advanced",
        "team_access": True,
        "description": "For agencies and teams.",
        "features": [
            "Unlimited QR Codes",
            "Team Management",
            "API Access",
            "White Labeling",
            "Dedicated Account Manager",
        ],
    },
}

PAID_PLANS = tuple(name for name, plan in PRICING_PLANS.items() if plan["price"] > 0)


def is_paid_plan(plan) -> bool:
    return plan in PAID_PLANS
