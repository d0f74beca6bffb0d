def serialize_user(user) -> dict:
    # Never includes the password hash
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "provider": user.provider,
        "role": user.role,
        "subscriptionPlan": user.subscription_plan,
        "isActive": user.is_active,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "updatedAt": user.updated_at.isoformat() if user.updated_at else None,
    }
