import datetime
import jwt
from flask import current_app


def encode_token(user_id: int, role: str = "user") -> str:
    days = int(current_app.config.get("JWT_EXPIRES_DAYS", 7))
    payload = {
        "user_id": user_id,
        "role": role,
        "exp": datetime.datetime.utcnow() + datetime.timedelta(days=days),
    }
    token = jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")
    return token


def decode_token(token: str) -> dict:
    payload = jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
    return payload
