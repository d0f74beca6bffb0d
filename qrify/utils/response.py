from flask import jsonify


def api_response(success: bool, message: str, data=None, status: int = 200, **extra):
    # Unified envelope; extra keys ride alongside success/message/data
    body = {
        "success": success,
        "message": message,
        "data": data,
    }
    body.update(extra)
    return jsonify(body), status
