from flask import current_app

from .response import api_response


def register_error_handlers(app):
    @app.errorhandler(400)
    def bad_request(e):
        return api_response(False, "Bad Request", None, 400)

    @app.errorhandler(401)
    def unauthorized(e):
        return api_response(False, "Unauthorized", None, 401)

    @app.errorhandler(403)
    def forbidden(e):
        return api_response(False, "Forbidden", None, 403)

    @app.errorhandler(404)
    def not_found(e):
        return api_response(False, "Not Found", None, 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_response(False, "Method Not Allowed", None, 405)

    @app.errorhandler(413)
    def too_large(e):
        return api_response(False, "Request too large", None, 413)

    @app.errorhandler(429)
    def too_many_requests(e):
        return api_response(False, "Rate limit exceeded. Try again later.", None, 429)

    @app.errorhandler(500)
    def server_error(e):
        current_app.logger.error(f"Unhandled server error: {e}")
        return api_response(False, "Internal Server Error", None, 500)
