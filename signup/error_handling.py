from flask import jsonify
from werkzeug.exceptions import HTTPException
import logging

logger = logging.getLogger(__name__)


def _error_body(error: str, message: str, status_code: int):
    return jsonify({
        'error': error,
        'message': message,
        'status_code': status_code
    }), status_code


def register_error_handlers(app):
    """Register JSON error handlers for the Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions (404, 405, malformed requests...)"""
        return _error_body(e.name, e.description, e.code)

    @app.errorhandler(500)
    def internal_error(e):
        logger.error(f'Internal error: {str(e)}', exc_info=True)
        return _error_body('Internal Server Error', 'An unexpected error occurred', 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.error(f'Unexpected error: {str(e)}', exc_info=True)
        return _error_body('Internal Server Error', 'An unexpected error occurred', 500)
