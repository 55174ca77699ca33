import logging
from flask import jsonify
from services.errors import JoinError
from utils import t
from .join import join_bp
from .teams import teams_bp

logger = logging.getLogger(__name__)

def handle_join_error(error):
    """Render flow and management errors as JSON"""
    if error.status_code >= 500:
        logger.warning("[Routes] %s: %s", error.code, error.message_key)
    return jsonify({
        'error': error.code,
        'message': t(error.message_key, **error.params),
    }), error.status_code

def register_blueprints(app):
    """Register all blueprints with the Flask app"""
    app.register_blueprint(join_bp)
    app.register_blueprint(teams_bp)
    app.register_error_handler(JoinError, handle_join_error)
