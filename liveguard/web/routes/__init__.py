"""
Routes package
Registers all blueprints
"""
from .api_attendance import attendance_api_bp
from .api_gallery import gallery_api_bp
from .api_sessions import sessions_api_bp
from .api_system import system_api_bp


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(system_api_bp)
    app.register_blueprint(gallery_api_bp)
    app.register_blueprint(sessions_api_bp)
    app.register_blueprint(attendance_api_bp)

    app.logger.info("Registered API blueprints")
