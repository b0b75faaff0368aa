"""
Application Factory
Creates and configures the Flask application
"""
import logging

from flask import Flask, jsonify

from bilgen.config import get_config
from bilgen.extensions import CONTENT_PROVIDER_KEY, db


def create_app(config_name=None):
    """
    Application factory pattern
    Creates and configures Flask app
    """
    app = Flask(__name__)

    # Load configuration
    if config_name:
        from bilgen.config import config
        app.config.from_object(config[config_name])
    else:
        app.config.from_object(get_config())

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Initialize extensions
    db.init_app(app)

    from bilgen.services.content_provider import build_content_provider
    app.extensions[CONTENT_PROVIDER_KEY] = build_content_provider(app.config)

    from bilgen.errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from bilgen.routes import exams_bp, homework_bp
    app.register_blueprint(exams_bp, url_prefix='/api/exams')
    app.register_blueprint(homework_bp, url_prefix='/api/homework')

    @app.route('/health')
    def health():
        return jsonify({'status': 'healthy'})

    # Create database tables
    with app.app_context():
        from bilgen import models  # noqa: F401
        db.create_all()
        logging.getLogger(__name__).info('Database tables created/verified')

    return app
