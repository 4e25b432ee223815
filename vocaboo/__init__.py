from flask import Flask, jsonify
from flask_cors import CORS
from vocaboo.config import config
from vocaboo.exceptions import VocabooError
from vocaboo.services.data_service import data_service
import logging
from logging.handlers import RotatingFileHandler
import os

def _configure_logging(app):
    os.makedirs(config.LOG_DIR, exist_ok=True)
    log_path = os.path.join(config.LOG_DIR, 'vocaboo.log')
    package_logger = logging.getLogger('vocaboo')
    if not any(getattr(h, 'baseFilename', None) == os.path.abspath(log_path) for h in package_logger.handlers):
        file_handler = RotatingFileHandler(log_path, maxBytes=10240, backupCount=10)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        package_logger.addHandler(file_handler)
        app.logger.addHandler(file_handler)
    package_logger.setLevel(logging.INFO)
    app.logger.setLevel(logging.INFO)

def create_app(overrides=None):
    for key, value in (overrides or {}).items():
        setattr(config, key, value)

    app = Flask(__name__)

    # Apply Config
    app.config['MAX_CONTENT_LENGTH'] = config.MAX_CONTENT_LENGTH
    app.json.ensure_ascii = config.JSON_AS_ASCII

    # Configure Logging
    _configure_logging(app)
    app.logger.info('Vocaboo startup')

    CORS(app, origins="*", allow_headers=config.CORS_ALLOW_HEADERS)

    data_service.initialize()

    # Register Blueprints
    from vocaboo.routes.main import main_bp
    from vocaboo.routes.auth import auth_bp
    from vocaboo.routes.functions import functions_bp
    from vocaboo.routes.catalog import catalog_bp
    from vocaboo.routes.learner import learner_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(functions_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(learner_bp)

    # Error Handlers
    @app.errorhandler(VocabooError)
    def vocaboo_error(e):
        if e.status >= 500:
            app.logger.error(f'{type(e).__name__}: {e.message}')
        return jsonify({"error": e.message}), e.status

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "not_found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "method_not_allowed"}), 405

    @app.errorhandler(413)
    def request_entity_too_large(e):
        app.logger.warning('Request entity too large')
        return jsonify({"error": "payload_too_large"}), 413

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.error(f'Server Error: {e}')
        return jsonify({"error": "Internal Server Error"}), 500

    return app
