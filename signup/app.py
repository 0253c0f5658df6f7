import os
import logging
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify
from flask_cors import CORS

from .config import get_config
from .routes import bp
from .error_handling import register_error_handlers


def create_app(config_class=None):
    app = Flask(__name__)

    # Configuration
    config_class = config_class or get_config()
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app, origins=app.config['ALLOWED_ORIGINS'])

    # Register blueprints
    app.register_blueprint(bp, url_prefix='/api')

    # Register error handlers
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return jsonify({'status': 'healthy', 'service': 'signup'}), 200

    # Setup logging
    if not app.debug and not app.testing:
        log_dir = app.config['LOG_DIR']
        if not os.path.exists(log_dir):
            os.mkdir(log_dir)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'signup.log'), maxBytes=10240000, backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(app.config['LOG_LEVEL'])
        app.logger.addHandler(file_handler)
        logging.getLogger('signup').addHandler(file_handler)
        app.logger.setLevel(app.config['LOG_LEVEL'])
        app.logger.info('Signup service startup')

    _check_config(app, config_class)
    return app


def _check_config(app, config_class) -> bool:
    """Log configuration problems; OTP endpoints fail per request when misconfigured"""
    result = config_class.validate()
    for error in result['errors']:
        app.logger.error(f'Configuration error: {error}')
    for warning in result['warnings']:
        app.logger.warning(f'Configuration warning: {warning}')
    return result['is_valid']


def main():
    app = create_app()
    app.run(host='0.0.0.0', port=app.config['PORT'])


if __name__ == '__main__':
    main()
