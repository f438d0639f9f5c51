import os
import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from flask import Flask, request, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()

logger = logging.getLogger(__name__)


def _resolve_timezone(name):
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise RuntimeError(f'APP_TIMEZONE "{name}" is not a known IANA time zone')


def create_app(test_config=None):
    app = Flask(__name__)

    is_production = os.getenv('FLASK_ENV') == 'production'

    secret_key = os.getenv('SECRET_KEY')
    if not secret_key:
        if is_production:
            raise RuntimeError('SECRET_KEY environment variable is required')
        secret_key = 'dev-only-secret'
    app.config['SECRET_KEY'] = secret_key

    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv('DATABASE_URL', 'sqlite:///bplog.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
        'pool_pre_ping': True,
    }

    # Request size limit (2 MB, CSV imports included)
    app.config['MAX_CONTENT_LENGTH'] = 2 * 1024 * 1024

    app.config['APP_TIMEZONE'] = os.getenv('APP_TIMEZONE', 'UTC')
    app.config['READINGS_LIST_LIMIT'] = int(os.getenv('READINGS_LIST_LIMIT', 100))
    app.config['AUDIT_LOG_FILE'] = os.getenv('AUDIT_LOG_FILE', 'logs/audit.log')

    if test_config:
        app.config.update(test_config)

    tz = _resolve_timezone(app.config['APP_TIMEZONE'])
    app.config['TZ'] = tz
    if 'CLOCK' not in app.config:
        app.config['CLOCK'] = lambda: datetime.now(tz)

    db.init_app(app)
    migrate.init_app(app, db)

    # CORS: restrict origins
    allowed_origins = os.getenv('ALLOWED_ORIGINS', '')
    if allowed_origins:
        origins_list = [o.strip() for o in allowed_origins.split(',') if o.strip()]
    elif is_production:
        raise RuntimeError(
            'ALLOWED_ORIGINS environment variable is required in production'
        )
    else:
        # Development: allow localhost variants
        origins_list = [
            'http://localhost:*',
            'http://127.0.0.1:*',
        ]

    CORS(app, resources={r"/api/*": {"origins": origins_list}})

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate'
        response.headers['Referrer-Policy'] = 'no-referrer'
        return response

    @app.before_request
    def validate_content_type():
        if request.method in ('POST', 'PUT'):
            content_type = request.content_type or ''
            if 'application/json' not in content_type:
                return jsonify({'error': 'Content-Type must be application/json'}), 415

    from bplog.utils.audit_logger import setup_audit_logging
    setup_audit_logging(app)

    from bplog.routes import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    @app.route('/health')
    def health():
        return {'status': 'healthy'}, 200

    from bplog.cli import register_commands
    register_commands(app)

    logger.info('bplog app created (timezone=%s)', app.config['APP_TIMEZONE'])
    return app
