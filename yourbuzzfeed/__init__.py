import logging
import time

from flask import Flask, jsonify, request, g
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .utils.error_handler import ErrorHandler

from yourbuzzfeed.config import (
    SECRET_KEY, SQLALCHEMY_TRACK_MODIFICATIONS, SQLALCHEMY_ECHO, SQLALCHEMY_ENGINE_OPTIONS,
    get_database_uri,
    IS_PRODUCTION, APP_ENV,
    REDIS_URL,
    SESSION_BACKEND, SESSION_COOKIE_NAME, SESSION_LIFETIME_SECONDS, SESSION_SWEEP_INTERVAL_SECONDS,
    OPENAI_API_KEY, OPENAI_MODEL_NAME, UNSPLASH_ACCESS_KEY,
    BATCH_MAX_WORKERS, NEWS_SCRAPE_CRON_HOURS,
    ENABLE_ADMIN_RECOVERY,
    RATELIMIT_STORAGE_URI, LOGIN_RATE_LIMIT,
    LOG_LEVEL, LOG_FILE,
    CORS_ORIGINS,
)

# Extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
limiter = Limiter(key_func=get_remote_address)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def create_app(config_overrides=None):
    app = Flask(__name__, instance_relative_config=False)

    app.config.from_mapping(
        SECRET_KEY=SECRET_KEY,
        APP_ENV=APP_ENV,
        IS_PRODUCTION=IS_PRODUCTION,
        SQLALCHEMY_DATABASE_URI=get_database_uri(),
        SQLALCHEMY_TRACK_MODIFICATIONS=SQLALCHEMY_TRACK_MODIFICATIONS,
        SQLALCHEMY_ECHO=SQLALCHEMY_ECHO,
        SQLALCHEMY_ENGINE_OPTIONS=SQLALCHEMY_ENGINE_OPTIONS,
        REDIS_URL=REDIS_URL,
        SESSION_BACKEND=SESSION_BACKEND,
        SESSION_COOKIE_NAME=SESSION_COOKIE_NAME,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE='Lax',
        SESSION_COOKIE_SECURE=IS_PRODUCTION,
        SESSION_LIFETIME_SECONDS=SESSION_LIFETIME_SECONDS,
        SESSION_SWEEP_INTERVAL_SECONDS=SESSION_SWEEP_INTERVAL_SECONDS,
        OPENAI_API_KEY=OPENAI_API_KEY,
        OPENAI_MODEL_NAME=OPENAI_MODEL_NAME,
        UNSPLASH_ACCESS_KEY=UNSPLASH_ACCESS_KEY,
        BATCH_MAX_WORKERS=BATCH_MAX_WORKERS,
        NEWS_SCRAPE_CRON_HOURS=NEWS_SCRAPE_CRON_HOURS,
        ENABLE_ADMIN_RECOVERY=ENABLE_ADMIN_RECOVERY,
        RATELIMIT_STORAGE_URI=RATELIMIT_STORAGE_URI,
        LOGIN_RATE_LIMIT=LOGIN_RATE_LIMIT,
        LOG_LEVEL=LOG_LEVEL,
        LOG_FILE=LOG_FILE,
        CORS_ORIGINS=CORS_ORIGINS,
        JSON_SORT_KEYS=False,
    )
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)
    CORS(app,
         origins=app.config['CORS_ORIGINS'],
         methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
         allow_headers=["Content-Type"],
         supports_credentials=True)

    # Server-side sessions keyed by an opaque cookie token
    from .utils.sessions import ServerSideSessionInterface, build_session_repository
    app.session_interface = ServerSideSessionInterface(build_session_repository(app))

    ErrorHandler.register_handlers(app)

    # Models must be imported before create_all / migrations see them
    from . import models  # noqa: F401

    app.url_map.strict_slashes = False

    from .routes.auth import auth_bp
    from .routes.categories import categories_bp
    from .routes.articles import articles_bp
    from .routes.tags import tags_bp
    from .routes.admin import admin_bp
    from .routes.ai import ai_bp
    from .routes.images import images_bp
    from .routes.pipelines import pipelines_bp

    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(categories_bp, url_prefix='/api/categories')
    app.register_blueprint(articles_bp, url_prefix='/api/articles')
    app.register_blueprint(tags_bp, url_prefix='/api/tags')
    app.register_blueprint(admin_bp, url_prefix='/api')
    app.register_blueprint(ai_bp, url_prefix='/api/ai')
    app.register_blueprint(images_bp, url_prefix='/api/images')
    app.register_blueprint(pipelines_bp, url_prefix='/api')

    from .utils.init_db import register_commands
    register_commands(app)

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_api_request(response):
        if request.path.startswith('/api'):
            started = g.get('request_started')
            duration_ms = int((time.perf_counter() - started) * 1000) if started else 0
            app.logger.info(f"{request.method} {request.path} {response.status_code} in {duration_ms}ms")
        return response

    @app.route('/api/health')
    def health_check():
        return jsonify({'status': 'healthy', 'env': app.config['APP_ENV']}), 200

    app.logger.info("yourbuzzfeed app created (env=%s)", app.config['APP_ENV'])
    return app


def configure_logging(app):
    app.logger.setLevel(getattr(logging, app.config['LOG_LEVEL'], logging.INFO))
    existing = {handler.get_name() for handler in app.logger.handlers}

    if 'yourbuzzfeed-console' not in existing:
        console_handler = logging.StreamHandler()
        console_handler.set_name('yourbuzzfeed-console')
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        app.logger.addHandler(console_handler)

    log_file = app.config.get('LOG_FILE')
    if log_file and 'yourbuzzfeed-file' not in existing:
        file_handler = logging.FileHandler(log_file)
        file_handler.set_name('yourbuzzfeed-file')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        app.logger.addHandler(file_handler)

    # Chatty third-party loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('openai').setLevel(logging.WARNING)
