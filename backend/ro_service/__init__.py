from datetime import timedelta
from flask import Flask, request
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_HOURS', '24')))
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    app.config['LOG_FILE'] = os.getenv('LOG_FILE')

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    from .log_config import configure_logging
    configure_logging(app)

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    @app.teardown_appcontext
    def remove_session(exc=None):
        # fresh identity map per request so task links are never read stale
        SessionLocal.remove()

    jwt.init_app(app)

    from .services.notifications import Notifier, log_sink
    notifier = Notifier()
    notifier.register(log_sink)
    app.extensions['notifier'] = notifier

    from .routes.auth import auth_bp
    from .routes.customers import cust_bp
    from .routes.services import svc_bp
    from .routes.tasks import task_bp
    from .routes.bills import bill_bp
    from .routes.complaints import cmp_bp
    from .routes.reminders import rmd_bp
    from .routes.dashboard import dash_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(cust_bp, url_prefix='/customers')
    app.register_blueprint(svc_bp, url_prefix='/services')
    app.register_blueprint(task_bp, url_prefix='/tasks')
    app.register_blueprint(bill_bp, url_prefix='/bills')
    app.register_blueprint(cmp_bp, url_prefix='/complaints')
    app.register_blueprint(rmd_bp, url_prefix='/reminders')
    app.register_blueprint(dash_bp, url_prefix='/dashboard')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        # Nothing written by a failed request may leak into the next commit
        get_db().rollback()
        if isinstance(e, HTTPException):
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'detail': e.description,
                }
            }
            return payload, e.code
        app.logger.exception(
            'Unhandled exception method=%s path=%s remote=%s args=%s',
            request.method, request.path, request.remote_addr, request.args.to_dict(),
        )
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'An unexpected error occurred. Please try again in a moment.'
            }
        }, 500

    return app


def get_db():
    return SessionLocal()
