import os
from datetime import datetime, timezone

from flask import Flask, render_template, request
from flask_wtf.csrf import CSRFError

# Local runs read .env; deployed environments get real env vars
if os.getenv("APP_ENV", "development") != "production":
    from dotenv import load_dotenv
    load_dotenv(".env", override=False)


from .config import get_config
from .extensions import db, migrate, csrf, limiter
from .security import init_security
from .observability import init_logging, init_sentry
from .services.errors import ServiceError
from .services.policy import _wants_json, gate_session_id

PROD_LIKE = ("staging", "production")


def _limiter_storage(app_env: str) -> str:
    if app_env not in PROD_LIKE:
        return "memory://"
    uri = os.environ.get("REDIS_URL")
    if not uri:
        # Login throttling must survive restarts and span workers
        raise RuntimeError("REDIS_URL is required in staging/production for rate limiting")
    return uri


def _check_required_settings(app) -> None:
    for name in ("SECRET_KEY", "DATABASE_URL"):
        if not (os.getenv(name) or app.config.get(name)):
            raise RuntimeError(f"Missing required environment variable: {name}")
    if not (app.config.get("GATE_PASSWORD_HASH") or app.config.get("GATE_PASSWORD")):
        raise RuntimeError("Missing required environment variable: GATE_PASSWORD_HASH")


def _register_error_handlers(app) -> None:
    @app.errorhandler(ServiceError)
    def handle_service_error(e):
        # Always land the user on something they can act on
        if e.status_code >= 500:
            app.logger.error("service error on %s: %s", request.path, e)
        if _wants_json():
            return {"ok": False, "error": e.code, "message": e.public_message}, e.status_code
        return render_template("errors/notice.html", message=e.public_message), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        if _wants_json():
            return {"error": "not_found", "code": 404}, 404
        return ("Not Found", 404)

    @app.errorhandler(500)
    def server_error(e):
        if _wants_json():
            return {"error": "server_error", "code": 500}, 500
        return ("Internal Server Error", 500)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        return (f"CSRF validation failed: {e.description}", 400)

    @app.errorhandler(429)
    def too_many_requests(e):
        retry_after = getattr(e, "retry_after", None)
        headers = {"Retry-After": str(int(retry_after))} if retry_after is not None else {}
        if _wants_json():
            body = {"error": "rate_limited", "code": 429}
            if retry_after is not None:
                body["retry_after"] = int(retry_after)
            return (body, 429, headers)
        return (render_template("errors/429.html", retry_after=retry_after), 429, headers)


def create_app():
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app_env = (os.getenv("APP_ENV", "development") or "development").lower()

    app.config["RATELIMIT_STORAGE_URI"] = _limiter_storage(app_env)
    app.config.setdefault("RATELIMIT_HEADERS_ENABLED", True)
    app.config.from_object(get_config())

    if app_env in PROD_LIKE:
        _check_required_settings(app)

    init_logging(app)
    init_sentry(app)
    if app_env in PROD_LIKE:
        init_security(app)

    db.init_app(app)
    migrate.init_app(app, db, directory="migrations")
    csrf.init_app(app)
    limiter.init_app(app)

    from .blueprints.main import bp as main_bp
    from .blueprints.auth import bp as auth_bp
    from .blueprints.dashboard import bp as dashboard_bp
    from .blueprints.api import bp as api_bp
    from .blueprints.exports import bp as exports_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(dashboard_bp, url_prefix="/dash")
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(exports_bp, url_prefix="/exports")

    @app.context_processor
    def inject_globals():
        return {
            "current_year": datetime.now(timezone.utc).year,
            "site_name": app.config.get("SITE_NAME", "Feedback System"),
            "gate_open": bool(gate_session_id()),
        }

    @app.get("/healthz")
    @limiter.exempt
    def healthz():
        return {"status": "ok"}, 200

    _register_error_handlers(app)

    from .cli import register_cli
    register_cli(app)

    return app
