import os
import logging
from logging.config import dictConfig

import sentry_sdk
from flask import current_app, has_app_context
from sentry_sdk.integrations.flask import FlaskIntegration

logger = logging.getLogger("qa_tagger")


def init_logging(app):
    """JSON logs in staging/prod; plain console at LOG_LEVEL in dev/tests."""
    app_env = (os.getenv("APP_ENV", "development") or "development").lower()
    level = (app.config.get("LOG_LEVEL") or "INFO").upper()
    if app_env in ("staging", "production"):
        fmt = "%(asctime)s %(levelname)s %(name)s %(message)s"
        dictConfig({
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"json": {"()": "pythonjsonlogger.json.JsonFormatter", "fmt": fmt}},
            "handlers": {"wsgi": {"class": "logging.StreamHandler", "formatter": "json"}},
            "root": {"level": level, "handlers": ["wsgi"]},
        })
    else:
        logger.setLevel(level)
        app.logger.setLevel(level)


def init_sentry(app):
    """Wire Sentry if DSN present; safe no-op otherwise."""
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return
    try:
        sentry_sdk.init(
            dsn=dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=float(os.getenv("SENTRY_TRACES", "0.0")),
            environment=os.getenv("APP_ENV", "development"),
            send_default_pii=False,
        )
    except Exception as exc:
        app.logger.warning("Sentry init skipped: %s", exc)


def log_event(event: str, level: int = logging.INFO, **fields):
    """
    One structured line per domain event. Fields land in `extra` so the JSON
    formatter emits them as keys; never pass free text typed by users.
    """
    target = current_app.logger if has_app_context() else logger
    target.log(level, event, extra={"event": event, **fields})
