# src/flexpro/app_logger.py
"""
Loggers for the portal. Everything logs under ``flexpro.<area>``
(``get_logger("auth.deps")`` -> ``flexpro.auth.deps``).

``json_logging_config`` is the dictConfig shared by the app factory and
gunicorn, so the API process and its workers emit the same JSON lines.
"""
import logging
import os

ROOT_LOGGER = "flexpro"
PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(process)d %(module)s"


def level_name(default: str = "INFO") -> str:
    return os.getenv("FLEXPRO_LOG_LEVEL", default).upper()


def json_logging_config(level: str | None = None) -> dict:
    level = (level or level_name()).upper()
    quiet = {"handlers": ["console"], "level": "INFO", "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "fmt": JSON_FORMAT,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["console"], "level": "INFO"},
        "loggers": {
            ROOT_LOGGER: {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn": dict(quiet),
            "uvicorn.error": dict(quiet),
            "uvicorn.access": dict(quiet),
            # SQL echo is switched on through DB_ECHO, not through log levels
            "sqlalchemy.engine": {"level": "WARNING"},
            # passlib looks up a bcrypt version attribute and logs the miss at WARNING
            "passlib": {"level": "ERROR"},
        },
    }


def setup_logging() -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level_name(), logging.INFO))

    # Outside the API (CLI, alembic, scripts) nobody installs handlers; fall back to plain text.
    if not logging.getLogger().handlers and not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        logger.addHandler(handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger(ROOT_LOGGER)
    return base.getChild(name) if name else base


logger = setup_logging()
