import logging
import sys

from billdesk.settings import settings

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _formatter() -> logging.Formatter:
    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=JSON_FORMAT,
            rename_fields={"asctime": "timestamp", "levelname": "level"},
            static_fields={"service": "billdesk"},
        )
    return logging.Formatter(TEXT_FORMAT)


def configure_logging() -> None:
    """Install a single stderr handler on the root logger.

    Alembic's ``fileConfig`` replaces the root handlers, so ``reconfigure``
    runs this again once migrations are done.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    # Routes log their own requests.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


reconfigure = configure_logging
