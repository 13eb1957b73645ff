"""
Structured logging configuration.

- Development: coloured single line, request and flow context as a tag
- Production: one JSON object per line
- LOG_LEVEL / LOG_FORMAT ("json" or "readable") override the defaults

Callers attach context with ``extra=``:

    logger.info("checkout: run completed", extra={"workflow": "checkout", "step": "confirm"})
    logger.warning("...", extra={"resource": "labs", "source": "fallback"})
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Set by middleware.timing on the per-request log line.
REQUEST_FIELDS = ("method", "path", "status", "duration_ms", "remote_addr", "request_id")

# Set by the step workflows and the catalog resolver.
CONTEXT_FIELDS = ("workflow", "step", "resource", "source")


def _collect(record, keys):
    return {k: getattr(record, k) for k in keys if getattr(record, k, None) is not None}


class JSONFormatter(logging.Formatter):
    """One JSON object per record; flow and catalog fields grouped under "context"."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        entry.update(_collect(record, REQUEST_FIELDS))
        context = _collect(record, CONTEXT_FIELDS)
        if context:
            entry["context"] = context
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    """Coloured line: time, level, logger, message, then [duration] {context}."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.now().strftime("%H:%M:%S")
        line = f"{color}{ts} {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            line += f" [{duration:.0f}ms]"
        context = _collect(record, CONTEXT_FIELDS)
        if context:
            line += " {" + " ".join(f"{k}={v}" for k, v in context.items()) + "}"

        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app):
    """
    Set up the root logger for the Flask app.

    Level: LOG_LEVEL, else DEBUG in dev/test and INFO in production.
    Format: LOG_FORMAT, else JSON in production and readable elsewhere.
    """
    is_testing = app.config.get("TESTING", False)
    is_prod = not app.config.get("DEBUG", False) and not is_testing

    level_name = os.getenv("LOG_LEVEL", "INFO" if is_prod else "DEBUG")
    level = getattr(logging, level_name.upper(), logging.INFO)

    fmt = os.getenv("LOG_FORMAT", "").lower() or ("json" if is_prod else "readable")
    formatter = JSONFormatter() if fmt == "json" else ReadableFormatter()

    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.setLevel(level)
    root.addHandler(handler)
    root.setLevel(level)

    # Outbound catalog calls and the dev server are noisy at DEBUG.
    for noisy in ("urllib3", "requests", "werkzeug", "sqlalchemy.engine", "flask_limiter"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    app.logger.setLevel(level)

    if not is_testing:
        app.logger.info("Logging configured: level=%s format=%s", level_name, fmt)
