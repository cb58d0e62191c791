"""JSON logging to stdout, correlated by request id.

Every record emitted while a request is active carries ``request_id``,
``method`` and ``path``. Anything passed through ``extra=`` ends up in the
JSON line as well, so services can log ``event=...`` / ``account_id=...``
without touching the formatter.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Attributes every LogRecord has; everything else came from ``extra=``.
_RECORD_BUILTINS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


def ensure_request_id() -> str:
    """Id of the current request, reusing an inbound correlation header.

    Outside a request a fresh id is returned on each call.
    """
    if not has_request_context():
        return uuid4().hex
    current = g.get("request_id")
    if current:
        return current
    inbound = next(
        (request.headers[h] for h in INBOUND_ID_HEADERS if request.headers.get(h)),
        None,
    )
    g.request_id = inbound or uuid4().hex
    return g.request_id


class RequestContextFilter(logging.Filter):
    """Stamp records with the active request's id, method and path."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = ensure_request_id()
            record.method = request.method
            record.path = request.path
        else:
            record.request_id = None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        doc: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        doc.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_BUILTINS and not key.startswith("_")
        )
        if record.exc_info:
            doc["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(doc, default=str)


def configure_logging(level: str | int = "INFO") -> None:
    """Replace root handlers with a single JSON stdout handler."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Assign a request id per request and echo it in ``X-Request-ID``."""
    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _assign_request_id() -> None:
        # g is app-context scoped and may outlive a single request.
        g.pop("request_id", None)
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["JSONFormatter", "RequestContextFilter", "configure_logging", "ensure_request_id", "init_app"]
