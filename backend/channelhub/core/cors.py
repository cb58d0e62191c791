"""CORS policy for the API blueprints."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Allow the configured front-end origins to call ``/api/*`` with cookies.

    Session cookies only travel cross-origin when credentials are enabled,
    which browsers refuse in combination with a wildcard origin. A blank or
    ``"*"`` ``CORS_ORIGINS`` therefore yields an anonymous-only policy.
    """
    origins = [o.strip() for o in app.config.get("CORS_ORIGINS", "").split(",") if o.strip()]
    allow_any = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if allow_any else origins}},
        supports_credentials=not allow_any,
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
