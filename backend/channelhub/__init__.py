"""Expose the application factory at package level.

``from channelhub import create_app`` is the entry point used by the Flask CLI
(``FLASK_APP=channelhub``), gunicorn and the test suite.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
