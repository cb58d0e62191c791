"""``create_app``: the one place extensions, blueprints and handlers are wired."""

from __future__ import annotations

from flask import Flask

from channelhub import cli
from channelhub.api import init_app as init_api
from channelhub.core import cors, errors, extensions, proxy
from channelhub.core.config import BaseConfig, get_config
from channelhub.core.logger import configure_logging
from channelhub.core.logger import init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build a configured application.

    :param config: Settings class, object or import path; the class named by
        ``APP_ENV`` when omitted.
    :param instance_relative_config: Also read ``instance/<filename>`` if present.
    :param instance_config_filename: File name of the optional instance overrides.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(config if config is not None else get_config())
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Order matters: ProxyFix wraps wsgi_app first, error handlers see every blueprint.
    for init in (
        proxy.init_app,
        extensions.init_app,
        init_logging,
        cors.init_app,
        init_api,
        errors.init_app,
        cli.init_app,
    ):
        init(app)
    return app
