"""HTTP API: versioned blueprint groups mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join(*parts: str) -> str:
    return "/" + "/".join(p.strip("/") for p in parts if p.strip("/"))


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount ``(blueprint, relative_prefix)`` pairs beneath ``base_prefix``.

    An empty relative prefix mounts the blueprint at ``base_prefix`` itself.
    """
    for blueprint, relative in entries:
        app.register_blueprint(blueprint, url_prefix=_join(base_prefix, relative))


def init_app(app: Flask) -> None:
    from channelhub.api import v1

    register_blueprint_group(
        app,
        base_prefix=_join(app.config.get("API_BASE_PREFIX", "/api"), v1.API_VERSION),
        entries=v1.REGISTRY,
    )


__all__ = ["init_app", "register_blueprint_group"]
