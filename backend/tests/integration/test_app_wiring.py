"""Apps built side by side keep their own signing key and denylist."""

from __future__ import annotations

from channelhub.core.config import TestingConfig
from channelhub.factory import create_app
from tests.helpers.assertions import assert_failure, assert_success
from tests.helpers.http import USERS, bearer, login, register


class RotatedSecretConfig(TestingConfig):
    ACCESS_TOKEN_SECRET = "rotated-access-secret-fedcba9876543210"


def _build(config=TestingConfig):
    application = create_app(config, instance_relative_config=False)
    application.logger.setLevel("WARNING")
    return application


def test_guards_verify_with_subclass_access_secret(app) -> None:
    rotated = _build(RotatedSecretConfig)
    assert rotated.config["JWT_SECRET_KEY"] == RotatedSecretConfig.ACCESS_TOKEN_SECRET

    client = rotated.test_client()
    register(client)
    tokens = assert_success(login(client))

    resp = rotated.test_client().post(f"{USERS}/getCurrentUser", headers=bearer(tokens["accessToken"]))
    assert assert_success(resp)["username"] == "alice"

    # Signed with the rotated key, so the default app must refuse it.
    assert_failure(app.test_client().post(f"{USERS}/getCurrentUser", headers=bearer(tokens["accessToken"])), 401)


def test_revocation_survives_building_another_app(app, client) -> None:
    register(client)
    tokens = assert_success(login(client))
    assert_success(client.post(f"{USERS}/logout"), 200, "User logged out")

    _build()  # re-registers the shared jwt callbacks

    assert_failure(
        app.test_client().post(f"{USERS}/getCurrentUser", headers=bearer(tokens["accessToken"])),
        401,
        "Access token has been revoked",
    )
