"""Integration tests for the ``/api/v1/users`` endpoints."""

from __future__ import annotations

from tests.helpers.assertions import assert_failure, assert_success
from tests.helpers.http import USERS, bearer, image_part, login, register, set_cookies


# ------------------------------ Registration -------------------------------- #
def test_register_returns_public_account(client) -> None:
    resp = register(client, cover=True)

    data = assert_success(resp, 201, "User registered successfully")
    assert data["username"] == "alice"
    assert data["fullName"] == "Alice Moreau"
    assert data["avatar"].startswith("https://media.local/")
    assert data["coverImage"].endswith(".jpg")
    assert "password" not in data
    assert "passwordHash" not in data
    assert "refreshToken" not in data


def test_register_duplicate_is_conflict(client) -> None:
    assert_success(register(client), 201)

    body = assert_failure(register(client, email="ALICE@example.com", username="other"), 409)
    assert body["code"] == "conflict"


def test_register_requires_avatar(client) -> None:
    assert_failure(register(client, avatar=False), 400, "Avatar file is required")


def test_register_blank_field(client) -> None:
    assert_failure(register(client, full_name="   "), 400, "All fields are required")


# --------------------------------- Login ------------------------------------ #
def test_login_sets_http_only_cookies(client) -> None:
    register(client)

    resp = login(client)

    data = assert_success(resp, 200, "User logged in successfully")
    assert data["user"]["username"] == "alice"
    assert data["accessToken"] and data["refreshToken"]
    cookies = set_cookies(resp)
    assert "accessToken" in cookies and "refreshToken" in cookies
    assert "HttpOnly" in cookies["accessToken"]
    assert "HttpOnly" in cookies["refreshToken"]


def test_login_accepts_email(client) -> None:
    register(client)

    assert_success(client.post(f"{USERS}/login", json={"email": "Alice@Example.com", "password": "s3cretPass!"}))


def test_login_wrong_password_sets_no_cookies(client) -> None:
    register(client)

    resp = login(client, password="wrong")

    assert_failure(resp, 401, "Incorrect password")
    assert set_cookies(resp) == {}


def test_login_unknown_account(client) -> None:
    assert_failure(login(client, identifier="ghost"), 401, "User does not exist")


def test_login_missing_identifier(client) -> None:
    assert_failure(client.post(f"{USERS}/login", json={"password": "x"}), 400)


# -------------------------------- Refresh ----------------------------------- #
def test_refresh_rotates_and_rejects_replay(app, client) -> None:
    register(client)
    first = assert_success(login(client))

    resp = client.post(f"{USERS}/refresh-token")  # refresh cookie from login
    rotated = assert_success(resp, 200, "Access token refreshed")
    assert rotated["refreshToken"] != first["refreshToken"]
    assert "refreshToken" in set_cookies(resp)

    replay = app.test_client().post(f"{USERS}/refresh-token", json={"refreshToken": first["refreshToken"]})
    assert_failure(replay, 401, "Refresh token is expired or used")

    current = app.test_client().post(f"{USERS}/refresh-token", json={"refreshToken": rotated["refreshToken"]})
    assert_success(current)


def test_refresh_without_token(app) -> None:
    assert_failure(app.test_client().post(f"{USERS}/refresh-token"), 401, "Unauthorized request")


def test_refresh_with_garbage_token(app) -> None:
    resp = app.test_client().post(f"{USERS}/refresh-token", json={"refreshToken": "garbage"})
    assert_failure(resp, 401, "Invalid refresh token")


def test_refresh_requiring_access_token(app, client, monkeypatch) -> None:
    monkeypatch.setitem(app.config, "REFRESH_REQUIRES_ACCESS_TOKEN", True)
    register(client)
    tokens = assert_success(login(client))
    register(client, username="bob", email="bob@example.com")
    bob = assert_success(login(app.test_client(), "bob"))

    body = {"refreshToken": tokens["refreshToken"]}
    missing = app.test_client().post(f"{USERS}/refresh-token", json=body)
    assert_failure(missing, 401, "Unauthorized request")

    foreign = app.test_client().post(f"{USERS}/refresh-token", json=body, headers=bearer(bob["accessToken"]))
    assert_failure(foreign, 401, "Invalid refresh token")

    ok = app.test_client().post(f"{USERS}/refresh-token", json=body, headers=bearer(tokens["accessToken"]))
    assert assert_success(ok, 200, "Access token refreshed")["refreshToken"] != tokens["refreshToken"]


# ------------------------------ Authenticated ------------------------------- #
def test_current_user_via_cookie_and_header(app, client) -> None:
    register(client)
    tokens = assert_success(login(client))

    data = assert_success(client.post(f"{USERS}/getCurrentUser"), 200, "Current user fetched successfully")
    assert data["username"] == "alice"

    other = app.test_client()
    assert_success(other.post(f"{USERS}/getCurrentUser", headers=bearer(tokens["accessToken"])))
    assert_failure(other.post(f"{USERS}/getCurrentUser"), 401, "Unauthorized request")


def test_refresh_token_is_not_an_access_token(app, client) -> None:
    register(client)
    tokens = assert_success(login(client))

    resp = app.test_client().post(f"{USERS}/getCurrentUser", headers=bearer(tokens["refreshToken"]))
    assert_failure(resp, 401)


def test_logout_revokes_session(app, client) -> None:
    register(client)
    tokens = assert_success(login(client))

    resp = client.post(f"{USERS}/logout")
    assert_success(resp, 200, "User logged out")

    other = app.test_client()
    assert_failure(
        other.post(f"{USERS}/getCurrentUser", headers=bearer(tokens["accessToken"])),
        401,
        "Access token has been revoked",
    )
    assert_failure(
        other.post(f"{USERS}/refresh-token", json={"refreshToken": tokens["refreshToken"]}),
        401,
        "Refresh token is expired or used",
    )


def test_change_password(client) -> None:
    register(client)
    login(client)

    same = client.post(f"{USERS}/changePassword", json={"oldPassword": "a", "newPassword": "a"})
    assert_failure(same, 400)

    wrong = client.post(f"{USERS}/changePassword", json={"oldPassword": "bad", "newPassword": "n3wPass!"})
    assert_failure(wrong, 401, "Wrong password")

    ok = client.post(f"{USERS}/changePassword", json={"oldPassword": "s3cretPass!", "newPassword": "n3wPass!"})
    assert_success(ok, 200, "Password changed successfully")

    assert_failure(login(client), 401)
    assert_success(login(client, password="n3wPass!"))


def test_update_account_details(client) -> None:
    register(client)
    register(client, username="bob", email="bob@example.com")
    login(client)

    data = assert_success(
        client.post(f"{USERS}/updateAccountDetails", json={"fullName": "Alice M."}),
        200,
        "Account details updated successfully",
    )
    assert data["fullName"] == "Alice M."

    taken = client.post(f"{USERS}/updateAccountDetails", json={"email": "bob@example.com"})
    assert_failure(taken, 409)

    empty = client.post(f"{USERS}/updateAccountDetails", json={})
    assert_failure(empty, 400)


def test_update_avatar_and_cover(client, media_host) -> None:
    registered = assert_success(register(client), 201)
    login(client)

    resp = client.post(
        f"{USERS}/updateAvatar",
        data={"avatar": image_part("new.png")},
        content_type="multipart/form-data",
    )
    media = assert_success(resp, 200, "Avatar image updated successfully")
    assert media["url"] != registered["avatar"]
    assert media["publicId"] in media_host.assets

    cover = client.post(
        f"{USERS}/updateCoverImage",
        data={"coverImage": image_part("cover.webp")},
        content_type="multipart/form-data",
    )
    assert_success(cover, 200, "Cover image updated successfully")

    missing = client.post(f"{USERS}/updateAvatar", data={"note": "no file"}, content_type="multipart/form-data")
    assert_failure(missing, 400, "Avatar file is missing")


def test_protected_endpoints_require_auth(app) -> None:
    anonymous = app.test_client()
    for path in ("logout", "changePassword", "getCurrentUser", "updateAccountDetails", "updateAvatar"):
        assert_failure(anonymous.post(f"{USERS}/{path}"), 401)
    assert_failure(anonymous.get(f"{USERS}/history"), 401)
    assert_failure(anonymous.get(f"{USERS}/c/alice"), 401)
