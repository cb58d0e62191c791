"""Account and session endpoints under ``/users``."""

from __future__ import annotations

from flask import Blueprint, current_app, request
from flask_jwt_extended import verify_jwt_in_request

from channelhub.api.deps import (
    access_token_expiry,
    account_service,
    api_response,
    clear_session_cookies,
    current_account_id,
    form_or_json,
    refresh_token_from_request,
    require_auth,
    session_service,
    set_session_cookies,
    timing,
    upload_from_request,
)
from channelhub.core.extensions import limiter
from channelhub.schemas import (
    AccountSchema,
    ChangePasswordSchema,
    ChannelProfileSchema,
    LoginResultSchema,
    LoginSchema,
    MediaSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UpdateDetailsSchema,
    WatchedVideoSchema,
)
from channelhub.services.accounts.dto import RegisterIn, UpdateDetailsIn
from channelhub.services.sessions.dto import LoginIn, LogoutIn, PasswordChangeIn, RefreshIn

bp = Blueprint("users", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
change_password_schema = ChangePasswordSchema()
update_details_schema = UpdateDetailsSchema()
account_schema = AccountSchema()
login_result_schema = LoginResultSchema()
token_pair_schema = TokenPairSchema()
media_schema = MediaSchema()
channel_schema = ChannelProfileSchema()
history_schema = WatchedVideoSchema(many=True)


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


# ------------------------------ Sessions ------------------------------------


@bp.post("/register")
@timing
def register():
    """Create an account from multipart fields plus ``avatar`` / ``coverImage`` files."""

    data = register_schema.load(form_or_json())
    account = account_service().register(
        RegisterIn(**data),
        avatar=upload_from_request("avatar"),
        cover=upload_from_request("coverImage"),
    )
    return api_response(account_schema.dump(account), "User registered successfully", status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate and set ``accessToken`` / ``refreshToken`` cookies."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = session_service().login(LoginIn(identifier=data["identifier"], password=data["password"]))
    response = api_response(login_result_schema.dump(result), "User logged in successfully")
    return set_session_cookies(response, result.access_token, result.refresh_token)


@bp.post("/logout")
@require_auth
@timing
def logout():
    """End the session and clear both cookies."""

    jti, expires_at = access_token_expiry()
    session_service().logout(
        LogoutIn(account_id=current_account_id(), access_jti=jti, access_expires_at=expires_at)
    )
    return clear_session_cookies(api_response({}, "User logged out"))


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Rotate the refresh token (cookie or ``refreshToken`` body field)."""

    expected_account_id = None
    if current_app.config.get("REFRESH_REQUIRES_ACCESS_TOKEN"):
        verify_jwt_in_request()
        expected_account_id = current_account_id()

    data = refresh_schema.load(request.get_json(silent=True) or {})
    pair = session_service().refresh_session(
        RefreshIn(
            refresh_token=refresh_token_from_request(data["refresh_token"]),
            expected_account_id=expected_account_id,
        )
    )
    response = api_response(token_pair_schema.dump(pair), "Access token refreshed")
    return set_session_cookies(response, pair.access_token, pair.refresh_token)


@bp.post("/changePassword")
@require_auth
@timing
def change_password():
    data = change_password_schema.load(request.get_json(silent=True) or {})
    session_service().change_password(
        PasswordChangeIn(
            account_id=current_account_id(),
            old_password=data["old_password"],
            new_password=data["new_password"],
        )
    )
    return api_response({}, "Password changed successfully")


# ------------------------------ Profile -------------------------------------


@bp.post("/getCurrentUser")
@require_auth
@timing
def get_current_user():
    account = account_service().get_account(current_account_id())
    return api_response(account_schema.dump(account), "Current user fetched successfully")


@bp.post("/updateAccountDetails")
@require_auth
@timing
def update_account_details():
    data = update_details_schema.load(request.get_json(silent=True) or {})
    account = account_service().update_details(current_account_id(), UpdateDetailsIn(**data))
    return api_response(account_schema.dump(account), "Account details updated successfully")


@bp.post("/updateAvatar")
@require_auth
@timing
def update_avatar():
    media = account_service().update_avatar(current_account_id(), upload_from_request("avatar"))
    return api_response(media_schema.dump(media), "Avatar image updated successfully")


@bp.post("/updateCoverImage")
@require_auth
@timing
def update_cover_image():
    media = account_service().update_cover_image(current_account_id(), upload_from_request("coverImage"))
    return api_response(media_schema.dump(media), "Cover image updated successfully")


@bp.get("/c/<username>")
@require_auth
@timing
def channel_profile(username: str):
    profile = account_service().get_channel_profile(username, current_account_id())
    return api_response(channel_schema.dump(profile), "User channel fetched successfully")


@bp.get("/history")
@require_auth
@timing
def watch_history():
    history = account_service().get_watch_history(current_account_id())
    return api_response(history_schema.dump(history), "Watch history fetched successfully")
