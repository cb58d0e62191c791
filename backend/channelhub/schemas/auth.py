"""Session-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate


class LoginSchema(Schema):
    """Credentials: ``username`` or ``email`` (or ``usernameOrEmail``) plus ``password``."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None)
    email = fields.String(load_default=None)
    username_or_email = fields.String(data_key="usernameOrEmail", load_default=None)
    password = fields.String(load_default="", validate=validate.Length(max=128))

    @post_load
    def resolve_identifier(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        candidates = (data.get("username_or_email"), data.get("username"), data.get("email"))
        data["identifier"] = next((c.strip() for c in candidates if c and c.strip()), "")
        return data


class RefreshSchema(Schema):
    """Optional body carrying the refresh token when no cookie is sent."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(data_key="refreshToken", load_default=None)


class ChangePasswordSchema(Schema):
    """Old and new password for ``/changePassword``."""

    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(data_key="oldPassword", load_default="")
    new_password = fields.String(data_key="newPassword", load_default="", validate=validate.Length(max=128))


class TokenPairSchema(Schema):
    """Response payload containing a fresh token pair."""

    access_token = fields.String(data_key="accessToken", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)
