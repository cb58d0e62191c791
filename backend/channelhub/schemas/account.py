"""Account resource schemas (camelCase on the wire)."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class RegisterSchema(Schema):
    """Multipart form fields for registration; blank checks happen in the service."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default="", validate=validate.Length(max=50))
    email = fields.String(load_default="", validate=validate.Length(max=254))
    full_name = fields.String(data_key="fullName", load_default="", validate=validate.Length(max=100))
    password = fields.String(load_default="", validate=validate.Length(max=128))


class UpdateDetailsSchema(Schema):
    """Profile fields accepted by ``/updateAccountDetails``."""

    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(data_key="fullName", load_default=None, validate=validate.Length(max=100))
    email = fields.String(load_default=None, validate=validate.Length(max=254))


class AccountSchema(Schema):
    """Public representation of an account; secrets are never part of it."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.String(required=True)
    full_name = fields.String(data_key="fullName", required=True)
    avatar = fields.String(required=True)
    cover_image = fields.String(data_key="coverImage", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)


class LoginResultSchema(Schema):
    user = fields.Nested(AccountSchema, attribute="account")
    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")


class MediaSchema(Schema):
    url = fields.String(required=True)
    public_id = fields.String(data_key="publicId", required=True)


class ChannelProfileSchema(Schema):
    """Channel page with subscription aggregates."""

    username = fields.String()
    full_name = fields.String(data_key="fullName")
    email = fields.String()
    avatar = fields.String()
    cover_image = fields.String(data_key="coverImage", allow_none=True)
    subscribers_count = fields.Integer(data_key="subscribersCount")
    channels_subscribed_to_count = fields.Integer(data_key="channelsSubscribedToCount")
    is_subscribed = fields.Boolean(data_key="isSubscribed")


class OwnerSchema(Schema):
    username = fields.String()
    full_name = fields.String(data_key="fullName")
    avatar = fields.String()


class WatchedVideoSchema(Schema):
    id = fields.Integer()
    title = fields.String()
    thumbnail = fields.String(allow_none=True)
    duration = fields.Integer()
    owner = fields.Nested(OwnerSchema)
