# channelhub/services/accounts/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from channelhub.models.account import Account

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param username: Desired handle (stored lower-cased).
    :type username: str
    :param email: Contact address.
    :type email: str
    :param full_name: Display name.
    :type full_name: str
    :param password: Raw password (hashed by the model).
    :type password: str
    """

    username: str
    email: str
    full_name: str
    password: str


@dataclass(frozen=True, slots=True)
class UploadIn:
    """
    A file received from the client, detached from the web framework.

    :param stream: Readable binary stream.
    :type stream: BinaryIO
    :param filename: Client-supplied file name (used for the extension check).
    :type filename: str
    """

    stream: BinaryIO
    filename: str


@dataclass(frozen=True, slots=True)
class UpdateDetailsIn:
    """
    Input DTO for profile updates; at least one field must be set.

    :param full_name: New display name.
    :type full_name: str | None
    :param email: New contact address.
    :type email: str | None
    """

    full_name: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class MediaPolicy:
    """
    Media constraints applied before anything is sent to the host.

    :param folder: Folder (namespace) on the media host.
    :type folder: str | None
    :param allowed_extensions: Lower-case file extensions accepted for images.
    :type allowed_extensions: frozenset[str]
    """

    folder: str | None = None
    allowed_extensions: frozenset[str] = frozenset({"png", "jpg", "jpeg", "gif", "webp"})


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AccountOut:
    """
    Public account view; never carries the verifier or refresh token.
    """

    id: int
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_model(cls, account: Account) -> AccountOut:
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            full_name=account.full_name,
            avatar=account.avatar_url,
            cover_image=account.cover_image_url,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


@dataclass(frozen=True, slots=True)
class MediaOut:
    """
    Reference to a freshly stored image.

    :param url: Public URL on the media host.
    :param public_id: Host identifier.
    """

    url: str
    public_id: str


@dataclass(frozen=True, slots=True)
class ChannelProfileOut:
    """
    Channel page projection with subscription aggregates.

    :param is_subscribed: Whether the requesting viewer subscribes to the channel.
    """

    username: str
    full_name: str
    email: str
    avatar: str
    cover_image: str | None
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool


@dataclass(frozen=True, slots=True)
class OwnerOut:
    username: str
    full_name: str
    avatar: str


@dataclass(frozen=True, slots=True)
class WatchedVideoOut:
    """
    One watch-history item with its owner summary.
    """

    id: int
    title: str
    thumbnail: str | None
    duration: int
    owner: OwnerOut
