# channelhub/services/accounts/service.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from channelhub.models.account import Account
from channelhub.services._shared.base import BaseService, ServiceContext
from channelhub.services._shared.errors import (
    ConflictError,
    MediaUploadError,
    NotFoundError,
    ValidationFailedError,
    violates,
)
from channelhub.services._shared.ports import MediaAsset, MediaHost
from channelhub.services.accounts.dto import (
    AccountOut,
    ChannelProfileOut,
    MediaOut,
    MediaPolicy,
    OwnerOut,
    RegisterIn,
    UpdateDetailsIn,
    UploadIn,
    WatchedVideoOut,
)


class AccountService(BaseService):
    """
    Registration and profile management.

    Media is uploaded before the database write; if the write fails the
    freshly uploaded assets are removed again. Replaced assets are deleted
    from the host only after the new reference is committed.
    """

    def __init__(
        self,
        *,
        media_host: MediaHost,
        media_policy: MediaPolicy | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.media = media_host
        self.policy = media_policy or MediaPolicy()

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn, avatar: UploadIn | None, cover: UploadIn | None = None) -> AccountOut:
        """
        Create an account with its profile images.

        :param dto: Registration fields.
        :param avatar: Required avatar image.
        :param cover: Optional cover image.
        :returns: The public view of the new account.
        :raises ValidationFailedError: Blank field, missing avatar or
            unsupported image type.
        :raises ConflictError: Username or email already registered.
        :raises MediaUploadError: The media host failed.
        """
        fields = (dto.username, dto.email, dto.full_name, dto.password)
        if any(not (value or "").strip() for value in fields):
            raise ValidationFailedError("All fields are required")

        try:
            account = Account(username=dto.username, email=dto.email, full_name=dto.full_name)
            account.password = dto.password
        except ValueError as exc:
            raise ValidationFailedError(str(exc)) from exc

        with self.ro_uow() as uow:
            if uow.accounts.exists_username_or_email(account.username, account.email):
                raise ConflictError("Account", "User with email or username already exists")

        if avatar is None or not avatar.filename:
            raise ValidationFailedError("Avatar file is required")
        self._check_image(avatar)
        if cover is not None and cover.filename:
            self._check_image(cover)
        else:
            cover = None

        avatar_asset = self._upload(avatar)
        uploaded = [avatar_asset]
        try:
            cover_asset = self._upload(cover) if cover is not None else None
            if cover_asset is not None:
                uploaded.append(cover_asset)

            account.avatar_url = avatar_asset.url
            account.avatar_public_id = avatar_asset.public_id
            if cover_asset is not None:
                account.cover_image_url = cover_asset.url
                account.cover_image_public_id = cover_asset.public_id

            with self.rw_uow() as rw:
                try:
                    rw.accounts.add(account)
                except IntegrityError as exc:
                    raise ConflictError("Account", "User with email or username already exists") from exc
                out = AccountOut.from_model(account)
        except Exception:
            for asset in uploaded:
                self._discard(asset.public_id)
            raise

        self.emit("account.registered", account_id=out.id)
        return out

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_account(self, account_id: int) -> AccountOut:
        """Return the public view of ``account_id``.

        :raises NotFoundError: If the account no longer exists.
        """
        with self.ro_uow() as uow:
            return AccountOut.from_model(uow.accounts.get_or_raise(account_id))

    def get_channel_profile(self, username: str, viewer_id: int | None) -> ChannelProfileOut:
        """
        Channel page for ``username`` with subscription aggregates.

        Duplicate subscription edges are counted as stored.

        :raises ValidationFailedError: If ``username`` is blank.
        :raises NotFoundError: If no account has that username.
        """
        if not (username or "").strip():
            raise ValidationFailedError("Username is missing")

        with self.ro_uow() as uow:
            channel = uow.accounts.find_by_username(username)
            if channel is None:
                raise NotFoundError("Account", username, detail="Channel does not exist")
            stats = uow.subscriptions.channel_stats(channel.id, viewer_id)
            return ChannelProfileOut(
                username=channel.username,
                full_name=channel.full_name,
                email=channel.email,
                avatar=channel.avatar_url,
                cover_image=channel.cover_image_url,
                subscribers_count=stats.subscribers_count,
                channels_subscribed_to_count=stats.channels_subscribed_to_count,
                is_subscribed=stats.is_subscribed,
            )

    def get_watch_history(self, account_id: int) -> list[WatchedVideoOut]:
        """Watched videos in history order, each with an owner summary."""
        with self.ro_uow() as uow:
            uow.accounts.get_or_raise(account_id)
            items: list[WatchedVideoOut] = []
            for entry in uow.watch_history.list_for(account_id):
                video = entry.video
                owner = video.owner
                items.append(
                    WatchedVideoOut(
                        id=video.id,
                        title=video.title,
                        thumbnail=video.thumbnail_url,
                        duration=video.duration_s,
                        owner=OwnerOut(
                            username=owner.username,
                            full_name=owner.full_name,
                            avatar=owner.avatar_url,
                        ),
                    )
                )
            return items

    # ------------------------------------------------------------------ #
    # Profile updates
    # ------------------------------------------------------------------ #

    def update_details(self, account_id: int, dto: UpdateDetailsIn) -> AccountOut:
        """
        Change display name and/or email.

        :raises ValidationFailedError: If neither field is provided.
        :raises ConflictError: If the email belongs to another account.
        """
        changes = {
            key: value.strip()
            for key, value in (("full_name", dto.full_name), ("email", dto.email))
            if value is not None and value.strip()
        }
        if not changes:
            raise ValidationFailedError("At least one of fullName or email is required")

        with self.rw_uow() as uow:
            account = uow.accounts.get_or_raise(account_id)
            if "email" in changes and uow.accounts.email_taken_by_other(changes["email"], account_id):
                raise ConflictError("Account", "Email is already in use")
            try:
                uow.accounts.update(account, **changes)
            except ValueError as exc:
                raise ValidationFailedError(str(exc)) from exc
            except IntegrityError as exc:
                if violates(exc, "uq_accounts_email", "accounts.email"):
                    raise ConflictError("Account", "Email is already in use") from exc
                raise
            out = AccountOut.from_model(account)

        self.emit("account.details_updated", account_id=account_id)
        return out

    def update_avatar(self, account_id: int, upload: UploadIn | None) -> MediaOut:
        """Replace the avatar; the previous asset is deleted afterwards."""
        if upload is None or not upload.filename:
            raise ValidationFailedError("Avatar file is missing")
        return self._replace_image(account_id, upload, "avatar_url", "avatar_public_id")

    def update_cover_image(self, account_id: int, upload: UploadIn | None) -> MediaOut:
        """Replace (or set the first) cover image."""
        if upload is None or not upload.filename:
            raise ValidationFailedError("Cover image file is missing")
        return self._replace_image(account_id, upload, "cover_image_url", "cover_image_public_id")

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _replace_image(self, account_id: int, upload: UploadIn, url_field: str, id_field: str) -> MediaOut:
        self._check_image(upload)

        with self.ro_uow() as uow:
            uow.accounts.get_or_raise(account_id)

        asset = self._upload(upload)
        try:
            with self.rw_uow() as uow:
                account = uow.accounts.get_or_raise(account_id)
                previous = getattr(account, id_field)
                uow.accounts.update(account, **{url_field: asset.url, id_field: asset.public_id})
        except Exception:
            self._discard(asset.public_id)
            raise

        if previous and previous != asset.public_id:
            self._discard(previous)
        self.emit("account.media_replaced", account_id=account_id, public_id=asset.public_id)
        return MediaOut(url=asset.url, public_id=asset.public_id)

    def _check_image(self, upload: UploadIn) -> None:
        ext = upload.filename.rsplit(".", 1)[-1].lower() if "." in upload.filename else ""
        if ext not in self.policy.allowed_extensions:
            raise ValidationFailedError(f"Unsupported image type: {upload.filename}")

    def _upload(self, upload: UploadIn) -> MediaAsset:
        try:
            return self.media.upload(upload.stream, filename=upload.filename, folder=self.policy.folder)
        except MediaUploadError:
            raise
        except Exception as exc:
            self.log.error("Media upload failed", exc_info=True)
            raise MediaUploadError() from exc

    def _discard(self, public_id: str) -> None:
        """Best-effort removal of an asset; failures are logged, never raised."""
        try:
            removed = self.media.delete(public_id)
        except Exception:
            self.log.warning("Media delete failed", exc_info=True, extra={"public_id": public_id})
            return
        if not removed:
            self.emit("account.media_delete_noop", logging.WARNING, public_id=public_id)
