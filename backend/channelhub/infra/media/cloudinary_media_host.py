# channelhub/infra/media/cloudinary_media_host.py
from __future__ import annotations

import logging
from typing import Any, BinaryIO

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from channelhub.services._shared.errors import MediaUploadError
from channelhub.services._shared.ports import MediaAsset, MediaHost

log = logging.getLogger(__name__)


class CloudinaryMediaHost(MediaHost):
    """
    Media host backed by Cloudinary's upload API.

    Credentials are applied to the SDK's global configuration once, at
    construction; missing credentials make every upload fail with
    :class:`MediaUploadError`.
    """

    def __init__(
        self,
        *,
        cloud_name: str | None,
        api_key: str | None,
        api_secret: str | None,
        resource_type: str = "image",
    ) -> None:
        self.configured = bool(cloud_name and api_key and api_secret)
        self.resource_type = resource_type
        if self.configured:
            cloudinary.config(
                cloud_name=cloud_name,
                api_key=api_key,
                api_secret=api_secret,
                secure=True,
            )
        else:
            log.warning("Cloudinary credentials missing; uploads will fail.")

    def upload(self, stream: BinaryIO, *, filename: str, folder: str | None = None) -> MediaAsset:
        if not self.configured:
            raise MediaUploadError()
        options: dict[str, Any] = {"resource_type": self.resource_type, "filename_override": filename}
        if folder:
            options["folder"] = folder
        try:
            result = cloudinary.uploader.upload(stream, **options)
        except CloudinaryError as exc:
            log.error("Cloudinary upload failed: %s", exc)
            raise MediaUploadError() from exc

        url = result.get("secure_url") or result.get("url")
        public_id = result.get("public_id")
        if not url or not public_id:
            raise MediaUploadError()
        return MediaAsset(url=url, public_id=public_id)

    def delete(self, public_id: str) -> bool:
        if not self.configured or not public_id:
            return False
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type=self.resource_type)
        except CloudinaryError as exc:
            log.warning("Cloudinary delete failed for %s: %s", public_id, exc)
            return False
        return result.get("result") == "ok"
