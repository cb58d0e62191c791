from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import BinaryIO, Protocol
from uuid import uuid4


@dataclass(frozen=True, slots=True)
class MediaAsset:
    """
    Reference to a file stored on the media host.

    :param url: Public (https) URL of the asset.
    :param public_id: Host-side identifier, required to delete the asset.
    """

    url: str
    public_id: str


class MediaHost(Protocol):
    """
    Port for the external image host.

    ``upload`` raises :class:`~channelhub.services._shared.errors.MediaUploadError`
    on failure. ``delete`` is best effort and returns whether the asset was
    removed.
    """

    def upload(self, stream: BinaryIO, *, filename: str, folder: str | None = None) -> MediaAsset: ...

    def delete(self, public_id: str) -> bool: ...


class InMemoryMediaHost(MediaHost):
    """Keeps uploaded bytes in a dict; used for local runs and tests."""

    base_url = "https://media.local"

    def __init__(self) -> None:
        self.assets: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self._lock = threading.Lock()

    def upload(self, stream: BinaryIO, *, filename: str, folder: str | None = None) -> MediaAsset:
        from channelhub.services._shared.errors import MediaUploadError

        data = stream.read()
        if not data:
            raise MediaUploadError("Error while uploading file")
        public_id = f"{folder}/{uuid4().hex}" if folder else uuid4().hex
        with self._lock:
            self.assets[public_id] = data
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        return MediaAsset(url=f"{self.base_url}/{public_id}.{ext}", public_id=public_id)

    def delete(self, public_id: str) -> bool:
        with self._lock:
            self.deleted.append(public_id)
            return self.assets.pop(public_id, None) is not None
