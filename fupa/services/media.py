"""
Verification-photo storage on Cloudinary.

Uploads use an unsigned upload preset, the same way the browser client
uploads.  Deletion uses the signed ``destroy`` API and is best-effort: a
failed delete leaves an orphaned image behind and is only logged.
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass

import httpx

from fupa.core.exceptions import MediaStoreError

logger = logging.getLogger(__name__)

CLOUDINARY_API = "https://api.cloudinary.com/v1_1"


@dataclass(frozen=True)
class MediaRef:
    url: str
    public_id: str


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary request signature: sha1 of sorted ``k=v`` pairs + secret."""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


class CloudinaryMediaStore:
    def __init__(
        self,
        cloud_name: str,
        upload_preset: str,
        *,
        api_key: str = "",
        api_secret: str = "",
        folder: str = "",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings) -> "CloudinaryMediaStore":
        return cls(
            settings.CLOUDINARY_CLOUD_NAME,
            settings.CLOUDINARY_UPLOAD_PRESET,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
            timeout=settings.MEDIA_TIMEOUT_SECONDS,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{CLOUDINARY_API}/{self.cloud_name}",
            timeout=self._timeout,
            transport=self._transport,
        )

    async def upload(self, content: bytes, filename: str, content_type: str) -> MediaRef:
        """Upload an image and return its delivery URL and public id."""
        data = {"upload_preset": self.upload_preset}
        if self.folder:
            data["folder"] = self.folder
        try:
            async with self._client() as client:
                resp = await client.post(
                    "/image/upload",
                    data=data,
                    files={"file": (filename, content, content_type)},
                )
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise MediaStoreError(f"upload of {filename!r} failed: {exc}") from exc

        url = body.get("secure_url") or body.get("url")
        public_id = body.get("public_id")
        if not url or not public_id:
            raise MediaStoreError("upload response is missing url or public_id")
        logger.info("Uploaded photo %s", public_id)
        return MediaRef(url=url, public_id=public_id)

    async def soft_delete(self, public_id: str | None) -> bool:
        """Ask the host to drop ``public_id``; returns whether it confirmed.

        Never raises: callers have already committed their own deletion and
        an orphaned image is an accepted outcome.
        """
        if not public_id:
            return False
        if not (self.api_key and self.api_secret):
            logger.warning("Photo %s not deleted: Cloudinary API credentials not configured", public_id)
            return False

        params = {"public_id": public_id, "timestamp": str(int(time.time()))}
        form = {**params, "api_key": self.api_key, "signature": sign_params(params, self.api_secret)}
        try:
            async with self._client() as client:
                resp = await client.post("/image/destroy", data=form)
                resp.raise_for_status()
                result = resp.json().get("result")
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Soft delete of photo %s failed: %s", public_id, exc)
            return False

        if result != "ok":
            logger.warning("Soft delete of photo %s returned %r", public_id, result)
            return False
        logger.info("Deleted photo %s", public_id)
        return True
