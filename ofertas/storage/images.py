"""Image uploads and promotion out of the temporary namespace.

Uploads land under ``IMAGE_PREFIX``, which the bucket lifecycle expires.
Promoting an image copies it to the unprefixed key, which is public and
permanent, and then removes the temporary copy.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from ofertas.errors import ImageNotFound, ImagePromotionFailed
from ofertas.utils.retry import RETRY_EXCEPTIONS, with_retry

logger = logging.getLogger(__name__)

IMAGE_PREFIX = "pre-"
ALLOWED_MIMETYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")


@dataclass(slots=True)
class UploadTicket:
    url: str
    key: str
    expires_in: int


class ImageStorage:
    def __init__(
        self,
        client: Any,
        bucket: str,
        public_url: str,
        *,
        upload_expiry: int = 3600,
        cleanup_attempts: int = 3,
        cleanup_delay: float = 1.0,
    ) -> None:
        self.client = client
        self.bucket = bucket
        self.public_url = public_url.rstrip("/")
        self.upload_expiry = upload_expiry
        self.cleanup_attempts = cleanup_attempts
        self.cleanup_delay = cleanup_delay

    def url_for(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    def presign_upload(self, mimetype: str, length: int, author_id: str) -> UploadTicket:
        key = str(uuid.uuid4())
        url = self.client.generate_presigned_url(
            "put_object",
            Params={
                "Bucket": self.bucket,
                "Key": IMAGE_PREFIX + key,
                "ContentType": mimetype,
                "ContentLength": length,
                "Metadata": {"author": author_id},
            },
            ExpiresIn=self.upload_expiry,
        )
        return UploadTicket(url=url, key=key, expires_in=self.upload_expiry)

    def promote(self, key: str) -> str:
        """Move ``pre-<key>`` to ``<key>`` and return its public URL.

        Raises ImageNotFound when the temporary object cannot be found, and
        ImagePromotionFailed when the copy is not confirmed. In the latter case
        the temporary object is kept so the upload can be recovered.
        """
        temporary_key = IMAGE_PREFIX + key
        try:
            self.client.head_object(Bucket=self.bucket, Key=temporary_key)
        except (BotoCoreError, ClientError) as exc:
            raise ImageNotFound() from exc

        try:
            output = self.client.copy_object(
                CopySource=f"{self.bucket}/{temporary_key}",
                Bucket=self.bucket,
                Key=key,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("Copy of %s failed: %s", temporary_key, exc)
            raise ImagePromotionFailed() from exc
        if not output or not output.get("CopyObjectResult"):
            logger.warning("Copy of %s was not confirmed", temporary_key)
            raise ImagePromotionFailed()

        self.discard_temporary(key)
        return self.url_for(key)

    def discard_temporary(self, key: str) -> None:
        self._delete_quietly(IMAGE_PREFIX + key)

    def discard_permanent(self, key: str) -> None:
        self._delete_quietly(key)

    def _delete_quietly(self, object_key: str) -> None:
        delete = with_retry(
            self.client.delete_object,
            attempts=self.cleanup_attempts,
            base_delay=self.cleanup_delay,
        )
        try:
            delete(Bucket=self.bucket, Key=object_key)
        except RETRY_EXCEPTIONS as exc:
            logger.warning("Could not delete %s from %s: %s", object_key, self.bucket, exc)
