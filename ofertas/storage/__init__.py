"""Object storage helpers."""

from __future__ import annotations

import os

import boto3

from ofertas.storage.images import IMAGE_PREFIX, ImageStorage, UploadTicket

DEFAULT_BUCKET = "ofertas-images"

__all__ = ["IMAGE_PREFIX", "ImageStorage", "UploadTicket", "create_s3_client", "image_storage_from_env"]


def create_s3_client():
    session = boto3.session.Session()
    return session.client(
        "s3",
        endpoint_url=os.environ.get("AWS_S3_ENDPOINT"),
        region_name=os.environ.get("AWS_REGION", "us-east-1"),
        aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
    )


def image_storage_from_env() -> ImageStorage:
    bucket = os.environ.get("S3_BUCKET_NAME", DEFAULT_BUCKET)
    public_url = os.environ.get("S3_BUCKET_URL", f"https://{bucket}.s3.amazonaws.com")
    return ImageStorage(
        create_s3_client(),
        bucket,
        public_url,
        upload_expiry=int(os.environ.get("UPLOAD_URL_EXPIRY", 3600)),
    )
